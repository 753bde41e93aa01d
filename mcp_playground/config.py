# Environment-driven settings shared by the client and the demo servers
import logging
import os
import shlex
import sys
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

DEFAULT_MODEL = "openai:gpt-4o-mini"
DEFAULT_SERVER_ARGS = "-m mcp_playground.servers.users"


class Settings(BaseModel):
    """Process configuration, read once at startup"""

    server_command: str = Field(default_factory=lambda: sys.executable)
    server_args: list[str] = Field(default_factory=lambda: shlex.split(DEFAULT_SERVER_ARGS))
    server_log: Optional[Path] = None
    model: str = DEFAULT_MODEL
    log_level: str = "WARNING"
    users_file: Path = Path("data/users.json")

    @classmethod
    def from_env(cls) -> "Settings":
        # Values already in the environment win over the .env file
        load_dotenv(find_dotenv(usecwd=True))

        values = {}
        if os.getenv("MCP_SERVER_COMMAND"):
            values["server_command"] = os.environ["MCP_SERVER_COMMAND"]
        if os.getenv("MCP_SERVER_ARGS") is not None:
            values["server_args"] = shlex.split(os.environ["MCP_SERVER_ARGS"])
        if os.getenv("MCP_SERVER_LOG"):
            values["server_log"] = os.environ["MCP_SERVER_LOG"]
        if os.getenv("MCP_PLAYGROUND_MODEL"):
            values["model"] = os.environ["MCP_PLAYGROUND_MODEL"]
        if os.getenv("LOG_LEVEL"):
            values["log_level"] = os.environ["LOG_LEVEL"].upper()
        if os.getenv("USERS_FILE"):
            values["users_file"] = os.environ["USERS_FILE"]
        return cls(**values)


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout belongs to the console or the stdio transport"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
