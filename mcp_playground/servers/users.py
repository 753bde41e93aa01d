# User directory MCP server backed by a flat JSON file
import json
import logging
import sys
from pathlib import Path

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.prompts import base
from mcp.types import SamplingMessage, TextContent, ToolAnnotations
from pydantic import BaseModel

from mcp_playground.config import Settings, configure_logging

logger = logging.getLogger(__name__)

mcp = FastMCP("users")


class User(BaseModel):
    id: int
    name: str
    email: str
    address: str
    phone: str


class UserStore:
    """Users kept as a JSON array on disk, re-read on every access"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[User]:
        if not self.path.exists():
            return []
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return [User(**item) for item in data]

    def get(self, user_id: int) -> User | None:
        return next((u for u in self.load() if u.id == user_id), None)

    def create(self, name: str, email: str, address: str, phone: str) -> User:
        users = self.load()
        user = User(id=len(users) + 1, name=name, email=email, address=address, phone=phone)
        users.append(user)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps([u.model_dump() for u in users], indent=2), encoding="utf-8"
        )
        logger.info(f"Saved user {user.id} to {self.path}")
        return user


store = UserStore(Settings.from_env().users_file)

FAKE_USER_REQUEST = (
    "Generate fake user data. The user should have a realistic name, email, address, "
    "and phone number. Return this data as a JSON object with no other text or "
    "formatting so it can be parsed as JSON."
)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one"""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def save_user(name: str, email: str, address: str, phone: str) -> str:
    try:
        user = store.create(name=name, email=email, address=address, phone=phone)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to save user {name}: {e}")
        return "Failed to save user"
    return f"User {user.id} created successfully"


@mcp.tool(
    name="create-user",
    description="Create a new user in the database",
    annotations=ToolAnnotations(
        title="Create User",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    ),
)
def create_user(name: str, email: str, address: str, phone: str) -> str:
    return save_user(name, email, address, phone)


@mcp.tool(
    name="create-random-user",
    description="Create a random user with fake data",
    annotations=ToolAnnotations(
        title="Create Random User",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    ),
)
async def create_random_user(ctx: Context) -> str:
    # Ask the connected client to generate the data through sampling
    result = await ctx.session.create_message(
        messages=[
            SamplingMessage(role="user", content=TextContent(type="text", text=FAKE_USER_REQUEST))
        ],
        max_tokens=1024,
    )
    if not isinstance(result.content, TextContent):
        return "Failed to generate user data"

    try:
        fake_user = json.loads(strip_code_fence(result.content.text))
        return save_user(
            name=fake_user["name"],
            email=fake_user["email"],
            address=fake_user["address"],
            phone=fake_user["phone"],
        )
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        logger.warning(f"Unusable generated user data: {e}")
        return "Failed to generate user data"


@mcp.resource(
    "users://all",
    name="Users",
    description="Get all users data from the database",
    mime_type="application/json",
)
def all_users() -> str:
    return json.dumps([u.model_dump() for u in store.load()])


@mcp.resource(
    "users://{user_id}/profile",
    name="User Details",
    description="Get a user's details from the database",
    mime_type="application/json",
)
def user_profile(user_id: str) -> str:
    user = store.get(int(user_id)) if user_id.isdigit() else None
    if user is None:
        return json.dumps({"error": "User not found"})
    return json.dumps(user.model_dump())


@mcp.prompt(name="generate-fake-user", description="Generate a fake user based on a given name")
def generate_fake_user(name: str) -> list[base.Message]:
    return [
        base.UserMessage(
            f"Generate a fake user with the name {name}. The user should have a "
            "realistic email, address, and phone number."
        )
    ]


def main() -> None:
    configure_logging("INFO")
    # Valid options: stdio, sse, streamable-http
    transport = sys.argv[1] if len(sys.argv) > 1 else "stdio"
    logger.info(f"Starting users server ({transport}), store at {store.path}")
    mcp.run(transport=transport)


if __name__ == "__main__":
    main()
