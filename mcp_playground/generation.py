# LLM text generation for free-text queries and sampling requests
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from langchain.chat_models import init_chat_model
from langchain_core.messages import BaseMessage, ToolMessage
from langchain_core.tools import BaseTool
from langgraph.prebuilt import create_react_agent

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    tool_name: str
    output: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class GenerationResult:
    text: str
    tool_results: list[ToolResult] = field(default_factory=list)


def message_text(message: BaseMessage) -> str:
    """Flatten the text blocks of a LangChain message"""
    content = message.content
    if isinstance(content, str):
        return content

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def tool_output(content: Any) -> list[dict[str, Any]]:
    """Normalize ToolMessage content to a list of content entries"""
    if isinstance(content, str):
        return [{"type": "text", "text": content}]

    entries = []
    for item in content:
        if isinstance(item, dict):
            entries.append(item)
        else:
            entries.append({"type": "text", "text": str(item)})
    return entries


class Generator:
    """Hosted chat model, optionally driving MCP tools through a ReAct agent.

    The chat model is built on first use, so a missing API key only
    surfaces when generation is actually requested.
    """

    def __init__(self, model: str):
        self.model = model
        self._chat_model = None

    @property
    def chat_model(self):
        if self._chat_model is None:
            self._chat_model = init_chat_model(self.model)
        return self._chat_model

    async def generate_text(
        self, prompt: str, tools: Optional[list[BaseTool]] = None
    ) -> GenerationResult:
        if tools is None:
            logger.debug(f"Generating text with {self.model}")
            reply = await self.chat_model.ainvoke(prompt)
            return GenerationResult(text=message_text(reply))

        logger.debug(f"Running agent with {self.model} and {len(tools)} tools")
        agent = create_react_agent(self.chat_model, tools)
        state = await agent.ainvoke({"messages": [{"role": "user", "content": prompt}]})
        messages = state["messages"]

        tool_results = [
            ToolResult(tool_name=m.name or "", output=tool_output(m.content))
            for m in messages
            if isinstance(m, ToolMessage)
        ]
        logger.info(f"Agent made {len(tool_results)} tool calls")
        return GenerationResult(text=message_text(messages[-1]), tool_results=tool_results)
