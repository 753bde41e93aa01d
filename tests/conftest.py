# Shared test doubles for the interactive client
from typing import Any, Callable, Optional, Union

import pytest
from mcp import types

from mcp_playground.generation import GenerationResult


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeConsole:
    """Scripted operator: answers are consumed in order, EOFError when exhausted"""

    def __init__(self, answers: Optional[list[Any]] = None):
        self.answers = list(answers or [])
        self.asked: list[str] = []
        self.menus: list[tuple[str, list]] = []
        self.output: list[str] = []
        self.errors: list[str] = []

    def _next(self, message: str) -> Any:
        self.asked.append(message)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    async def select(self, message, choices):
        self.menus.append((message, choices))
        return self._next(message)

    async def text(self, message):
        return self._next(message)

    async def confirm(self, message, default=True):
        return self._next(message)

    def print(self, text):
        self.output.append(text)

    def error(self, text):
        self.errors.append(text)


class FakeGenerator:
    def __init__(self, reply: Union[GenerationResult, Callable[[str], str], str] = ""):
        self.model = "test-model"
        self.reply = reply
        self.requests: list[tuple[str, Any]] = []

    async def generate_text(self, prompt, tools=None):
        self.requests.append((prompt, tools))
        if isinstance(self.reply, GenerationResult):
            return self.reply
        if callable(self.reply):
            return GenerationResult(text=self.reply(prompt))
        return GenerationResult(text=self.reply)


class FakeSession:
    def __init__(self, tool_result=None, resource_result=None, prompt_result=None):
        self.tool_result = tool_result or text_tool_result("ok")
        self.resource_result = resource_result
        self.prompt_result = prompt_result
        self.tool_calls: list[tuple[str, dict]] = []
        self.resource_reads: list[str] = []
        self.prompt_requests: list[tuple[str, dict]] = []

    async def call_tool(self, name, arguments=None):
        self.tool_calls.append((name, arguments))
        return self.tool_result

    async def read_resource(self, uri):
        self.resource_reads.append(str(uri))
        return self.resource_result

    async def get_prompt(self, name, arguments=None):
        self.prompt_requests.append((name, arguments))
        return self.prompt_result


def text_tool_result(text: str) -> types.CallToolResult:
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])


def json_resource_result(uri: str, text: str) -> types.ReadResourceResult:
    return types.ReadResourceResult(
        contents=[types.TextResourceContents(uri=uri, mimeType="application/json", text=text)]
    )
