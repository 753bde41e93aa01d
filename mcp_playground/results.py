# Typed extraction of the parts of MCP results the client prints
import json
from typing import Any, Optional

from mcp import types


class MalformedResponseError(ValueError):
    """A server reply did not have the shape the client needs"""


def content_text(content: Any) -> Optional[str]:
    """Return the text of a content block, or None for non-text content"""
    if isinstance(content, types.TextContent):
        return content.text
    return None


def tool_text(result: types.CallToolResult) -> str:
    """Text of the first content entry of a tool result"""
    if not result.content:
        raise MalformedResponseError("Tool returned no content")

    text = content_text(result.content[0])
    if text is None:
        raise MalformedResponseError(
            f"Tool returned {result.content[0].type} content instead of text"
        )
    return text


def resource_json(result: types.ReadResourceResult) -> Any:
    """Parse the first content item of a resource as JSON"""
    if not result.contents:
        raise MalformedResponseError("Resource returned no contents")

    first = result.contents[0]
    if not isinstance(first, types.TextResourceContents):
        raise MalformedResponseError(f"Resource {first.uri} is not text")

    try:
        return json.loads(first.text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Resource {first.uri} is not valid JSON: {e}") from e
