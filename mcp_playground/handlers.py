# Menu actions of the interactive client
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from langchain_core.tools import StructuredTool
from mcp import ClientSession, types
from mcp.shared.context import RequestContext
from pydantic import AnyUrl

from mcp_playground.console import Console
from mcp_playground.generation import Generator
from mcp_playground.results import content_text, resource_json, tool_text

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"{([^}]+)}")


@dataclass(frozen=True)
class CapabilitySet:
    """Tools, prompts and resources advertised by the server at startup"""

    tools: tuple[types.Tool, ...] = ()
    prompts: tuple[types.Prompt, ...] = ()
    resources: tuple[types.Resource, ...] = ()
    resource_templates: tuple[types.ResourceTemplate, ...] = ()


@dataclass
class ClientContext:
    session: ClientSession
    console: Console
    generator: Generator
    capabilities: CapabilitySet = field(default_factory=CapabilitySet)


async def handle_tool(ctx: ClientContext, tool: types.Tool) -> None:
    # Values stay raw strings; the server validates and coerces them
    args: dict[str, str] = {}
    for key, value in (tool.inputSchema.get("properties") or {}).items():
        type_name = value.get("type", "any") if isinstance(value, dict) else "any"
        args[key] = await ctx.console.text(f"Enter value for {key} ({type_name}):")

    logger.info(f"Calling tool {tool.name}")
    result = await ctx.session.call_tool(tool.name, args)
    ctx.console.print(tool_text(result))


def resolve_uri_placeholders(uri: str) -> list[str]:
    """Placeholder occurrences in uri, left to right, repeats included"""
    return [match.group(0) for match in PLACEHOLDER.finditer(uri)]


async def substitute_placeholders(console: Console, uri: str) -> str:
    final_uri = uri
    # A repeated placeholder is asked once per occurrence
    for placeholder in resolve_uri_placeholders(uri):
        value = await console.text(f"Enter value for {placeholder[1:-1]}:")
        final_uri = final_uri.replace(placeholder, value, 1)
    return final_uri


async def handle_resource(ctx: ClientContext, uri: str) -> None:
    final_uri = await substitute_placeholders(ctx.console, uri)

    logger.info(f"Reading resource {final_uri}")
    result = await ctx.session.read_resource(AnyUrl(final_uri))
    ctx.console.print(json.dumps(resource_json(result), indent=2))


async def handle_prompt(ctx: ClientContext, prompt: types.Prompt) -> None:
    args: dict[str, str] = {}
    for arg in prompt.arguments or []:
        args[arg.name] = await ctx.console.text(f"Enter value for {arg.name}:")

    response = await ctx.session.get_prompt(prompt.name, arguments=args)
    for message in response.messages:
        text = await handle_server_message_prompt(ctx.console, ctx.generator, message)
        if text is not None:
            ctx.console.print(text)


async def handle_server_message_prompt(
    console: Console,
    generator: Generator,
    message: types.PromptMessage | types.SamplingMessage,
) -> Optional[str]:
    """Show a server-provided message and, if the operator agrees, generate a reply.

    Returns None for non-text content or when the operator declines.
    """
    text = content_text(message.content)
    if text is None:
        return None

    console.print(text)
    if not await console.confirm("Would you like to run this prompt?", default=True):
        return None

    result = await generator.generate_text(text)
    return result.text


def make_sampling_callback(console: Console, generator: Generator):
    """Build the handler for server-initiated sampling/createMessage requests"""

    async def sampling_callback(
        context: RequestContext[ClientSession, Any],
        params: types.CreateMessageRequestParams,
    ) -> types.CreateMessageResult:
        logger.info(f"Sampling request with {len(params.messages)} messages")
        texts = []
        for message in params.messages:
            text = await handle_server_message_prompt(console, generator, message)
            if text is not None:
                texts.append(text)

        return types.CreateMessageResult(
            role="user",
            model=generator.model,
            stopReason="endTurn",
            content=types.TextContent(type="text", text="\n".join(texts)),
        )

    return sampling_callback


def normalize_input_schema(input_schema: dict[str, Any]) -> dict[str, Any]:
    """Flatten a tool schema to top-level primitive property types.

    Nested schema details are dropped; properties without a type become strings.
    """
    properties = {}
    for key, value in (input_schema.get("properties") or {}).items():
        type_name = value.get("type") if isinstance(value, dict) else None
        properties[key] = {"type": type_name or "string"}
    return {"type": "object", "properties": properties}


def _tool_executor(session: ClientSession, name: str):
    async def execute(**arguments: Any) -> list[dict[str, Any]]:
        logger.info(f"Agent calling tool {name}")
        result = await session.call_tool(name, arguments)
        return [item.model_dump(exclude_none=True) for item in result.content]

    return execute


def build_tool_table(session: ClientSession, tools: list[types.Tool]) -> list[StructuredTool]:
    """Expose MCP tools to the generation agent"""
    return [
        StructuredTool(
            name=tool.name,
            description=tool.description or "",
            args_schema=normalize_input_schema(tool.inputSchema),
            coroutine=_tool_executor(session, tool.name),
        )
        for tool in tools
    ]


async def handle_query(ctx: ClientContext, tools: list[types.Tool]) -> None:
    query = await ctx.console.text("Enter your query")

    result = await ctx.generator.generate_text(query, tools=build_tool_table(ctx.session, tools))

    text = result.text
    if not text and result.tool_results and result.tool_results[0].output:
        text = result.tool_results[0].output[0].get("text")
    ctx.console.print(text or "No text generated.")
