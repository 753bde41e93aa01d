# Interactive MCP client: browse and run a server's tools, resources and prompts
import asyncio
import logging
import os
import sys
from contextlib import AsyncExitStack
from typing import Any

import anyio
from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError

from mcp_playground import __version__
from mcp_playground.config import Settings, configure_logging
from mcp_playground.console import Choice, Console
from mcp_playground.generation import Generator
from mcp_playground.handlers import (
    CapabilitySet,
    ClientContext,
    handle_prompt,
    handle_query,
    handle_resource,
    handle_tool,
    make_sampling_callback,
)

logger = logging.getLogger(__name__)


def first_exception(exc: BaseException) -> BaseException:
    """First leaf of a (possibly nested) task group error"""
    while isinstance(exc, BaseExceptionGroup) and exc.exceptions:
        exc = exc.exceptions[0]
    return exc


MENU = [Choice(name=option, value=option) for option in ("Query", "Tools", "Resources", "Prompts")]


async def fetch_capabilities(session: ClientSession) -> CapabilitySet:
    """List tools, prompts, resources and resource templates concurrently"""
    results: dict[str, Any] = {}

    async def fetch(key: str, request) -> None:
        try:
            results[key] = await request()
        except Exception as e:
            raise RuntimeError(f"Could not list {key}: {e}") from e

    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(fetch, "tools", session.list_tools)
            tg.start_soon(fetch, "prompts", session.list_prompts)
            tg.start_soon(fetch, "resources", session.list_resources)
            tg.start_soon(fetch, "resource_templates", session.list_resource_templates)
    except BaseExceptionGroup as eg:
        raise first_exception(eg)

    return CapabilitySet(
        tools=tuple(results["tools"].tools),
        prompts=tuple(results["prompts"].prompts),
        resources=tuple(results["resources"].resources),
        resource_templates=tuple(results["resource_templates"].resourceTemplates),
    )


def tool_label(tool: types.Tool) -> str:
    if tool.annotations and tool.annotations.title:
        return tool.annotations.title
    return tool.title or tool.name


async def select_tool(ctx: ClientContext) -> None:
    tools = ctx.capabilities.tools
    tool_name = await ctx.console.select(
        "Select a tool",
        [Choice(name=tool_label(t), value=t.name, description=t.description) for t in tools],
    )
    tool = next((t for t in tools if t.name == tool_name), None)
    if tool is None:
        ctx.console.error("Tool not found")
        return
    await handle_tool(ctx, tool)


async def select_resource(ctx: ClientContext) -> None:
    resources = ctx.capabilities.resources
    templates = ctx.capabilities.resource_templates
    choices = [Choice(name=r.name, value=str(r.uri), description=r.description) for r in resources]
    choices += [
        Choice(name=t.name, value=t.uriTemplate, description=t.description) for t in templates
    ]
    resource_uri = await ctx.console.select("Select a resource", choices)

    uri = next((str(r.uri) for r in resources if str(r.uri) == resource_uri), None)
    if uri is None:
        uri = next((t.uriTemplate for t in templates if t.uriTemplate == resource_uri), None)
    if uri is None:
        ctx.console.error("Resource not found")
        return
    await handle_resource(ctx, uri)


async def select_prompt(ctx: ClientContext) -> None:
    prompts = ctx.capabilities.prompts
    prompt_name = await ctx.console.select(
        "Select a prompt",
        [Choice(name=p.name, value=p.name, description=p.description) for p in prompts],
    )
    prompt = next((p for p in prompts if p.name == prompt_name), None)
    if prompt is None:
        ctx.console.error("Prompt not found")
        return
    await handle_prompt(ctx, prompt)


async def run_action(ctx: ClientContext, option: str) -> None:
    if option == "Tools":
        await select_tool(ctx)
    elif option == "Resources":
        await select_resource(ctx)
    elif option == "Prompts":
        await select_prompt(ctx)
    elif option == "Query":
        await handle_query(ctx, list(ctx.capabilities.tools))


async def run_loop(ctx: ClientContext) -> None:
    """Menu loop; only a closed stdin or an interrupt ends it"""
    while True:
        option = await ctx.console.select("What do you want to do?", MENU)
        try:
            await run_action(ctx, option)
        except EOFError:
            raise
        except Exception as e:
            logger.debug(f"{option} action failed", exc_info=True)
            ctx.console.error(f"Error: {e}")


async def connect(stack: AsyncExitStack, settings: Settings, console: Console, generator: Generator) -> ClientSession:
    """Launch the server process and open an initialized session on it"""
    server_params = StdioServerParameters(
        command=settings.server_command,
        args=settings.server_args,
    )
    # Server stderr is discarded unless a log file is configured
    errlog = stack.enter_context(open(settings.server_log or os.devnull, "a"))

    try:
        read, write = await stack.enter_async_context(stdio_client(server_params, errlog=errlog))
    except OSError as e:
        raise ConnectionError(f"Could not start MCP server {settings.server_command!r}: {e}") from e

    session = await stack.enter_async_context(
        ClientSession(
            read,
            write,
            sampling_callback=make_sampling_callback(console, generator),
            client_info=types.Implementation(name="mcp-playground-client", version=__version__),
        )
    )
    try:
        await session.initialize()
    except McpError as e:
        raise ConnectionError(f"MCP server {settings.server_command!r} did not complete the handshake: {e}") from e
    return session


async def main(settings: Settings) -> None:
    console = Console()
    generator = Generator(settings.model)

    try:
        async with AsyncExitStack() as stack:
            session = await connect(stack, settings, console, generator)
            capabilities = await fetch_capabilities(session)
            logger.info(
                f"Server offers {len(capabilities.tools)} tools, {len(capabilities.prompts)} prompts, "
                f"{len(capabilities.resources) + len(capabilities.resource_templates)} resources"
            )

            ctx = ClientContext(session=session, console=console, generator=generator, capabilities=capabilities)
            console.print("You are connected to the MCP server!")
            await run_loop(ctx)
    except BaseExceptionGroup as eg:
        # Session task groups wrap whatever ended the loop
        raise first_exception(eg)


def run() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        asyncio.run(main(settings))
    except (KeyboardInterrupt, EOFError):
        print("\nShutting down...")
    except Exception as e:
        logger.debug("Fatal error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
