import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel, GenericFakeChatModel
from langchain_core.messages import AIMessage, ToolMessage

from mcp import types

from conftest import FakeConsole, FakeSession, text_tool_result
from mcp_playground.generation import Generator, message_text, tool_output
from mcp_playground.handlers import ClientContext, build_tool_table, handle_query


def test_message_text_from_string_and_blocks():
    assert message_text(AIMessage(content="Hello")) == "Hello"
    blocks = [{"type": "text", "text": "Hello, "}, {"type": "tool_use", "id": "1"}, "Ada"]
    assert message_text(AIMessage(content=blocks)) == "Hello, Ada"


def test_tool_output_normalizes_content():
    assert tool_output("Sunny") == [{"type": "text", "text": "Sunny"}]
    message = ToolMessage(content=[{"type": "text", "text": "Sunny"}], tool_call_id="call-1")
    assert tool_output(message.content) == [{"type": "text", "text": "Sunny"}]


def test_chat_model_created_lazily(monkeypatch):
    created = []

    def fake_init_chat_model(model):
        created.append(model)
        return FakeListChatModel(responses=["Hi"])

    monkeypatch.setattr("mcp_playground.generation.init_chat_model", fake_init_chat_model)
    generator = Generator("openai:gpt-4o-mini")
    assert created == []

    generator.chat_model
    generator.chat_model
    assert created == ["openai:gpt-4o-mini"]


@pytest.mark.anyio
async def test_generate_text_without_tools():
    generator = Generator("fake")
    generator._chat_model = FakeListChatModel(responses=["Hello there, Ada!"])

    result = await generator.generate_text("Hello, Ada")

    assert result.text == "Hello there, Ada!"
    assert result.tool_results == []


class ToolCallingFakeModel(GenericFakeChatModel):
    """Scripted chat model that accepts tool bindings"""

    def bind_tools(self, tools, **kwargs):
        return self


FORECAST_TOOL = types.Tool(
    name="get_forecast",
    description="Get weather forecast for a location",
    inputSchema={
        "type": "object",
        "properties": {"latitude": {"type": "number"}, "longitude": {"type": "number"}},
    },
)


def forecast_agent(final_text: str) -> Generator:
    generator = Generator("fake")
    generator._chat_model = ToolCallingFakeModel(
        messages=iter(
            [
                AIMessage(
                    content="",
                    tool_calls=[
                        {"name": "get_forecast", "args": {"latitude": 40.7128, "longitude": -74.006}, "id": "call-1"}
                    ],
                ),
                AIMessage(content=final_text),
            ]
        )
    )
    return generator


@pytest.mark.anyio
async def test_agent_forwards_tool_calls_to_session():
    session = FakeSession(tool_result=text_tool_result("Mostly Clear"))
    generator = forecast_agent("Tonight will be mostly clear in New York.")

    result = await generator.generate_text("Weather in NYC?", tools=build_tool_table(session, [FORECAST_TOOL]))

    assert session.tool_calls == [("get_forecast", {"latitude": 40.7128, "longitude": -74.006})]
    assert len(result.tool_results) == 1
    assert result.tool_results[0].tool_name == "get_forecast"
    assert result.tool_results[0].output[0]["text"] == "Mostly Clear"
    assert result.text == "Tonight will be mostly clear in New York."


@pytest.mark.anyio
async def test_query_prints_tool_output_when_agent_gives_no_text():
    session = FakeSession(tool_result=text_tool_result("Mostly Clear"))
    ctx = ClientContext(session=session, console=FakeConsole(["Weather in NYC?"]), generator=forecast_agent(""))

    await handle_query(ctx, [FORECAST_TOOL])

    assert session.tool_calls == [("get_forecast", {"latitude": 40.7128, "longitude": -74.006})]
    assert ctx.console.output == ["Mostly Clear"]
