import pytest

from docchat.core.exceptions import (
    ConfigurationError,
    ConvergenceError,
    DependencyError,
    InvalidConversationError,
    ToolExecutionError,
)
from docchat.core.models.agent import CompletionResult, ToolCall
from docchat.core.models.chat import ChatMessage
from docchat.core.services.agent_service import DEFAULT_SYSTEM_PROMPT, AgentExecutor

from .fakes import AsyncRecordingTool, RecordingTool, ScriptedLLM


def _ask(text: str, *history: tuple[str, str]) -> list[ChatMessage]:
    return [ChatMessage(role=r, content=c) for r, c in history] + [
        ChatMessage(role="user", content=text)
    ]


def _tool_request(name: str = "lookup", call_id: str = "call_1", **arguments) -> CompletionResult:
    return CompletionResult(
        content="",
        tool_calls=[ToolCall(id=call_id, name=name, arguments=arguments or {"query": "x"})],
    )


class TestAgentLoop:
    @pytest.mark.asyncio
    async def test_final_answer_without_tools(self):
        llm = ScriptedLLM(script=[CompletionResult(content="Hello!")])
        agent = AgentExecutor(llm=llm)

        result = await agent.run(_ask("hi"))

        assert result.output == "Hello!"
        assert result.iterations == 1
        assert result.steps == []
        assert llm.tool_calls[0]["tools"] == []

    @pytest.mark.asyncio
    async def test_prompt_layout(self):
        llm = ScriptedLLM(script=[CompletionResult(content="done")])
        agent = AgentExecutor(llm=llm)

        await agent.run(_ask("and now?", ("user", "first"), ("assistant", "reply")))

        messages = llm.tool_calls[0]["messages"]
        assert messages[0] == {"role": "system", "content": DEFAULT_SYSTEM_PROMPT}
        assert messages[1:] == [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "reply"},
            {"role": "user", "content": "and now?"},
        ]

    @pytest.mark.asyncio
    async def test_tool_observation_feeds_next_iteration(self):
        tool = RecordingTool(result="Paris")
        llm = ScriptedLLM(
            script=[
                _tool_request(query="capital of France"),
                CompletionResult(content="The capital is Paris."),
            ]
        )
        agent = AgentExecutor(llm=llm, tools=[tool])

        result = await agent.run(_ask("What is the capital of France?"))

        assert result.output == "The capital is Paris."
        assert result.iterations == 2
        assert tool.calls == [{"query": "capital of France"}]
        assert [s.observation for s in result.steps] == ["Paris"]

        second = llm.tool_calls[1]["messages"]
        assert second[-2]["role"] == "assistant"
        assert second[-2]["tool_calls"][0]["function"]["name"] == "lookup"
        assert second[-1] == {"role": "tool", "tool_call_id": "call_1", "content": "Paris"}

    @pytest.mark.asyncio
    async def test_async_tool_is_awaited(self):
        tool = AsyncRecordingTool(result="async result")
        llm = ScriptedLLM(script=[_tool_request(), CompletionResult(content="ok")])

        result = await AgentExecutor(llm=llm, tools=[tool]).run(_ask("go"))

        assert result.steps[0].observation == "async result"

    @pytest.mark.asyncio
    async def test_several_tools_in_one_turn_run_in_order(self):
        first = RecordingTool(name="first", result="1")
        second = AsyncRecordingTool(name="second", result="2")
        llm = ScriptedLLM(
            script=[
                CompletionResult(
                    tool_calls=[
                        ToolCall(id="a", name="first", arguments={"query": "a"}),
                        ToolCall(id="b", name="second", arguments={"query": "b"}),
                    ]
                ),
                CompletionResult(content="both done"),
            ]
        )
        agent = AgentExecutor(llm=llm, tools=[first, second])

        result = await agent.run(_ask("go"))

        assert [s.tool_call.name for s in result.steps] == ["first", "second"]
        assert {s.iteration for s in result.steps} == {1}
        tool_messages = [m for m in llm.tool_calls[1]["messages"] if m["role"] == "tool"]
        assert [m["tool_call_id"] for m in tool_messages] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_observation(self):
        llm = ScriptedLLM(script=[_tool_request(name="ghost"), CompletionResult(content="sorry")])
        agent = AgentExecutor(llm=llm, tools=[RecordingTool()])

        result = await agent.run(_ask("go"))

        assert result.output == "sorry"
        assert "does not exist" in result.steps[0].observation


class TestAgentFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_iterations", [1, 3, 5])
    async def test_never_final_raises_convergence_error_at_cap(self, max_iterations):
        tool = RecordingTool()
        llm = ScriptedLLM(always=_tool_request())
        agent = AgentExecutor(llm=llm, tools=[tool], max_iterations=max_iterations)

        with pytest.raises(ConvergenceError) as exc_info:
            await agent.run(_ask("loop forever"))

        assert exc_info.value.iterations == max_iterations
        assert exc_info.value.status_code == 504
        assert len(llm.tool_calls) == max_iterations
        assert len(tool.calls) == max_iterations

    @pytest.mark.asyncio
    async def test_tool_exception_is_tool_execution_error(self):
        tool = RecordingTool(error=ValueError("token=abc123"))
        llm = ScriptedLLM(script=[_tool_request(), CompletionResult(content="unused")])
        agent = AgentExecutor(llm=llm, tools=[tool])

        with pytest.raises(ToolExecutionError) as exc_info:
            await agent.run(_ask("go"))

        assert isinstance(exc_info.value, DependencyError)
        assert exc_info.value.details["tool_name"] == "lookup"
        assert "abc123" not in str(exc_info.value.to_dict())

    @pytest.mark.asyncio
    async def test_llm_failure_is_dependency_error(self):
        agent = AgentExecutor(llm=ScriptedLLM(error=RuntimeError("socket closed")))

        with pytest.raises(DependencyError):
            await agent.run(_ask("go"))

    @pytest.mark.asyncio
    async def test_conversation_must_end_with_user(self):
        agent = AgentExecutor(llm=ScriptedLLM())
        with pytest.raises(InvalidConversationError):
            await agent.run([ChatMessage(role="assistant", content="hi")])


class TestAgentConfiguration:
    def test_max_iterations_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            AgentExecutor(llm=ScriptedLLM(), max_iterations=0)

    def test_duplicate_tool_names_rejected(self):
        with pytest.raises(ConfigurationError):
            AgentExecutor(llm=ScriptedLLM(), tools=[RecordingTool(), RecordingTool()])

    def test_tool_definitions(self):
        agent = AgentExecutor(llm=ScriptedLLM(), tools=[RecordingTool(name="lookup")])
        [definition] = agent.tool_definitions()
        assert definition["type"] == "function"
        assert definition["function"]["name"] == "lookup"
        assert definition["function"]["parameters"]["required"] == ["query"]
