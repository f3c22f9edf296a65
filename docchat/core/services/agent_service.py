"""Agent executor - bounded think/act/observe loop over function calling."""

import inspect
import itertools
import json
import logging
from typing import Any, Sequence

from ..exceptions import (
    ClientError,
    ConfigurationError,
    ConvergenceError,
    DependencyError,
    DocChatError,
    ToolExecutionError,
)
from ..models.agent import AgentResult, AgentStep, ToolCall
from ..models.chat import ChatMessage
from ..protocols.llm import LLMProtocol
from ..protocols.tool import ToolProtocol
from .chat_service import split_conversation

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are an agent that follows SI system standards and responds normally"
)


class AgentExecutor:
    """Runs one agent invocation per call to `run`.

    Each iteration sends system prompt, history, the current input and the
    scratchpad to the LLM. A final answer ends the loop; tool calls are
    executed in order and their observations appended to the scratchpad.
    After `max_iterations` LLM calls without a final answer the run fails
    with ConvergenceError.
    """

    def __init__(
        self,
        llm: LLMProtocol,
        tools: Sequence[ToolProtocol] = (),
        max_iterations: int = 5,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float | None = None,
    ):
        if max_iterations < 1:
            raise ConfigurationError(
                "max_iterations must be >= 1", details={"max_iterations": max_iterations}
            )
        self._tools: dict[str, ToolProtocol] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ConfigurationError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

        self._llm = llm
        self._max_iterations = max_iterations
        self._system_prompt = system_prompt
        self._temperature = temperature

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    def tool_definitions(self) -> list[dict[str, Any]]:
        """OpenAI-style function definitions for the registered tools."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.arguments_schema,
                },
            }
            for tool in self._tools.values()
        ]

    @staticmethod
    def _scratchpad_messages(steps: Sequence[AgentStep]) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        for _, group in itertools.groupby(steps, key=lambda s: s.iteration):
            group = list(group)
            messages.append(
                {
                    "role": "assistant",
                    "content": group[0].thought or None,
                    "tool_calls": [
                        {
                            "id": s.tool_call.id,
                            "type": "function",
                            "function": {
                                "name": s.tool_call.name,
                                "arguments": json.dumps(s.tool_call.arguments),
                            },
                        }
                        for s in group
                    ],
                }
            )
            messages.extend(
                {"role": "tool", "tool_call_id": s.tool_call.id, "content": s.observation}
                for s in group
            )
        return messages

    def _build_messages(
        self,
        history: Sequence[ChatMessage],
        current: str,
        steps: Sequence[AgentStep],
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = [{"role": "system", "content": self._system_prompt}]
        messages.extend(m.to_dict() for m in history)
        messages.append({"role": "user", "content": current})
        messages.extend(self._scratchpad_messages(steps))
        return messages

    async def _invoke_tool(self, call: ToolCall) -> str:
        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning(f"Agent requested unknown tool: {call.name}")
            available = ", ".join(self._tools) or "none"
            return f"Tool '{call.name}' does not exist. Available tools: {available}."

        try:
            result = tool.invoke(call.arguments)
            if inspect.isawaitable(result):
                result = await result
        except DocChatError:
            raise
        except Exception as e:
            logger.warning(
                f"Tool execution failed: tool={call.name}, error={type(e).__name__}: {e}",
                exc_info=True,
            )
            raise ToolExecutionError(call.name) from e

        logger.debug(f"Tool {call.name} returned {len(str(result))} chars")
        return str(result)

    async def _loop(self, history: list[ChatMessage], current: str) -> AgentResult:
        steps: list[AgentStep] = []
        tools = self.tool_definitions()

        for iteration in range(1, self._max_iterations + 1):
            result = await self._llm.complete_with_tools(
                messages=self._build_messages(history, current, steps),
                tools=tools,
                temperature=self._temperature,
            )

            if result.is_final:
                logger.info(f"Agent finished after {iteration} iteration(s)")
                return AgentResult(output=result.content, steps=steps, iterations=iteration)

            for call in result.tool_calls:
                logger.info(f"[iteration {iteration}] tool call: {call.name}")
                observation = await self._invoke_tool(call)
                steps.append(
                    AgentStep(
                        iteration=iteration,
                        thought=result.content,
                        tool_call=call,
                        observation=observation,
                    )
                )

        logger.warning(f"Agent did not converge within {self._max_iterations} iterations")
        raise ConvergenceError(self._max_iterations)

    async def run(self, messages: Sequence[ChatMessage]) -> AgentResult:
        """Answer the last user message, calling tools as the LLM requests.

        Args:
            messages: Conversation; the last element is the pending user turn.

        Returns:
            Final answer with the scratchpad of this run.

        Raises:
            InvalidConversationError: Empty conversation or last turn not from the user.
            ConvergenceError: Iteration budget exhausted.
            DependencyError: LLM or tool failure.
        """
        history, current = split_conversation(messages)
        try:
            return await self._loop(history, current)
        except (ClientError, ConvergenceError):
            raise
        except DependencyError as e:
            logger.error(f"Agent dependency failure: {e.code}: {e.message}", exc_info=True)
            raise
        except Exception as e:
            logger.error(f"Agent run failed: {type(e).__name__}: {e}", exc_info=True)
            raise DependencyError("Agent run failed") from e
