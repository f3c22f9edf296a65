"""Agent and function-calling models."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ToolCall:
    """Tool invocation requested by the completion service."""
    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class CompletionResult:
    """Function-calling completion: either final content or tool calls."""
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)

    @property
    def is_final(self) -> bool:
        return not self.tool_calls


@dataclass
class AgentStep:
    """One scratchpad entry: a tool request and what it returned."""
    iteration: int
    thought: str
    tool_call: Optional[ToolCall] = None
    observation: Optional[str] = None


@dataclass
class AgentResult:
    output: str
    steps: list[AgentStep]
    iterations: int
