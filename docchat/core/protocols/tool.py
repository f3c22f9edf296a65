"""Agent tool protocol."""
from typing import Any, Awaitable, Protocol, runtime_checkable


@runtime_checkable
class ToolProtocol(Protocol):
    """Tool callable by the agent.

    `invoke` may be a plain function or a coroutine function.
    """

    name: str
    description: str

    @property
    def arguments_schema(self) -> dict[str, Any]:
        """JSON schema of the arguments object."""
        ...

    def invoke(self, arguments: dict[str, Any]) -> str | Awaitable[str]:
        ...
