"""LLM protocol for dependency injection."""
from typing import Any, AsyncIterator, Protocol, runtime_checkable

from ..models.agent import CompletionResult

# A bare prompt string or OpenAI-style role/content messages
Prompt = str | list[dict[str, Any]]


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for LLM client."""

    def stream(
        self,
        prompt: Prompt,
        temperature: float | None = None,
        model: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream completion tokens.

        Args:
            prompt: Prompt string or structured messages.
            temperature: Override sampling temperature.
            model: Override model name.

        Yields:
            Response tokens.
        """
        ...

    async def complete(
        self,
        prompt: Prompt,
        temperature: float | None = None,
        model: str | None = None,
    ) -> str:
        """Return the full generated text."""
        ...

    async def complete_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        temperature: float | None = None,
        model: str | None = None,
    ) -> CompletionResult:
        """Function-calling completion.

        Args:
            messages: Structured conversation.
            tools: OpenAI tool definitions; empty list disables tool calling.

        Returns:
            Final content or the requested tool calls.
        """
        ...
