import json
import logging
from typing import Any, AsyncIterator

from openai import AsyncOpenAI, OpenAIError

from docchat.core.exceptions import CompletionServiceError
from docchat.core.models.agent import CompletionResult, ToolCall
from docchat.core.protocols.llm import Prompt

logger = logging.getLogger(__name__)


def _parse_arguments(raw: str | dict | None) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    try:
        args = json.loads(raw or "{}")
    except json.JSONDecodeError:
        logger.warning(f"Tool call arguments are not valid JSON: {raw!r}")
        return {}
    return args if isinstance(args, dict) else {}


class OpenAIClient:
    """LLM client for OpenAI or any OpenAI-compatible API (Ollama, vLLM)."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str = "gpt-3.5-turbo-1106",
        max_tokens: int = 1024,
        temperature: float = 0.8,
    ):
        """Initialize client.

        Args:
            base_url: API URL; None means api.openai.com.
            api_key: API key; None falls back to OPENAI_API_KEY.
            model: Model name.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
        """
        self._client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @staticmethod
    def _messages(prompt: Prompt) -> list[dict[str, Any]]:
        if isinstance(prompt, str):
            return [{"role": "user", "content": prompt}]
        return prompt

    async def stream(
        self,
        prompt: Prompt,
        temperature: float | None = None,
        model: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream completion tokens.

        Args:
            prompt: Rendered prompt or structured messages.
            temperature: Override sampling temperature.
            model: Override model.

        Yields:
            Response tokens.
        """
        model = model or self._model
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=self._messages(prompt),
                max_tokens=self._max_tokens,
                temperature=self._temperature if temperature is None else temperature,
                stream=True,
            )
            async for chunk in response:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except OpenAIError as e:
            logger.error(f"Completion stream failed (model={model}): {e}")
            raise CompletionServiceError(model=model) from e

    async def complete(
        self,
        prompt: Prompt,
        temperature: float | None = None,
        model: str | None = None,
    ) -> str:
        """Accumulate the streamed tokens into the full answer."""
        parts: list[str] = []
        async for token in self.stream(prompt, temperature=temperature, model=model):
            parts.append(token)
        return "".join(parts)

    async def complete_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        temperature: float | None = None,
        model: str | None = None,
    ) -> CompletionResult:
        """Non-streaming function-calling completion."""
        model = model or self._model
        kwargs: dict[str, Any] = {}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=self._max_tokens,
                temperature=self._temperature if temperature is None else temperature,
                **kwargs,
            )
        except OpenAIError as e:
            logger.error(f"Function-calling completion failed (model={model}): {e}")
            raise CompletionServiceError(model=model) from e

        if not response.choices:
            raise CompletionServiceError("Completion returned no choices", model=model)

        message = response.choices[0].message
        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=_parse_arguments(tc.function.arguments),
            )
            for tc in (message.tool_calls or [])
        ]
        return CompletionResult(content=message.content or "", tool_calls=tool_calls)
