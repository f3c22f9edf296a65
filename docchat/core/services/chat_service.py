"""Chat service - renders a prompt per chat mode and calls the LLM."""

import json
import logging
from typing import Any, Awaitable, Sequence

from ..exceptions import ClientError, DependencyError, InvalidConversationError
from ..models.chat import ChatMessage, Role
from ..models.document import SearchResult
from ..prompts import BASIC_CHAT, CONTEXT_AWARE_CHAT, DOCUMENT_CONTEXT_CHAT
from ..protocols.llm import LLMProtocol
from .prompt_service import PromptService
from .vector_store_service import VectorStoreService

logger = logging.getLogger(__name__)


def format_history(messages: Sequence[ChatMessage]) -> str:
    """Format messages as "<role>: <content>" lines in conversation order."""
    return "\n".join(f"{m.role.value}: {m.content}" for m in messages)


def format_context(results: Sequence[SearchResult]) -> str:
    """Serialize retrieved chunks, keeping the store's ranking order."""
    if not results:
        return ""
    return json.dumps([r.to_dict() for r in results], ensure_ascii=False)


def split_conversation(messages: Sequence[ChatMessage]) -> tuple[list[ChatMessage], str]:
    """Split into (answered history, pending user input)."""
    if not messages:
        raise InvalidConversationError("Conversation is empty.")
    if messages[-1].role != Role.USER:
        raise InvalidConversationError()
    return list(messages[:-1]), messages[-1].content


class ChatService:
    """Basic, context-aware and document-context chat."""

    def __init__(
        self,
        llm: LLMProtocol,
        vector_store: VectorStoreService,
        prompts: PromptService,
        document_top_k: int = 3,
    ):
        """Initialize chat service.

        Args:
            llm: LLM client.
            vector_store: Vector store used by document chat.
            prompts: Template registry.
            document_top_k: Number of chunks retrieved for document chat.
        """
        self._llm = llm
        self._vector_store = vector_store
        self._prompts = prompts
        self._document_top_k = document_top_k

    async def _guarded(self, mode: str, operation: Awaitable[str]) -> str:
        try:
            return await operation
        except ClientError:
            raise
        except DependencyError as e:
            logger.error(f"[{mode}] chat failed: {e.code}: {e.message}", exc_info=True)
            raise
        except Exception as e:
            logger.error(f"[{mode}] chat failed: {type(e).__name__}: {e}", exc_info=True)
            raise DependencyError(f"{mode} chat failed") from e

    async def _complete(self, template: str, variables: dict[str, Any]) -> str:
        prompt = self._prompts.render(template, variables)
        return await self._llm.complete(prompt)

    async def basic_chat(self, query: str) -> str:
        """Single-turn answer."""
        return await self._guarded(
            "basic", self._complete(BASIC_CHAT, {"input": query})
        )

    async def context_aware_chat(self, messages: Sequence[ChatMessage]) -> str:
        """Answer the last user message with the earlier turns as history.

        Args:
            messages: Conversation; the last element is the pending user turn.

        Returns:
            Generated answer.
        """
        history, current = split_conversation(messages)
        return await self._guarded(
            "context-aware",
            self._complete(
                CONTEXT_AWARE_CHAT,
                {"chat_history": format_history(history), "input": current},
            ),
        )

    async def document_chat(self, query: str) -> str:
        """Answer with the closest stored chunks as context."""

        async def run() -> str:
            results = await self._vector_store.similarity_search(query, self._document_top_k)
            if not results:
                logger.info(f"No stored context for '{query[:50]}...'")
            return await self._complete(
                DOCUMENT_CONTEXT_CHAT,
                {"context": format_context(results), "question": query},
            )

        return await self._guarded("document", run())
