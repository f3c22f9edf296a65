"""Chat domain models."""
from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class ChatMessage:
    """Chat message."""
    role: Role
    content: str

    def __post_init__(self) -> None:
        self.role = Role(self.role)

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}


@dataclass
class ChatHistory:
    """Chat history with limit."""
    messages: list[ChatMessage] = field(default_factory=list)
    max_messages: int = 10

    def add(self, message: ChatMessage) -> None:
        """Add message to history."""
        self.messages.append(message)
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]

    def add_pair(self, user_content: str, assistant_content: str) -> None:
        """Add user/assistant message pair."""
        self.add(ChatMessage(role=Role.USER, content=user_content))
        self.add(ChatMessage(role=Role.ASSISTANT, content=assistant_content))

    def with_pending(self, user_content: str) -> list[ChatMessage]:
        """History followed by a pending user turn, ready for a chat call."""
        return [*self.messages, ChatMessage(role=Role.USER, content=user_content)]

    def to_list(self) -> list[dict]:
        """Convert to list of dicts for LLM."""
        return [m.to_dict() for m in self.messages]
