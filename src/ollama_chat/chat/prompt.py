"""Assemble the outbound chat request from instruction, history and question."""

from dataclasses import dataclass
from typing import Iterable

from ollama_chat.db import Message, Role
from ollama_chat.errors import InvalidRole


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "system" | "user" | "assistant"
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class PromptRequest:
    """Ordered messages plus the sampling temperature to use."""

    messages: tuple[ChatMessage, ...]
    temperature: float

    def to_payload(self) -> list[dict]:
        return [m.to_dict() for m in self.messages]


def _history_message(message: Message) -> ChatMessage:
    if message.role == Role.USER:
        return ChatMessage(role="user", content=message.content)
    if message.role == Role.ASSISTANT:
        return ChatMessage(role="assistant", content=message.content)
    raise InvalidRole(f"Unknown message role: {message.role!r}")


def assemble_prompt(
    system_prompt: str,
    history: Iterable[Message],
    question: str,
    temperature: float,
) -> PromptRequest:
    """
    Build [system, *history, user(question)].

    The history is taken as given; windowing happens before this call.
    """
    messages = [ChatMessage(role="system", content=system_prompt)]
    messages.extend(_history_message(m) for m in history)
    messages.append(ChatMessage(role="user", content=question))
    return PromptRequest(messages=tuple(messages), temperature=temperature)
