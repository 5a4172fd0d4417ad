"""Domain <-> DTO mappers.

Converts between Message (domain) and ChatMessage (Pydantic DTO) so the
/chat wire schema stays independent of the transcript model.
"""

from typing import Sequence

from domain.models import Message
from models import ChatMessage


def message_to_dto(message: Message) -> ChatMessage:
    """Convert a domain Message to a ChatMessage DTO."""
    return ChatMessage(role=message.speaker.value, content=message.text)


def messages_to_dtos(messages: Sequence[Message]) -> list[ChatMessage]:
    """Convert a transcript snapshot to DTOs, preserving order."""
    return [message_to_dto(m) for m in messages]


def dtos_to_completion_messages(dtos: Sequence[ChatMessage]) -> list[dict[str, str]]:
    """Render DTOs as plain role/content dicts for a chat-completions payload."""
    return [{"role": dto.role, "content": dto.content} for dto in dtos]
