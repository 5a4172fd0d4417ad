"""Framework-agnostic domain models for French Buddy.

These are the values the conversation engine passes around. The wire DTOs
(Pydantic) live in models.py, with mappers at the boundary.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionState(str, Enum):
    """Control states of a single conversation session."""

    IDLE = "idle"
    CAPTURING = "capturing"
    PROCESSING = "processing"
    SPEAKING = "speaking"
    MUTED = "muted"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    """One half of a conversational turn."""
    id: int
    speaker: Speaker
    text: str
    timestamp: datetime = field(default_factory=datetime.now)
    corrections: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()

    @property
    def is_user(self) -> bool:
        return self.speaker is Speaker.USER


@dataclass(frozen=True)
class Feedback:
    """Grammar corrections and encouragement for one user utterance."""
    corrections: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class Utterance:
    """A finalized capture result."""
    text: str


@dataclass(frozen=True)
class Turn:
    """A committed user/assistant pair."""
    user: Message
    assistant: Message


@dataclass(frozen=True)
class Voice:
    """A voice offered by a playback engine."""
    id: str
    name: str
    language: str = ""
