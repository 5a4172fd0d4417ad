"""PlaybackEngine: abstract interface for host text-to-speech engines."""

from abc import ABC, abstractmethod
from typing import Optional

from domain.models import Voice


class PlaybackEngine(ABC):
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the engine is usable on this host."""

    @abstractmethod
    def voices(self) -> list[Voice]:
        """Installed voices, in engine order."""

    @abstractmethod
    async def speak(
        self,
        text: str,
        language: str,
        rate: float = 1.0,
        voice: Optional[Voice] = None,
    ) -> None:
        """Speak text and return once the audio has finished.

        rate is relative to the engine default (1.0 = unchanged).
        """

    @abstractmethod
    def stop(self) -> None:
        """Silence the engine immediately."""
