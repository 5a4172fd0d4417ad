"""CaptureEngine: abstract interface for host speech-to-text engines."""

from abc import ABC, abstractmethod


class CaptureEngine(ABC):
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the engine (library, microphone) is usable on this host."""

    @abstractmethod
    async def listen(self, language: str) -> str:
        """Capture a single phrase and return its final transcript.

        Raises RecognitionError when the engine reports a failure.
        """

    @abstractmethod
    def stop(self) -> None:
        """Abort an ongoing listen. No-op when nothing is being captured."""
