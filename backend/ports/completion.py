"""CompletionPort: abstract interface for the upstream language model."""

from abc import ABC, abstractmethod


class CompletionPort(ABC):
    @abstractmethod
    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Run a chat completion over role/content messages and return the text."""

    @abstractmethod
    def model_name(self) -> str:
        """Return the upstream model identifier."""
