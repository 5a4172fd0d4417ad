"""ResponseGeneratorPort: abstract interface for the remote reply service."""

from abc import ABC, abstractmethod
from typing import Sequence

from domain.models import Message


class ResponseGeneratorPort(ABC):
    @abstractmethod
    async def generate(self, history: Sequence[Message], user_input: str) -> str:
        """Return the assistant reply to user_input given the prior history.

        Raises UpstreamError when the service cannot produce a reply.
        """
