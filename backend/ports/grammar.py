"""GrammarAnalyzerPort: abstract interface for grammar checking."""

from abc import ABC, abstractmethod

from domain.models import Feedback


class GrammarAnalyzerPort(ABC):
    @abstractmethod
    async def analyze(self, text: str) -> Feedback:
        """Return corrections and suggestions for a user utterance.

        Raises UpstreamError when the service is unreachable or its payload
        is unusable.
        """
