"""StatusPort: abstract interface for transient user-visible status text."""

from abc import ABC, abstractmethod


class StatusPort(ABC):
    @abstractmethod
    def report(self, message: str, kind: str = "info") -> None:
        """Show a status line. kind: info, success, error."""
