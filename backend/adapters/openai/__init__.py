"""OpenAI-compatible chat-completions adapter."""

from .completion import OpenAICompletionAdapter

__all__ = ["OpenAICompletionAdapter"]
