"""Outbound HTTP adapters for the reply and grammar services."""

from .chat_client import HttpResponseGenerator
from .languagetool import LanguageToolAnalyzer

__all__ = ["HttpResponseGenerator", "LanguageToolAnalyzer"]
