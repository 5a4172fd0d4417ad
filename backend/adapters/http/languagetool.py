"""LanguageToolAnalyzer: grammar checking via the LanguageTool HTTP API."""

import logging
from typing import Optional

import httpx

from domain.errors import UpstreamError
from domain.models import Feedback
from feedback import build_feedback
from models import GrammarCheckResponse
from ports.grammar import GrammarAnalyzerPort

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.languagetool.org/v2/check"


class LanguageToolAnalyzer(GrammarAnalyzerPort):
    """Stateless: every call builds its own client and its own Feedback."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        language: str = "fr",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._language = language
        self._timeout = timeout
        self._transport = transport

    async def analyze(self, text: str) -> Feedback:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(self._url, data={"text": text, "language": self._language})
                r.raise_for_status()
                result = GrammarCheckResponse.model_validate(r.json())
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Grammar service timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Grammar service request failed: {e}") from e
        except ValueError as e:
            # Covers both JSON decoding and schema validation errors
            raise UpstreamError(f"Grammar service returned an unusable payload: {e}") from e

        logger.info(f"Grammar check found {len(result.matches)} matches")
        return build_feedback(text, result.matches)
