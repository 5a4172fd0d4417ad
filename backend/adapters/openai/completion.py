"""OpenAICompletionAdapter: chat completions over any OpenAI-compatible API."""

import logging
from typing import Optional

import httpx

from domain.errors import UpstreamError
from ports.completion import CompletionPort

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"


class OpenAICompletionAdapter(CompletionPort):
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.8,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._model = model
        self._temperature = temperature
        self._timeout = timeout
        self._transport = transport

    async def complete(self, messages: list[dict[str, str]]) -> str:
        # A missing key fails the request, never the process.
        if not self._api_key:
            raise UpstreamError("OPENAI_API_KEY is not set")

        body = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(self._url, json=body, headers=headers)
                r.raise_for_status()
                data = r.json()
        except httpx.TimeoutException as e:
            raise UpstreamError(f"{self._model} timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Upstream API error {e.response.status_code}: {e.response.text}")
            raise UpstreamError(f"Upstream API returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Cannot reach upstream API: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Upstream API returned invalid JSON: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("No content in upstream API response") from e
        if not isinstance(content, str):
            raise UpstreamError("No content in upstream API response")
        return content

    def model_name(self) -> str:
        return self._model
