"""HttpResponseGenerator: asks the /chat proxy for the assistant reply.

The history sent is the transcript snapshot taken before the current turn;
the new utterance travels separately as userInput.
"""

import logging
from typing import Optional, Sequence

import httpx

from domain.errors import UpstreamError
from domain.models import Message
from mappers import messages_to_dtos
from models import ChatRequest
from ports.generator import ResponseGeneratorPort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class HttpResponseGenerator(ResponseGeneratorPort):
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = f"{base_url.rstrip('/')}/chat"
        self._timeout = timeout
        self._transport = transport

    async def generate(self, history: Sequence[Message], user_input: str) -> str:
        body = ChatRequest(history=messages_to_dtos(history), user_input=user_input)
        payload = body.model_dump(by_alias=True)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(self._url, json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Chat service timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Chat service request failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Chat service returned invalid JSON: {e}") from e

        logger.debug(f"Chat service returned: {data}")
        reply = data.get("reply") if isinstance(data, dict) else None
        if not isinstance(reply, str) or not reply.strip():
            raise UpstreamError("Chat service response has no reply")
        return reply
