"""ChatReplyUseCase: server side of POST /chat.

Prepends the fixed tutor persona to the learner's history and asks the
upstream model for the next French reply.
"""

import logging

from mappers import dtos_to_completion_messages
from models import ChatRequest, ChatResponse
from ports.completion import CompletionPort

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Tu es un partenaire de conversation en français, amical et encourageant. "
    "Réponds toujours en français."
)


def build_messages(req: ChatRequest) -> list[dict[str, str]]:
    """System prompt, then history in order, then the new user input."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend(dtos_to_completion_messages(req.history))
    messages.append({"role": "user", "content": req.user_input})
    return messages


class ChatReplyUseCase:
    def __init__(self, completion: CompletionPort):
        self._completion = completion

    async def execute(self, req: ChatRequest) -> ChatResponse:
        """Raises UpstreamError when the model cannot be reached or answers badly."""
        messages = build_messages(req)
        logger.info(f"Chat request: {len(req.history)} history messages -> {self._completion.model_name()}")
        reply = await self._completion.complete(messages)
        return ChatResponse(reply=reply)
