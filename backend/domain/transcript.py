"""TranscriptStore: append-only, ordered history of a conversation."""

import itertools
from datetime import datetime
from typing import Iterator, Optional

from domain.models import Feedback, Message, Speaker, Turn


class TranscriptStore:
    """Ordered sequence of messages where order is commit order.

    Only :meth:`commit_turn` appends conversational content, and it appends
    the user message together with its reply, so a reader never observes a
    user message without its assistant counterpart. Readers receive tuples,
    never the internal list.
    """

    def __init__(self, greeting: Optional[str] = None):
        self._messages: list[Message] = []
        self._ids = itertools.count(1)
        if greeting:
            self.seed(greeting)

    def seed(self, greeting: str) -> Message:
        """Place an assistant greeting at the head of an empty transcript."""
        if self._messages:
            raise ValueError("Greeting can only seed an empty transcript")
        message = Message(id=next(self._ids), speaker=Speaker.ASSISTANT, text=greeting)
        self._messages = [message]
        return message

    def commit_turn(self, user_text: str, reply: str, feedback: Optional[Feedback] = None) -> Turn:
        feedback = feedback or Feedback()
        now = datetime.now()
        user = Message(
            id=next(self._ids),
            speaker=Speaker.USER,
            text=user_text,
            timestamp=now,
            corrections=tuple(feedback.corrections),
            suggestions=tuple(feedback.suggestions),
        )
        assistant = Message(
            id=next(self._ids),
            speaker=Speaker.ASSISTANT,
            text=reply,
            timestamp=now,
        )
        # Single rebinding publishes the pair at once.
        self._messages = self._messages + [user, assistant]
        return Turn(user=user, assistant=assistant)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def turns(self) -> list[Turn]:
        """Committed user/assistant pairs, greeting excluded."""
        pairs: list[Turn] = []
        pending: Optional[Message] = None
        for message in self._messages:
            if message.is_user:
                pending = message
            elif pending is not None:
                pairs.append(Turn(user=pending, assistant=message))
                pending = None
        return pairs

    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
