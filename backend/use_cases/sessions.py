"""Mode sessions: thin bindings of the controller for each practice mode.

TextSession: the learner types (or dictates into a draft) and submits;
replies are spoken unless speak_replies is off.
AudioSession: every turn starts from the microphone and replies are
spoken unless muted.
"""

import logging
from typing import Callable, Optional

from domain.models import Message, SessionState, Turn
from use_cases.converse import (
    ControllerEvent,
    ConversationController,
    StateChanged,
    TalkingChanged,
    TurnCommitted,
    UtteranceCaptured,
)

logger = logging.getLogger(__name__)

TEXT_GREETING = (
    "Bonjour! Je suis votre assistant français. Commencez à parler en français "
    "et je vous aiderai avec des corrections et des suggestions!"
)
AUDIO_GREETING = (
    "Bonjour! Je suis votre assistant français. Cliquez sur le microphone "
    "et commencez à parler en français!"
)
LISTENING_TEXT = "🎤 J'écoute... Parlez maintenant!"

QUICK_PHRASES = (
    "Bonjour, comment allez-vous?",
    "Je suis en train d'apprendre le français",
    "Pouvez-vous m'aider?",
    "Qu'est-ce que vous pensez?",
    "Comment dit-on... en français?",
    "Je ne comprends pas",
)

LEARNING_TIPS = (
    "🗣️ Try speaking aloud for pronunciation practice",
    "📝 Pay attention to article agreement (le/la/les)",
    "🔄 Practice verb conjugations regularly",
    "✅ Don't worry about mistakes - they help you learn!",
    "🎯 Start with simple sentences and build up",
    "📚 Use common phrases daily",
)


class ModeSession:
    """Shared surface of both modes."""

    def __init__(self, controller: ConversationController):
        self.controller = controller
        self._unsubscribe: Optional[Callable[[], None]] = controller.subscribe(self._on_event)

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.controller.transcript

    @property
    def state(self) -> SessionState:
        return self.controller.state

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.controller.close()

    def _on_event(self, event: ControllerEvent) -> None:
        pass


class TextSession(ModeSession):
    def __init__(
        self,
        controller: ConversationController,
        speak_replies: bool = True,
        greeting: Optional[str] = TEXT_GREETING,
    ):
        super().__init__(controller)
        self.draft = ""
        logger.info(f"Text session started (speak_replies={speak_replies})")
        if greeting and not controller.transcript:
            controller.seed_greeting(greeting)
        if not speak_replies:
            controller.set_muted(True)

    def fill(self, text: str) -> None:
        """Put a quick phrase (or any text) into the draft."""
        self.draft = text

    async def dictate(self) -> Optional[str]:
        """Fill the draft from the microphone. Does not send."""
        text = await self.controller.dictate()
        if text is not None:
            self.draft = text
        return text

    async def send(self) -> Optional[Turn]:
        """Submit the draft as a turn and clear it."""
        if not self.draft.strip():
            return None
        text = self.draft
        turn = await self.controller.submit_text(text)
        self.draft = ""
        return turn


class AudioSession(ModeSession):
    def __init__(self, controller: ConversationController, greeting: str = AUDIO_GREETING):
        self.current_text = greeting
        self.talking = False
        super().__init__(controller)
        logger.info(f"Audio session started (muted={controller.muted})")

    @property
    def muted(self) -> bool:
        return self.controller.muted

    def toggle_mute(self) -> bool:
        return self.controller.toggle_mute()

    async def talk(self) -> Optional[Turn]:
        """Listen for one utterance and answer it."""
        return await self.controller.start_turn()

    def stop(self) -> None:
        self.controller.stop_capture()

    def _on_event(self, event: ControllerEvent) -> None:
        if isinstance(event, StateChanged) and event.current is SessionState.CAPTURING:
            self.current_text = LISTENING_TEXT
        elif isinstance(event, UtteranceCaptured):
            self.current_text = f'Vous avez dit: "{event.text}"'
        elif isinstance(event, TurnCommitted):
            self.current_text = event.turn.assistant.text
        elif isinstance(event, TalkingChanged):
            self.talking = event.talking
