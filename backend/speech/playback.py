"""SpeechPlaybackAdapter: one cancellable utterance at a time over a PlaybackEngine."""

import asyncio
import itertools
import logging
from typing import Callable, Optional, Sequence

from domain.errors import UnsupportedFeatureError
from domain.models import Voice
from ports.playback import PlaybackEngine

logger = logging.getLogger(__name__)

PlaybackListener = Callable[[int], None]


def select_voice(voices: Sequence[Voice], language: str = "fr-FR") -> Optional[Voice]:
    """Pick the best French voice, or None to keep the engine default.

    Preference: exact language tag, then same language family, then a
    voice whose name mentions French.
    """
    wanted = language.lower().replace("_", "-")
    family = wanted.split("-")[0]

    def tag(voice: Voice) -> str:
        return voice.language.lower().replace("_", "-")

    for voice in voices:
        if tag(voice) == wanted:
            return voice
    for voice in voices:
        if tag(voice).startswith(family):
            return voice
    for voice in voices:
        if "french" in voice.name.lower():
            return voice
    return None


class SpeechPlaybackAdapter:
    def __init__(self, engine: Optional[PlaybackEngine], language: str = "fr-FR", rate: float = 0.85):
        self._engine = engine
        self._language = language
        self._rate = rate
        self._ids = itertools.count(1)
        self._task: Optional[asyncio.Task] = None
        self._current_id: Optional[int] = None
        self._voice: Optional[Voice] = None
        self._voice_resolved = False
        self._on_started: Optional[PlaybackListener] = None
        self._on_finished: Optional[PlaybackListener] = None

    @property
    def available(self) -> bool:
        return self._engine is not None and self._engine.is_available()

    @property
    def current_id(self) -> Optional[int]:
        return self._current_id

    @property
    def speaking(self) -> bool:
        return self._task is not None

    def set_listeners(
        self,
        on_started: Optional[PlaybackListener] = None,
        on_finished: Optional[PlaybackListener] = None,
    ) -> None:
        self._on_started = on_started
        self._on_finished = on_finished

    def speak(self, text: str) -> int:
        """Start speaking text, cancelling whatever is playing. Returns the utterance id."""
        if not self.available:
            raise UnsupportedFeatureError("Speech synthesis not supported on this host")
        self.cancel()
        utterance_id = next(self._ids)
        self._current_id = utterance_id
        self._task = asyncio.ensure_future(self._run(utterance_id, text))
        return utterance_id

    def cancel(self) -> None:
        task = self._task
        if task is None:
            return
        logger.debug(f"Cancelling utterance {self._current_id}")
        self._task = None
        self._current_id = None
        self._engine.stop()
        task.cancel()

    async def wait(self) -> None:
        """Wait for the current utterance to finish or be cancelled."""
        task = self._task
        if task is not None:
            await asyncio.wait([task])

    async def _run(self, utterance_id: int, text: str) -> None:
        if self._on_started:
            self._on_started(utterance_id)
        try:
            await self._engine.speak(text, self._language, rate=self._rate, voice=self._resolve_voice())
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Playback of utterance {utterance_id} failed: {e}", exc_info=True)

        if self._current_id != utterance_id:
            return
        self._task = None
        self._current_id = None
        if self._on_finished:
            self._on_finished(utterance_id)

    def _resolve_voice(self) -> Optional[Voice]:
        if not self._voice_resolved:
            voices = self._engine.voices()
            self._voice = select_voice(voices, self._language)
            # Some engines list their voices lazily; retry until they show up.
            self._voice_resolved = bool(voices)
            if self._voice:
                logger.info(f"Using voice {self._voice.name} ({self._voice.language})")
            else:
                logger.info("No French voice installed, using engine default")
        return self._voice
