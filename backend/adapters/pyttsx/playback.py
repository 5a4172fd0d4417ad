"""Pyttsx3PlaybackEngine: offline system voices (SAPI5, NSSpeech, eSpeak).

runAndWait() blocks, so every utterance runs in a worker thread. The
engine instance is shared, guarded by a lock; stop() may be called from the
event loop thread to cut the current utterance short.
"""

import asyncio
import logging
import threading
from typing import Optional

from domain.models import Voice
from ports.playback import PlaybackEngine

logger = logging.getLogger(__name__)


def _voice_language(voice) -> str:
    """Best-effort language tag from a pyttsx3 voice.

    eSpeak reports languages as bytes with a leading priority byte
    (b"\\x05fr"); other drivers use plain strings or nothing.
    """
    for lang in getattr(voice, "languages", None) or []:
        if isinstance(lang, bytes):
            lang = lang.decode("utf-8", errors="ignore")
        lang = "".join(ch for ch in str(lang) if ch.isprintable()).strip()
        if lang:
            return lang
    return ""


class Pyttsx3PlaybackEngine(PlaybackEngine):
    def __init__(self):
        self._engine = None
        self._base_rate: int = 200
        self._available: Optional[bool] = None
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        if self._available is None:
            self._available = self._load()
        return self._available

    def _load(self) -> bool:
        try:
            import pyttsx3
        except ImportError:
            logger.warning("pyttsx3 not installed, speech playback disabled")
            return False
        try:
            self._engine = pyttsx3.init()
        except (RuntimeError, OSError) as e:
            logger.warning(f"No speech synthesis driver: {e}")
            return False
        self._base_rate = self._engine.getProperty("rate") or self._base_rate
        logger.info(f"Speech playback ready (base rate {self._base_rate} wpm)")
        return True

    def voices(self) -> list[Voice]:
        if not self.is_available():
            return []
        return [
            Voice(id=v.id, name=v.name or v.id, language=_voice_language(v))
            for v in self._engine.getProperty("voices") or []
        ]

    async def speak(
        self,
        text: str,
        language: str,
        rate: float = 1.0,
        voice: Optional[Voice] = None,
    ) -> None:
        await asyncio.to_thread(self._speak_blocking, text, rate, voice)

    def stop(self) -> None:
        if self._engine is not None:
            self._engine.stop()

    def _speak_blocking(self, text: str, rate: float, voice: Optional[Voice]) -> None:
        with self._lock:
            self._engine.setProperty("rate", int(self._base_rate * rate))
            if voice is not None:
                self._engine.setProperty("voice", voice.id)
            self._engine.say(text)
            self._engine.runAndWait()
