"""GoogleSpeechCaptureEngine: one-phrase microphone capture + Google Web Speech.

SpeechRecognition blocks while listening, so each capture runs in a worker
thread. stop() cannot interrupt the microphone read; it flags that capture's
own abort event, and the worker skips recognition once the read returns.

The microphone is held under a lock for the whole worker run, so a capture
started right after a stop waits for the previous worker to let go of the
device instead of opening a second stream.
"""

import asyncio
import logging
import threading
from typing import Optional

from domain.errors import RecognitionError
from ports.capture import CaptureEngine

logger = logging.getLogger(__name__)

# Seconds to wait for speech to begin, and max length of one phrase.
LISTEN_TIMEOUT = 8.0
PHRASE_TIME_LIMIT = 15.0


class GoogleSpeechCaptureEngine(CaptureEngine):
    def __init__(self, timeout: float = LISTEN_TIMEOUT, phrase_time_limit: float = PHRASE_TIME_LIMIT):
        self._timeout = timeout
        self._phrase_time_limit = phrase_time_limit
        self._available: Optional[bool] = None
        self._abort: Optional[threading.Event] = None
        self._mic_lock = threading.Lock()

    def is_available(self) -> bool:
        if self._available is None:
            self._available = self._probe()
        return self._available

    def _probe(self) -> bool:
        try:
            import speech_recognition as sr
        except ImportError:
            logger.warning("SpeechRecognition not installed, speech capture disabled")
            return False
        try:
            names = sr.Microphone.list_microphone_names()
        except (AttributeError, OSError) as e:
            # AttributeError: PyAudio missing
            logger.warning(f"No usable microphone: {e}")
            return False
        if not names:
            logger.warning("No microphone found, speech capture disabled")
            return False
        logger.info(f"Speech capture ready ({len(names)} audio devices)")
        return True

    async def listen(self, language: str) -> str:
        abort = threading.Event()
        self._abort = abort
        return await asyncio.to_thread(self._listen_blocking, language, abort)

    def stop(self) -> None:
        if self._abort is not None:
            self._abort.set()

    def _listen_blocking(self, language: str, abort: threading.Event) -> str:
        import speech_recognition as sr

        if self._mic_lock.locked():
            logger.debug("Waiting for the previous capture to release the microphone")
        with self._mic_lock:
            if abort.is_set():
                raise RecognitionError("aborted")
            recognizer = sr.Recognizer()
            recognizer.dynamic_energy_threshold = True

            try:
                with sr.Microphone() as source:
                    audio = recognizer.listen(
                        source,
                        timeout=self._timeout,
                        phrase_time_limit=self._phrase_time_limit,
                    )
            except sr.WaitTimeoutError as e:
                raise RecognitionError("no-speech", "No speech detected") from e
            except OSError as e:
                raise RecognitionError("audio-capture", str(e)) from e

        if abort.is_set():
            logger.debug("Capture aborted, skipping recognition")
            raise RecognitionError("aborted")

        try:
            return recognizer.recognize_google(audio, language=language)
        except sr.UnknownValueError as e:
            raise RecognitionError("no-match", "Speech was not understood") from e
        except sr.RequestError as e:
            raise RecognitionError("network", str(e)) from e
