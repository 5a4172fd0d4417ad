"""SpeechCaptureAdapter: single-shot capture over a CaptureEngine.

Each activation resolves to exactly one terminal result, either an
Utterance or a RecognitionError, returned rather than raised. Only
boundary violations raise: an absent engine (UnsupportedFeatureError) or a
second concurrent activation (AlreadyActiveError).
"""

import asyncio
import logging
from typing import Optional, Union

from domain.errors import AlreadyActiveError, RecognitionError, UnsupportedFeatureError
from domain.models import Utterance
from ports.capture import CaptureEngine

logger = logging.getLogger(__name__)

CaptureResult = Union[Utterance, RecognitionError]


class SpeechCaptureAdapter:
    def __init__(self, engine: Optional[CaptureEngine], language: str = "fr-FR"):
        self._engine = engine
        self._language = language
        self._task: Optional[asyncio.Future] = None
        self._stopping = False

    @property
    def available(self) -> bool:
        return self._engine is not None and self._engine.is_available()

    @property
    def active(self) -> bool:
        return self._task is not None

    async def activate(self) -> CaptureResult:
        if not self.available:
            raise UnsupportedFeatureError("Speech recognition not supported on this host")
        if self._task is not None:
            raise AlreadyActiveError("Speech capture already active")

        task = asyncio.ensure_future(self._engine.listen(self._language))
        self._task = task
        logger.debug(f"Capture activated ({self._language})")
        try:
            text = await task
        except asyncio.CancelledError:
            if not self._stopping:
                raise
            logger.info("Capture stopped before an utterance was produced")
            return RecognitionError("aborted")
        except RecognitionError as e:
            logger.info(f"Recognition error: {e.code}")
            return e
        except Exception as e:
            logger.error(f"Capture engine failed: {e}", exc_info=True)
            return RecognitionError("engine", str(e))
        finally:
            self._task = None
            self._stopping = False

        text = (text or "").strip()
        if not text:
            return RecognitionError("no-speech")
        logger.info(f"Utterance captured: {text!r}")
        return Utterance(text)

    def deactivate(self) -> None:
        task = self._task
        if task is None:
            return
        self._stopping = True
        self._engine.stop()
        task.cancel()
