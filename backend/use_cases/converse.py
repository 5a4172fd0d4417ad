"""ConversationController: orchestrates one conversational turn at a time.

Accepts its collaborators via dependency injection, like the other use
cases: a reply generator, an optional grammar analyzer, optional capture
and playback adapters, and a status sink.

State machine (SessionState):

    IDLE ──start_turn/dictate──▶ CAPTURING ──utterance──▶ PROCESSING
      ▲  ──submit_text──────────────────────────────────▶ PROCESSING
      │                              │ error/stop             │
      ├──────────────────────────────┘                        │
      ├─────────────── reply, muted or no playback ───────────┤
      │                                                       ▼
      └──── finished / cancel / mute / new turn ─────── SPEAKING

Any unexpected failure while processing passes through ERROR and lands in
IDLE with the fallback reply committed, so a session never stays stuck.

Everything runs on one asyncio loop. The state is only changed by code in
this class, between awaits, so the checks in _ensure_can_begin and the
transition that follows them cannot interleave with another turn.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from domain.errors import (
    AlreadyActiveError,
    RecognitionError,
    UnsupportedFeatureError,
    UpstreamError,
)
from domain.models import Feedback, Message, SessionState, Turn
from domain.transcript import TranscriptStore
from ports.generator import ResponseGeneratorPort
from ports.grammar import GrammarAnalyzerPort
from ports.status import StatusPort
from speech import CaptureResult, SpeechCaptureAdapter, SpeechPlaybackAdapter

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Désolé, je n'ai pas compris."
LISTENING_STATUS = "Listening... Speak in French"
CAPTURE_UNSUPPORTED_STATUS = "Speech recognition not supported on this device"
PLAYBACK_UNSUPPORTED_STATUS = "Speech synthesis not supported on this device"


@dataclass(frozen=True)
class StateChanged:
    previous: SessionState
    current: SessionState


@dataclass(frozen=True)
class UtteranceCaptured:
    text: str


@dataclass(frozen=True)
class TurnCommitted:
    turn: Turn


@dataclass(frozen=True)
class TalkingChanged:
    talking: bool


@dataclass(frozen=True)
class MuteChanged:
    muted: bool


@dataclass(frozen=True)
class StatusReported:
    message: str
    kind: str


ControllerEvent = Union[
    StateChanged, UtteranceCaptured, TurnCommitted, TalkingChanged, MuteChanged, StatusReported,
]
Listener = Callable[[ControllerEvent], None]


class ConversationController:
    def __init__(
        self,
        generator: ResponseGeneratorPort,
        analyzer: Optional[GrammarAnalyzerPort] = None,
        capture: Optional[SpeechCaptureAdapter] = None,
        playback: Optional[SpeechPlaybackAdapter] = None,
        status: Optional[StatusPort] = None,
        transcript: Optional[TranscriptStore] = None,
        muted: bool = False,
        parallel: bool = True,
    ):
        self._generator = generator
        self._analyzer = analyzer
        self._capture = capture
        self._playback = playback
        self._status = status
        self._transcript = transcript if transcript is not None else TranscriptStore()
        self._muted = muted
        self._parallel = parallel

        self._state = SessionState.IDLE
        self._listeners: list[Listener] = []
        self._speaking_id: Optional[int] = None
        self._talking = False
        self._playback_unsupported_reported = False

        if self._playback is not None:
            self._playback.set_listeners(
                on_started=self._on_playback_started,
                on_finished=self._on_playback_finished,
            )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def display_state(self) -> SessionState:
        """state, except an idle muted session reads as MUTED."""
        if self._state is SessionState.IDLE and self._muted:
            return SessionState.MUTED
        return self._state

    @property
    def muted(self) -> bool:
        return self._muted

    @property
    def talking(self) -> bool:
        return self._talking

    @property
    def transcript(self) -> tuple[Message, ...]:
        return self._transcript.messages

    @property
    def capture_available(self) -> bool:
        return self._capture is not None and self._capture.available

    @property
    def playback_available(self) -> bool:
        return self._playback is not None and self._playback.available

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def seed_greeting(self, greeting: str) -> Message:
        """Open an empty transcript with an assistant greeting."""
        return self._transcript.seed(greeting)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Turn operations
    # ------------------------------------------------------------------

    async def start_turn(self) -> Optional[Turn]:
        """Capture one utterance and run it through a full turn.

        Returns the committed turn, or None when capture produced nothing.
        Raises AlreadyActiveError while another capture or turn is running.
        """
        self._ensure_can_begin()
        if not self.capture_available:
            self._report(CAPTURE_UNSUPPORTED_STATUS, "error")
            return None
        self.cancel_speaking()

        result = await self._capture_once()
        if isinstance(result, RecognitionError):
            return None
        return await self._process(result.text)

    async def submit_text(self, text: str) -> Optional[Turn]:
        """Run a typed utterance through a turn, skipping capture.

        Blank input is ignored and returns None.
        """
        self._ensure_can_begin()
        text = text.strip()
        if not text:
            return None
        self.cancel_speaking()
        return await self._process(text)

    async def dictate(self) -> Optional[str]:
        """Capture one utterance without submitting it (text-mode microphone)."""
        self._ensure_can_begin()
        if not self.capture_available:
            self._report(CAPTURE_UNSUPPORTED_STATUS, "error")
            return None
        self.cancel_speaking()

        result = await self._capture_once()
        if isinstance(result, RecognitionError):
            return None
        self._report(f"Speech recognized: {result.text}", "success")
        self._set_state(SessionState.IDLE)
        return result.text

    def stop_capture(self) -> None:
        """Stop listening. A capture with no utterance yet ends back in IDLE."""
        if self._capture is not None:
            self._capture.deactivate()

    def cancel_speaking(self) -> None:
        if self._playback is not None:
            self._playback.cancel()
        self._speaking_id = None
        self._set_talking(False)
        if self._state is SessionState.SPEAKING:
            self._set_state(SessionState.IDLE)

    def set_muted(self, muted: bool) -> None:
        if muted == self._muted:
            return
        self._muted = muted
        logger.info(f"Playback {'muted' if muted else 'unmuted'}")
        if muted:
            self.cancel_speaking()
        self._publish(MuteChanged(muted))

    def toggle_mute(self) -> bool:
        self.set_muted(not self._muted)
        return self._muted

    async def wait_idle(self) -> None:
        """Wait until in-flight playback has finished or been cancelled."""
        if self._playback is not None:
            await self._playback.wait()

    def close(self) -> None:
        self.cancel_speaking()
        self.stop_capture()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_can_begin(self) -> None:
        if self._state in (SessionState.CAPTURING, SessionState.PROCESSING):
            raise AlreadyActiveError(f"Cannot start a turn while {self._state.value}")

    async def _capture_once(self) -> CaptureResult:
        self._set_state(SessionState.CAPTURING)
        self._report(LISTENING_STATUS, "success")
        try:
            result = await self._capture.activate()
        except UnsupportedFeatureError as e:
            self._report(str(e), "error")
            self._set_state(SessionState.IDLE)
            return RecognitionError("not-supported", str(e))
        except BaseException:
            self._set_state(SessionState.IDLE)
            raise

        if isinstance(result, RecognitionError):
            self._report(f"Speech recognition error: {result.code}", "error")
            self._set_state(SessionState.IDLE)
        else:
            self._publish(UtteranceCaptured(result.text))
        return result

    async def _process(self, text: str) -> Turn:
        self._set_state(SessionState.PROCESSING)
        # Snapshot before the turn: the new utterance travels separately.
        history = self._transcript.messages

        try:
            if self._parallel:
                # Both calls settle before the turn moves on, even when one fails.
                feedback, reply = await asyncio.gather(
                    self._analyze(text),
                    self._generate(history, text),
                    return_exceptions=True,
                )
                for outcome in (feedback, reply):
                    if isinstance(outcome, BaseException):
                        raise outcome
            else:
                feedback = await self._analyze(text)
                reply = await self._generate(history, text)
        except asyncio.CancelledError:
            self._set_state(SessionState.IDLE)
            raise
        except Exception as e:
            logger.error(f"Turn processing failed: {e}", exc_info=True)
            self._set_state(SessionState.ERROR)
            turn = self._commit(text, FALLBACK_REPLY, Feedback())
            self._report(FALLBACK_REPLY, "error")
            self._set_state(SessionState.IDLE)
            return turn

        turn = self._commit(text, reply, feedback)
        self._speak_or_idle(turn.assistant.text)
        return turn

    def _commit(self, text: str, reply: str, feedback: Feedback) -> Turn:
        turn = self._transcript.commit_turn(text, reply, feedback)
        logger.info(
            f"Turn committed (#{turn.user.id}/#{turn.assistant.id}, "
            f"{len(feedback.corrections)} corrections)"
        )
        self._publish(TurnCommitted(turn))
        return turn

    async def _analyze(self, text: str) -> Feedback:
        if self._analyzer is None:
            return Feedback()
        try:
            return await self._analyzer.analyze(text)
        except UpstreamError as e:
            logger.warning(f"Grammar analysis unavailable: {e}")
        except Exception as e:
            logger.error(f"Grammar analysis failed: {e}", exc_info=True)
        return Feedback()

    async def _generate(self, history: Sequence[Message], text: str) -> str:
        try:
            return await self._generator.generate(history, text)
        except UpstreamError as e:
            logger.warning(f"Reply generation failed, using fallback: {e}")
            return FALLBACK_REPLY

    def _speak_or_idle(self, reply: str) -> None:
        if self._muted:
            self._set_state(SessionState.IDLE)
            return
        if not self.playback_available:
            self._playback_unsupported()
            self._set_state(SessionState.IDLE)
            return
        self._set_state(SessionState.SPEAKING)
        try:
            self._speaking_id = self._playback.speak(reply)
        except UnsupportedFeatureError:
            # Engine went away between the check and the call.
            self._playback_unsupported()
            self._speaking_id = None
            self._set_state(SessionState.IDLE)

    def _playback_unsupported(self) -> None:
        # Reported once per session, not on every reply.
        if self._playback_unsupported_reported:
            return
        self._playback_unsupported_reported = True
        self._report(PLAYBACK_UNSUPPORTED_STATUS, "error")

    def _on_playback_started(self, utterance_id: int) -> None:
        if utterance_id == self._speaking_id:
            self._set_talking(True)

    def _on_playback_finished(self, utterance_id: int) -> None:
        # Stale events (cancelled or superseded utterances) are ignored.
        if utterance_id != self._speaking_id or self._state is not SessionState.SPEAKING:
            return
        self._speaking_id = None
        self._set_talking(False)
        self._set_state(SessionState.IDLE)

    def _set_talking(self, talking: bool) -> None:
        if talking == self._talking:
            return
        self._talking = talking
        self._publish(TalkingChanged(talking))

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        if state is previous:
            return
        self._state = state
        logger.debug(f"Session state {previous.value} -> {state.value}")
        self._publish(StateChanged(previous, state))

    def _report(self, message: str, kind: str = "info") -> None:
        if self._status is not None:
            self._status.report(message, kind)
        self._publish(StatusReported(message, kind))

    def _publish(self, event: ControllerEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener failed on {type(event).__name__}")
