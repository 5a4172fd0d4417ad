"""Contract wrappers around host speech engines."""

from .capture import SpeechCaptureAdapter, CaptureResult
from .playback import SpeechPlaybackAdapter, select_voice

__all__ = ["SpeechCaptureAdapter", "CaptureResult", "SpeechPlaybackAdapter", "select_voice"]
