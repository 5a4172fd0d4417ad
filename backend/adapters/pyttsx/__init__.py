"""Text-to-speech through the pyttsx3 library."""

from .playback import Pyttsx3PlaybackEngine

__all__ = ["Pyttsx3PlaybackEngine"]
