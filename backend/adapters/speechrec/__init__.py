"""Microphone capture through the SpeechRecognition library."""

from .capture import GoogleSpeechCaptureEngine

__all__ = ["GoogleSpeechCaptureEngine"]
