import os
import logging
from typing import Dict, Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000
DEFAULT_CHAT_URL = "http://localhost:5000"
DEFAULT_GRAMMAR_URL = "https://api.languagetool.org/v2/check"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_REQUEST_TIMEOUT = 15.0

# Playback speed relative to the engine default; slower helps learners.
MIN_SPEECH_RATE = 0.8
MAX_SPEECH_RATE = 0.9
DEFAULT_SPEECH_RATE = 0.85


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self.host = os.environ.get("HOST", DEFAULT_HOST)
        self.port = int(os.environ.get("PORT", DEFAULT_PORT))
        self.debug = os.environ.get("DEBUG", "0") == "1"

        # Upstream model provider (used by the /chat proxy)
        self.openai_api_key = os.environ.get("OPENAI_API_KEY") or None
        self.openai_base_url = os.environ.get("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL)
        self.openai_model = os.environ.get("OPENAI_MODEL", DEFAULT_OPENAI_MODEL)
        self.temperature = float(os.environ.get("TEMPERATURE", "0.8"))

        # Remote services used by the conversation engine
        self.chat_url = os.environ.get("CHAT_URL", DEFAULT_CHAT_URL)
        self.grammar_url = os.environ.get("GRAMMAR_URL", DEFAULT_GRAMMAR_URL)
        self.grammar_language = os.environ.get("GRAMMAR_LANGUAGE", "fr")
        self.request_timeout = float(os.environ.get("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))

        # Speech and turn behavior
        self.speech_language = os.environ.get("SPEECH_LANGUAGE", "fr-FR")
        rate = float(os.environ.get("SPEECH_RATE", DEFAULT_SPEECH_RATE))
        self.speech_rate = min(max(rate, MIN_SPEECH_RATE), MAX_SPEECH_RATE)
        if self.speech_rate != rate:
            logger.warning(f"SPEECH_RATE {rate} out of range, using {self.speech_rate}")
        self.parallel_feedback = _env_flag("PARALLEL_FEEDBACK", "true")
        self.start_muted = _env_flag("START_MUTED", "false")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "openai_base_url": self.openai_base_url,
            "openai_model": self.openai_model,
            "temperature": self.temperature,
            "has_openai_api_key": self.openai_api_key is not None,
            "chat_url": self.chat_url,
            "grammar_url": self.grammar_url,
            "grammar_language": self.grammar_language,
            "request_timeout": self.request_timeout,
            "speech_language": self.speech_language,
            "speech_rate": self.speech_rate,
            "parallel_feedback": self.parallel_feedback,
            "start_muted": self.start_muted,
        }


config = Config()


def get_config() -> Config:
    return config


def create_completion_adapter(cfg: Config):
    """Create the upstream model adapter for the /chat proxy."""
    from adapters.openai.completion import OpenAICompletionAdapter

    if not cfg.openai_api_key:
        logger.warning("OPENAI_API_KEY not set: every /chat request will fail upstream")
    return OpenAICompletionAdapter(
        api_key=cfg.openai_api_key,
        base_url=cfg.openai_base_url,
        model=cfg.openai_model,
        temperature=cfg.temperature,
        timeout=cfg.request_timeout,
    )


def create_remote_adapters(cfg: Config):
    """Create the reply generator and grammar analyzer clients."""
    from adapters.http.chat_client import HttpResponseGenerator
    from adapters.http.languagetool import LanguageToolAnalyzer

    generator = HttpResponseGenerator(cfg.chat_url, timeout=cfg.request_timeout)
    analyzer = LanguageToolAnalyzer(
        cfg.grammar_url,
        language=cfg.grammar_language,
        timeout=cfg.request_timeout,
    )
    logger.info(f"Remote adapters: chat={cfg.chat_url}, grammar={cfg.grammar_url}")
    return generator, analyzer


def create_speech_adapters(cfg: Config, capture: bool = True, playback: bool = True):
    """Create capture/playback adapters over the host speech engines.

    Uses lazy imports so missing speech libraries only disable the feature.
    """
    from speech import SpeechCaptureAdapter, SpeechPlaybackAdapter

    capture_engine = None
    playback_engine = None
    if capture:
        from adapters.speechrec.capture import GoogleSpeechCaptureEngine
        capture_engine = GoogleSpeechCaptureEngine()
    if playback:
        from adapters.pyttsx.playback import Pyttsx3PlaybackEngine
        playback_engine = Pyttsx3PlaybackEngine()

    capture_adapter = SpeechCaptureAdapter(capture_engine, language=cfg.speech_language)
    playback_adapter = SpeechPlaybackAdapter(
        playback_engine,
        language=cfg.speech_language,
        rate=cfg.speech_rate,
    )
    logger.info(
        f"Speech adapters: capture={type(capture_engine).__name__}, "
        f"playback={type(playback_engine).__name__}"
    )
    return capture_adapter, playback_adapter


def create_controller(cfg: Config, status=None, capture: bool = True, playback: bool = True):
    """Wire a ConversationController from configuration."""
    from adapters.local.log_status import LogStatusAdapter
    from use_cases.converse import ConversationController

    generator, analyzer = create_remote_adapters(cfg)
    capture_adapter, playback_adapter = create_speech_adapters(cfg, capture=capture, playback=playback)
    return ConversationController(
        generator,
        analyzer,
        capture=capture_adapter,
        playback=playback_adapter,
        status=status or LogStatusAdapter(),
        muted=cfg.start_muted,
        parallel=cfg.parallel_feedback,
    )
