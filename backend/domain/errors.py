"""Error taxonomy for the conversation engine."""


class ConversationError(Exception):
    """Base class for every error raised by the conversation engine."""


class UnsupportedFeatureError(ConversationError):
    """Capture or playback engine is absent on this host."""


class AlreadyActiveError(ConversationError):
    """A capture or turn was requested while one is already running."""


class UpstreamError(ConversationError):
    """A remote service was unreachable or returned an unusable payload."""


class RecognitionError(ConversationError):
    """The capture engine reported an error.

    Capture activations return an instance of this class as their terminal
    result instead of raising it, so ``code`` carries the engine's reason
    (``"no-speech"``, ``"aborted"``, ``"network"``...).
    """

    def __init__(self, code: str, detail: str = ""):
        super().__init__(f"{code}: {detail}" if detail else code)
        self.code = code
        self.detail = detail
