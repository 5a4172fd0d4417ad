"""LogStatusAdapter: reports transient status via logging (default)."""

import logging

from ports.status import StatusPort

logger = logging.getLogger(__name__)

_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "error": logging.WARNING,
}


class LogStatusAdapter(StatusPort):
    def report(self, message: str, kind: str = "info") -> None:
        logger.log(_LEVELS.get(kind, logging.INFO), f"[{kind}] {message}")
