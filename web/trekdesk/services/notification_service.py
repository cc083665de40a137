from __future__ import annotations

import logging
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)

LEVELS = ("info", "success", "warning", "error")

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notifier(Protocol):
    """Anything that can surface a short, non-blocking message to the operator."""

    def notify(self, message: str, level: str = "info") -> None: ...


class LoggingNotifier:
    """Notifier that writes messages to the application log."""

    def __init__(self, name: str = "trekdesk.notifications") -> None:
        self._logger = logging.getLogger(name)

    def notify(self, message: str, level: str = "info") -> None:
        self._logger.log(_LOG_LEVELS.get(level, logging.INFO), message)


class CollectingNotifier:
    """Keeps messages in order so a response can hand them back as toasts.

    Optionally forwards every message to another notifier as well.
    """

    def __init__(self, forward_to: Notifier | None = None) -> None:
        self.messages: List[Tuple[str, str]] = []
        self._forward_to = forward_to

    def notify(self, message: str, level: str = "info") -> None:
        if level not in LEVELS:
            logger.warning("Unknown notification level %r; using 'info'", level)
            level = "info"
        self.messages.append((message, level))
        if self._forward_to is not None:
            self._forward_to.notify(message, level)

    def as_list(self) -> List[dict]:
        return [{"message": message, "level": level} for message, level in self.messages]
