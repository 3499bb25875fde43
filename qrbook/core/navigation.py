"""
Navigation effect sink.

The core never routes by itself; it only asks the presentation layer to move
to a path (e.g. the login view after the session was dropped).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Navigator(ABC):
    @abstractmethod
    def redirect_to(self, path: str) -> None: ...


class RecordingNavigator(Navigator):
    """
    Keeps requested redirects in order so the caller can act on the latest.
    """

    def __init__(self, *, max_history: int = 50) -> None:
        self.history: list[str] = []
        self.max_history = max_history

    def redirect_to(self, path: str) -> None:
        logger.debug("redirect_requested path=%s", path)
        self.history.append(path)
        del self.history[: -self.max_history]

    @property
    def last(self) -> str | None:
        return self.history[-1] if self.history else None

    def consume(self) -> str | None:
        """
        Return the latest requested path and forget all pending redirects.
        """
        path = self.last
        self.history.clear()
        return path
