"""Transient status banner shown after an action completes or fails."""

import asyncio
import logging

from segment_studio.constants import STATUS_CLEAR_SECONDS

logger = logging.getLogger(__name__)


class StatusBanner:
    """Holds one message that clears itself after a fixed delay.

    Auto-clear needs a running event loop; outside one the message stays
    until clear() or the next show().
    """

    def __init__(self, clear_after: float = STATUS_CLEAR_SECONDS):
        self.clear_after = clear_after
        self.kind: str | None = None
        self.message: str | None = None
        self._handle: asyncio.TimerHandle | None = None

    def show(self, kind: str, message: str) -> None:
        self._cancel_timer()
        self.kind = kind
        self.message = message
        log = logger.warning if kind == "error" else logger.info
        log("%s", message)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self.clear_after, self.clear)

    def success(self, message: str) -> None:
        self.show("success", message)

    def error(self, message: str) -> None:
        self.show("error", message)

    def clear(self) -> None:
        self._cancel_timer()
        self.kind = None
        self.message = None

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
