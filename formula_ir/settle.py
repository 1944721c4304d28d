"""Debounced scheduling of settle passes on an asyncio event loop.

At most one settle is pending at a time. Scheduling again supersedes the
pending one, which then never runs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .config import get_editor_config

logger = logging.getLogger(__name__)


class SettleScheduler:
    def __init__(
        self,
        delay: Optional[float] = None,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.delay = get_editor_config().settle_delay if delay is None else float(delay)
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._callback: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        if self._handle is not None:
            logger.debug("Superseding pending settle")
            self._handle.cancel()
        self._callback = callback
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._callback = None

    def flush(self) -> bool:
        """Run the pending settle now; return whether one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._fire()
        return True

    def _fire(self) -> None:
        callback = self._callback
        self._handle = None
        self._callback = None
        if callback is not None:
            callback()
