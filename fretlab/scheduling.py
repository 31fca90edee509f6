"""Timer and frame scheduling.

Components never sleep or spin threads of their own. They ask a Scheduler to
call them back later and keep the returned handle so the callback can be
cancelled. Handles only need a cancel() method; asyncio.TimerHandle is one.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .core.constants import DEFAULT_FRAME_RATE


class Scheduler(ABC):
    """Source of delayed callbacks."""

    frame_rate: float = DEFAULT_FRAME_RATE

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]):
        """
        Run callback once after delay seconds.

        Returns:
            Handle with a cancel() method
        """
        pass

    def request_frame(self, callback: Callable[[], None]):
        """Run callback on the next frame."""
        return self.call_later(1.0 / self.frame_rate, callback)


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        frame_rate: float = DEFAULT_FRAME_RATE,
    ):
        self._loop = loop
        self.frame_rate = frame_rate

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)
