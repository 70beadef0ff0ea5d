"""
Time-lapse playback.

``PlaybackController`` steps through the twelve month buckets on a
periodic timer. Timers come from a ``Scheduler`` so the controller can
run on an asyncio event loop in the API and on a manually advanced
clock in tests. Arming a new timer always cancels the previous one, and
no tick fires after ``pause()`` or ``reset()`` returns.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_SPEEDS = (0.5, 1.0, 2.0, 4.0)
DEFAULT_PERIOD_MS = 1000.0


class PlaybackState(str, Enum):
    STOPPED = 'stopped'
    PLAYING = 'playing'


class TimerHandle(ABC):
    """A running periodic timer."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""

    @property
    @abstractmethod
    def active(self) -> bool:
        """Whether the timer will fire again."""


class Scheduler(ABC):
    """Creates periodic timers."""

    @abstractmethod
    def every(self, period_s: float, callback: Callable[[], None]) -> TimerHandle:
        """Call ``callback`` every ``period_s`` seconds until cancelled."""


class PeriodicTimer(TimerHandle):
    """Periodic timer chained through ``loop.call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop, period_s: float, callback: Callable[[], None]):
        self._loop = loop
        self._period_s = period_s
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(period_s, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._period_s, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()

    @property
    def active(self) -> bool:
        return not self._cancelled


class AsyncioScheduler(Scheduler):
    """Scheduler running timers on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def every(self, period_s: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return PeriodicTimer(loop, period_s, callback)


class PlaybackController:
    """
    Steps a month index through the year while playing.

    Args:
        on_tick: Called with the new month index after each step
        scheduler: Timer factory
        length: Number of month buckets
        speeds: Speed multipliers cycled by ``change_speed``
        base_period_ms: Tick period at speed 1
    """

    def __init__(
        self,
        on_tick: Callable[[int], None],
        scheduler: Scheduler,
        length: int = 12,
        speeds: Sequence[float] = DEFAULT_SPEEDS,
        base_period_ms: float = DEFAULT_PERIOD_MS
    ):
        if length <= 0:
            raise ValueError("length must be positive")
        if not speeds or any(speed <= 0 for speed in speeds):
            raise ValueError("speeds must be a non-empty list of positive numbers")

        self.on_tick = on_tick
        self.scheduler = scheduler
        self.length = length
        self.speeds = tuple(float(speed) for speed in speeds)
        self.base_period_ms = float(base_period_ms)

        self.state = PlaybackState.STOPPED
        self.index = 0
        self._speed_index = self.speeds.index(1.0) if 1.0 in self.speeds else 0
        self._timer: Optional[TimerHandle] = None

    @property
    def speed(self) -> float:
        return self.speeds[self._speed_index]

    @property
    def period_s(self) -> float:
        return self.base_period_ms / self.speed / 1000.0

    @property
    def playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def timer_active(self) -> bool:
        return self._timer is not None and self._timer.active

    def _arm(self) -> None:
        self._disarm()
        self._timer = self.scheduler.every(self.period_s, self._tick)

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _tick(self) -> None:
        if not self.playing:
            return
        self.index = (self.index + 1) % self.length
        self.on_tick(self.index)

    def start(self) -> None:
        if self.playing:
            return
        self.state = PlaybackState.PLAYING
        self._arm()
        logger.info(f"Playback started at {self.speed}x from index {self.index}")

    def pause(self) -> None:
        self._disarm()
        if self.playing:
            logger.info(f"Playback paused at index {self.index}")
        self.state = PlaybackState.STOPPED

    def toggle(self) -> PlaybackState:
        if self.playing:
            self.pause()
        else:
            self.start()
        return self.state

    def reset(self) -> None:
        """Stop and rewind to the first month. Idempotent."""
        self._disarm()
        self.state = PlaybackState.STOPPED
        self.index = 0
        self.on_tick(self.index)

    def change_speed(self) -> float:
        """Advance to the next speed, wrapping around; restarts the timer while playing."""
        self._speed_index = (self._speed_index + 1) % len(self.speeds)
        if self.playing:
            self._arm()
        logger.info(f"Playback speed set to {self.speed}x")
        return self.speed

    def seek(self, index: int) -> None:
        """Jump to a month without changing the play state."""
        if not 0 <= index < self.length:
            raise ValueError(f"index must be in [0, {self.length - 1}], got {index}")
        self.index = index
        self.on_tick(self.index)

    def to_dict(self):
        return {
            'state': self.state.value,
            'index': self.index,
            'speed': self.speed,
            'period_ms': self.period_s * 1000.0,
        }
