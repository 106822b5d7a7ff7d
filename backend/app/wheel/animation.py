"""Animation driver — plays a planned spin on a time-based eased timeline."""

import asyncio
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from app.wheel.engine import SpinSession

logger = logging.getLogger(__name__)

SettledListener = Callable[[SpinSession], None]

# Float clocks can stop a hair short of the duration
_SETTLE_EPSILON_MS = 1e-6


class DriverState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in/ease-out on [0, 1]; monotonic, 0 -> 0 and 1 -> 1."""
    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0


def rotation_at(session: SpinSession, elapsed_ms: float) -> float:
    """Visible rotation ``elapsed_ms`` after the spin started."""
    if session.animation_duration_ms <= 0:
        return session.target_rotation
    progress = elapsed_ms / session.animation_duration_ms
    if progress >= 1.0:
        return session.target_rotation
    return session.start_rotation + session.total_rotation_delta * ease_in_out_cubic(progress)


class AnimationDriver:
    """Drives the wheel rotation for one spin at a time.

    State machine: ``IDLE -> RUNNING -> SETTLED -> IDLE``. A spin can only be
    started from ``IDLE``; a start request in any other state is ignored. Each
    completed play notifies the settled listeners exactly once with the
    session that was played, then the driver goes back to ``IDLE``.

    :meth:`force_reset` is the only way to abandon a running play. The
    abandoned play never notifies listeners; completions are matched against
    a generation counter so a late wake-up of a cancelled timeline is dropped.

    Args:
        frame_interval_ms: Delay between rotation updates.
        clock: Monotonic clock in seconds.
        sleep: Coroutine used to wait between frames.
    """

    def __init__(
        self,
        frame_interval_ms: int = 16,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if frame_interval_ms <= 0:
            raise ValueError("Frame interval must be positive")
        self.frame_interval_ms = frame_interval_ms
        self._clock = clock
        self._sleep = sleep

        self.state = DriverState.IDLE
        self.rotation = 0.0
        self.session: Optional[SpinSession] = None
        self.completed_plays = 0

        self._started_at: Optional[float] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._listeners: list[SettledListener] = []

    # ── Listeners ────────────────────────────────────────────────────────────

    def add_settled_listener(self, listener: SettledListener) -> None:
        self._listeners.append(listener)

    # ── Playback ─────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self.state is DriverState.RUNNING

    def start(self, session: SpinSession) -> bool:
        """Begin playing ``session`` in the background.

        Must be called from a running event loop. Returns False (and does
        nothing) unless the driver is idle.
        """
        if self.state is not DriverState.IDLE:
            logger.info("Spin ignored: driver is %s", self.state.value)
            return False

        self._generation += 1
        token = self._generation
        self.session = session
        self.rotation = session.start_rotation
        self.state = DriverState.RUNNING
        self._started_at = self._clock()
        self._task = asyncio.get_running_loop().create_task(self._run(session, token))
        logger.info(
            "Spin started: %.1f° over %d ms, committed to '%s'",
            session.total_rotation_delta,
            session.animation_duration_ms,
            session.committed_outcome,
        )
        return True

    async def play(self, session: SpinSession) -> Optional[str]:
        """Play ``session`` to completion.

        Returns the committed outcome, or None when the request was ignored
        because another spin is in flight or the play was force-reset.
        """
        if not self.start(session):
            return None
        task = self._task
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def join(self) -> None:
        """Wait until the current play settles or is reset."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    def force_reset(self) -> bool:
        """Abandon the running play without a completion event."""
        if self.state is not DriverState.RUNNING:
            return False
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
        logger.warning(
            "Spin force-reset at %.1f° (was committed to '%s')",
            self.rotation,
            self.session.committed_outcome if self.session else None,
        )
        self._task = None
        self.session = None
        self._started_at = None
        self.state = DriverState.IDLE
        return True

    def current_rotation(self) -> float:
        """Rotation right now, sampled from the clock while running."""
        if self.state is DriverState.RUNNING and self.session is not None:
            elapsed_ms = (self._clock() - self._started_at) * 1000.0
            return rotation_at(self.session, elapsed_ms)
        return self.rotation

    def elapsed_ms(self) -> float:
        if self.state is not DriverState.RUNNING or self._started_at is None:
            return 0.0
        return (self._clock() - self._started_at) * 1000.0

    async def _run(self, session: SpinSession, token: int) -> Optional[str]:
        duration_ms = session.animation_duration_ms
        while True:
            elapsed_ms = (self._clock() - self._started_at) * 1000.0
            if elapsed_ms >= duration_ms - _SETTLE_EPSILON_MS:
                break
            self.rotation = rotation_at(session, elapsed_ms)
            remaining_ms = duration_ms - elapsed_ms
            await self._sleep(min(self.frame_interval_ms, remaining_ms) / 1000.0)
            if token != self._generation:
                return None
        return self._settle(session, token)

    def _settle(self, session: SpinSession, token: int) -> Optional[str]:
        if token != self._generation:
            logger.debug("Dropping stale completion for generation %d", token)
            return None

        self.rotation = session.target_rotation
        self.state = DriverState.SETTLED
        self.completed_plays += 1
        logger.info("Spin settled on '%s' at %.1f°", session.committed_outcome, self.rotation)

        try:
            for listener in self._listeners:
                try:
                    listener(session)
                except Exception:
                    logger.exception("Settled listener failed for '%s'", session.committed_outcome)
        finally:
            self._task = None
            self._started_at = None
            self.state = DriverState.IDLE
        return session.committed_outcome

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "rotation": self.current_rotation(),
            "elapsedMs": self.elapsed_ms(),
            "session": self.session.to_dict() if self.session else None,
            "completedPlays": self.completed_plays,
        }
