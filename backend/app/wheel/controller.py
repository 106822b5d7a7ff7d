"""Wheel controller — one spin at a time, from request to celebration."""

import logging
from typing import Optional

from app.wheel.animation import AnimationDriver, DriverState
from app.wheel.coordinator import Celebration, QuoteRequestCoordinator, SubjectProfile
from app.wheel.engine import SpinEngine, SpinSession

logger = logging.getLogger(__name__)


class WheelController:
    """Owns the engine, driver and coordinator for one wheel.

    A spin request is planned and handed to the driver only while the driver
    is idle. When the driver settles, the committed outcome of that same
    session is celebrated for the subject that requested it.
    """

    def __init__(
        self,
        engine: SpinEngine,
        driver: AnimationDriver,
        coordinator: QuoteRequestCoordinator,
    ):
        self.engine = engine
        self.driver = driver
        self.coordinator = coordinator
        self.last_celebration: Optional[Celebration] = None
        self.total_spins = 0

        self._active: Optional[tuple[SpinSession, SubjectProfile]] = None
        driver.add_settled_listener(self._on_settled)

    @property
    def outcomes(self):
        return self.engine.outcomes

    @property
    def active_subject(self) -> Optional[SubjectProfile]:
        return self._active[1] if self._active else None

    def request_spin(self, subject: SubjectProfile) -> Optional[SpinSession]:
        """Plan and start a spin for ``subject``; None while another spin runs."""
        if self.driver.state is not DriverState.IDLE:
            logger.info("Spin for staff %s blocked: wheel is busy", subject.id)
            return None

        session = self.engine.plan(self.driver.current_rotation())
        self._active = (session, subject)
        if not self.driver.start(session):
            self._active = None
            return None
        self.total_spins += 1
        logger.info("Spin #%d accepted for staff %s (%s)", self.total_spins, subject.id, subject.name)
        return session

    def reset(self) -> bool:
        """Force-cancel the running spin; nothing is celebrated for it."""
        cancelled = self.driver.force_reset()
        if cancelled:
            self._active = None
        return cancelled

    def leave(self) -> bool:
        """Abandon the pending quote request of the latest celebration."""
        if self.last_celebration is None:
            return False
        return self.coordinator.abandon(self.last_celebration)

    def _on_settled(self, session: SpinSession) -> None:
        if self._active is None or self._active[0] is not session:
            logger.warning("Settled session '%s' has no active subject", session.committed_outcome)
            return
        subject = self._active[1]
        self._active = None
        self.last_celebration = self.coordinator.on_spin_settled(subject, session.committed_outcome)

    def snapshot(self) -> dict:
        data = self.driver.snapshot()
        subject = self.active_subject
        data.update({
            "totalSpins": self.total_spins,
            "activeStaffId": subject.id if subject else None,
            "celebration": self.last_celebration.to_dict() if self.last_celebration else None,
        })
        return data
