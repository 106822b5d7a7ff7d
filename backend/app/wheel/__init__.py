"""Spin wheel core: outcome selection, animation timeline, celebrations."""

from typing import Optional

from app.wheel.animation import AnimationDriver, DriverState
from app.wheel.controller import WheelController
from app.wheel.coordinator import (
    Celebration,
    CelebrationRecord,
    QuoteGenerator,
    QuoteRequestCoordinator,
    ResultStore,
    SubjectProfile,
)
from app.wheel.engine import RandomSource, SpinEngine, SpinSession, slot_for_rotation
from app.wheel.outcomes import OutcomeSpace


def build_wheel(
    settings,
    store: ResultStore,
    generate_quote: QuoteGenerator,
    rng: Optional[RandomSource] = None,
) -> WheelController:
    """Assemble a wheel from application settings.

    Raises:
        ValueError: If the configured outcomes or bounds are invalid.
    """
    outcomes = OutcomeSpace(settings.wheel_labels)
    engine = SpinEngine(
        outcomes,
        rng=rng,
        min_revolutions=settings.WHEEL_MIN_REVOLUTIONS,
        max_revolutions=settings.WHEEL_MAX_REVOLUTIONS,
        min_duration_ms=settings.WHEEL_MIN_DURATION_MS,
        max_duration_ms=settings.WHEEL_MAX_DURATION_MS,
    )
    driver = AnimationDriver(frame_interval_ms=settings.WHEEL_FRAME_INTERVAL_MS)
    coordinator = QuoteRequestCoordinator(
        generate_quote,
        store,
        timeout_seconds=settings.QUOTE_TIMEOUT_SECONDS,
    )
    return WheelController(engine, driver, coordinator)


__all__ = [
    "AnimationDriver",
    "Celebration",
    "CelebrationRecord",
    "DriverState",
    "OutcomeSpace",
    "QuoteRequestCoordinator",
    "SpinEngine",
    "SpinSession",
    "SubjectProfile",
    "WheelController",
    "build_wheel",
    "slot_for_rotation",
]
