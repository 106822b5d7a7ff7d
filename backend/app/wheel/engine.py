"""
Spin engine — plans one spin and commits to its outcome up front.

The pointer sits at 0° (top) and the wheel turns clockwise. After a total
rotation ``R`` the segment under the pointer is the one whose arc contains
the pointer angle measured in wheel coordinates:

    pointer = (360 - (R mod 360)) mod 360
    slot    = floor(pointer / (360 / N)) mod N

The outcome is derived from the target rotation rather than drawn
separately, so the stopping angle of the animation and the recorded result
cannot disagree. Because the final offset is uniform over a full circle and
the slots partition the circle into N equal arcs, every label has
probability exactly 1/N whatever the starting rotation.
"""

import math
import random
from dataclasses import dataclass
from typing import Optional, Protocol

from app.wheel.outcomes import OutcomeSpace


class RandomSource(Protocol):
    """Subset of :class:`random.Random` the engine draws from."""

    def random(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...


@dataclass(frozen=True)
class SpinSession:
    """Parameters and committed result of one spin, from trigger to settle."""

    start_rotation: float
    total_rotation_delta: float
    committed_index: int
    committed_outcome: str
    animation_duration_ms: int

    @property
    def target_rotation(self) -> float:
        return self.start_rotation + self.total_rotation_delta

    def to_dict(self) -> dict:
        return {
            "startRotation": self.start_rotation,
            "totalRotationDelta": self.total_rotation_delta,
            "targetRotation": self.target_rotation,
            "committedIndex": self.committed_index,
            "committedOutcome": self.committed_outcome,
            "animationDurationMs": self.animation_duration_ms,
        }


def pointer_angle(rotation: float) -> float:
    """Angle on the wheel (degrees, clockwise from segment 0) under the pointer."""
    return (360.0 - (rotation % 360.0)) % 360.0


def slot_for_rotation(rotation: float, size: int) -> int:
    """Index of the segment under the pointer after a total clockwise ``rotation``.

    Always in ``[0, size)``, including exactly at slot boundaries and when
    ``size`` does not divide 360.
    """
    if size < 1:
        raise ValueError("Wheel must have at least one segment")
    slot_size = 360.0 / size
    return int(math.floor(pointer_angle(rotation) / slot_size)) % size


class SpinEngine:
    """Draws a rotation for a spin and resolves the outcome it lands on.

    Args:
        outcomes: Segments of the wheel.
        rng: Random source; defaults to a fresh :class:`random.Random`.
        min_revolutions / max_revolutions: Inclusive bounds for the whole
            number of extra turns added before the final offset.
        min_duration_ms / max_duration_ms: Inclusive bounds for the animation
            length. Equal bounds give a fixed duration.
    """

    def __init__(
        self,
        outcomes: OutcomeSpace,
        rng: Optional[RandomSource] = None,
        min_revolutions: int = 4,
        max_revolutions: int = 7,
        min_duration_ms: int = 4000,
        max_duration_ms: int = 9000,
    ):
        if min_revolutions < 0 or max_revolutions < min_revolutions:
            raise ValueError(
                f"Invalid revolution bounds: {min_revolutions}..{max_revolutions}"
            )
        if min_duration_ms <= 0 or max_duration_ms < min_duration_ms:
            raise ValueError(
                f"Invalid duration bounds: {min_duration_ms}..{max_duration_ms} ms"
            )

        self.outcomes = outcomes
        self.rng = rng if rng is not None else random.Random()
        self.min_revolutions = min_revolutions
        self.max_revolutions = max_revolutions
        self.min_duration_ms = min_duration_ms
        self.max_duration_ms = max_duration_ms

    def resolve(self, target_rotation: float) -> tuple[int, str]:
        """Return ``(index, label)`` of the segment under the pointer."""
        index = slot_for_rotation(target_rotation, self.outcomes.size())
        return index, self.outcomes.label_at(index)

    def plan(self, current_rotation: float) -> SpinSession:
        """Plan a spin starting from ``current_rotation`` (degrees, cumulative)."""
        extra_revolutions = self.rng.randint(self.min_revolutions, self.max_revolutions)
        # random() is in [0, 1), so the offset never reaches a full turn
        final_offset = self.rng.random() * 360.0
        total_rotation_delta = extra_revolutions * 360.0 + final_offset

        if self.min_duration_ms == self.max_duration_ms:
            duration_ms = self.min_duration_ms
        else:
            duration_ms = self.rng.randint(self.min_duration_ms, self.max_duration_ms)

        index, label = self.resolve(current_rotation + total_rotation_delta)
        return SpinSession(
            start_rotation=current_rotation,
            total_rotation_delta=total_rotation_delta,
            committed_index=index,
            committed_outcome=label,
            animation_duration_ms=duration_ms,
        )
