"""Outcome space — the ordered, fixed list of wheel segments."""

from typing import Iterable, Iterator


class OutcomeSpace:
    """Immutable ordered sequence of unique segment labels.

    Segment ``i`` occupies the clockwise arc ``[i * slot_size, (i + 1) * slot_size)``
    measured from the pointer at rest, so the order is significant.

    Raises:
        ValueError: If the labels are empty, blank, or contain duplicates.
    """

    def __init__(self, labels: Iterable[str]):
        labels = tuple(labels)
        if not labels:
            raise ValueError("Outcome space must contain at least one label")
        if any(not isinstance(label, str) or not label.strip() for label in labels):
            raise ValueError("Outcome labels must be non-empty strings")

        seen = set()
        duplicates = []
        for label in labels:
            if label in seen:
                duplicates.append(label)
            seen.add(label)
        if duplicates:
            raise ValueError(f"Duplicate outcome labels: {', '.join(duplicates)}")

        self._labels = labels

    def size(self) -> int:
        return len(self._labels)

    def label_at(self, index: int) -> str:
        return self._labels[index % len(self._labels)]

    @property
    def slot_size(self) -> float:
        """Angular width of one segment in degrees."""
        return 360.0 / len(self._labels)

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __repr__(self) -> str:
        return f"OutcomeSpace({list(self._labels)!r})"
