"""
Quote request coordinator — turns a settled spin into a celebration.

A settled spin is celebrated in two stages:

1. A provisional record with template text is emitted synchronously, so the
   celebration is never blank while the text service is working.
2. One background task asks the text service for a quote. A well-formed reply
   replaces the template; a malformed reply, a timeout or a transport error
   keeps the template as the final text. The final record is emitted and then
   written once to the result store.

The provisional record is always emitted before the task is created, so it is
always observed first. A write failure is logged and does not touch the
records already emitted.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubjectProfile:
    """The staff member a spin is for. Read-only input."""

    id: int
    name: str
    group: str
    preference_tags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CelebrationRecord:
    subject_id: int
    outcome_label: str
    generated_text: str
    timestamp: datetime
    provisional: bool
    generated: bool = False

    def to_dict(self) -> dict:
        return {
            "staffId": self.subject_id,
            "actorName": self.outcome_label,
            "quote": self.generated_text,
            "timestamp": self.timestamp.isoformat(),
            "provisional": self.provisional,
            "generated": self.generated,
        }


class ResultStore(Protocol):
    def append(self, subject_id: int, outcome_label: str, text: str, timestamp: datetime) -> None: ...

    def list_for(self, subject_id: int) -> list[dict]: ...


QuoteGenerator = Callable[[SubjectProfile, str], Awaitable[str]]
RecordListener = Callable[[CelebrationRecord, "Celebration"], None]


def provisional_text(subject_name: str, outcome_label: str) -> str:
    return f"Congratulations {subject_name}! {outcome_label} is celebrating with you today! 🎉"


def clean_quote(text: str) -> str:
    """Strip whitespace and one pair of wrapping quotes from model output."""
    text = text.strip()
    for left, right in (('"', '"'), ("“", "”"), ("'", "'")):
        if len(text) >= 2 and text.startswith(left) and text.endswith(right):
            text = text[1:-1].strip()
            break
    return text


def is_well_formed_quote(text) -> bool:
    """True for a non-empty string with at least one letter.

    Degenerate model outputs such as ``"0.01"``, ``"42"`` or ``"..."`` are
    rejected.
    """
    if not isinstance(text, str):
        return False
    text = text.strip()
    if not text:
        return False
    return any(ch.isalpha() for ch in text)


class CelebrationState(str, Enum):
    PROVISIONAL = "provisional"
    SETTLED = "settled"
    ABANDONED = "abandoned"


class Celebration:
    """Handle for one spin's celebration: provisional now, final later."""

    def __init__(self, spin_id: int, subject: SubjectProfile, provisional: CelebrationRecord):
        self.spin_id = spin_id
        self.subject = subject
        self.provisional = provisional
        self.final: Optional[CelebrationRecord] = None
        self.state = CelebrationState.PROVISIONAL
        self.persisted: Optional[bool] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def outcome_label(self) -> str:
        return self.provisional.outcome_label

    @property
    def current(self) -> CelebrationRecord:
        return self.final if self.final is not None else self.provisional

    @property
    def done(self) -> bool:
        return self._task is None or self._task.done()

    async def wait(self) -> Optional[CelebrationRecord]:
        """Wait for the background stage; returns the final record or None if abandoned."""
        if self._task is not None:
            await asyncio.wait({self._task})
        return self.final

    def to_dict(self) -> dict:
        data = self.current.to_dict()
        data.update({
            "spinId": self.spin_id,
            "staffName": self.subject.name,
            "state": self.state.value,
            "persisted": self.persisted,
        })
        return data


class QuoteRequestCoordinator:
    """Coordinates quote generation and persistence for settled spins.

    Args:
        generate_quote: Coroutine function ``(subject, outcome_label) -> text``.
        store: Where final records are written.
        timeout_seconds: Upper bound for one text-service call.
        now: Timestamp source for records.
    """

    def __init__(
        self,
        generate_quote: QuoteGenerator,
        store: ResultStore,
        timeout_seconds: float = 5.0,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        if timeout_seconds <= 0:
            raise ValueError("Quote timeout must be positive")
        self._generate_quote = generate_quote
        self.store = store
        self.timeout_seconds = timeout_seconds
        self._now = now
        self._listeners: list[RecordListener] = []
        self._spin_ids = itertools.count(1)
        self.current: Optional[Celebration] = None

    def add_listener(self, listener: RecordListener) -> None:
        self._listeners.append(listener)

    def on_spin_settled(self, subject: SubjectProfile, outcome_label: str) -> Celebration:
        """Emit the provisional record and start the quote/persist task.

        Must be called from a running event loop.
        """
        provisional = CelebrationRecord(
            subject_id=subject.id,
            outcome_label=outcome_label,
            generated_text=provisional_text(subject.name, outcome_label),
            timestamp=self._now(),
            provisional=True,
        )
        celebration = Celebration(next(self._spin_ids), subject, provisional)
        self.current = celebration
        self._emit(provisional, celebration)

        celebration._task = asyncio.get_running_loop().create_task(self._complete(celebration))
        return celebration

    def abandon(self, celebration: Optional[Celebration] = None) -> bool:
        """Drop a celebration whose quote has not arrived yet.

        Nothing is persisted for an abandoned celebration. Once the final
        record exists the write is left to finish and False is returned.
        """
        celebration = celebration or self.current
        if celebration is None or celebration.final is not None or celebration.done:
            return False
        celebration._task.cancel()
        celebration.state = CelebrationState.ABANDONED
        logger.info(
            "Celebration #%d for staff %s abandoned before the quote arrived",
            celebration.spin_id,
            celebration.subject.id,
        )
        return True

    async def _complete(self, celebration: Celebration) -> CelebrationRecord:
        subject = celebration.subject
        text, generated = await self._request_text(subject, celebration.outcome_label)

        final = CelebrationRecord(
            subject_id=subject.id,
            outcome_label=celebration.outcome_label,
            generated_text=text if generated else celebration.provisional.generated_text,
            timestamp=self._now(),
            provisional=False,
            generated=generated,
        )
        celebration.final = final
        celebration.state = CelebrationState.SETTLED
        self._emit(final, celebration)

        celebration.persisted = await self._persist(final)
        return final

    async def _request_text(self, subject: SubjectProfile, outcome_label: str) -> tuple[str, bool]:
        try:
            raw = await asyncio.wait_for(
                self._generate_quote(subject, outcome_label),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Quote for staff %s timed out after %.1fs; using template text",
                subject.id,
                self.timeout_seconds,
            )
            return "", False
        except Exception as e:
            logger.warning("Quote for staff %s failed (%s); using template text", subject.id, e)
            return "", False

        if not is_well_formed_quote(raw):
            logger.warning("Malformed quote for staff %s: %r; using template text", subject.id, raw)
            return "", False
        return clean_quote(raw), True

    async def _persist(self, record: CelebrationRecord) -> bool:
        try:
            await asyncio.to_thread(
                self.store.append,
                record.subject_id,
                record.outcome_label,
                record.generated_text,
                record.timestamp,
            )
        except Exception:
            logger.exception(
                "Failed to persist celebration for staff %s ('%s')",
                record.subject_id,
                record.outcome_label,
            )
            return False
        logger.info("Celebration persisted for staff %s: '%s'", record.subject_id, record.outcome_label)
        return True

    def _emit(self, record: CelebrationRecord, celebration: Celebration) -> None:
        for listener in self._listeners:
            try:
                listener(record, celebration)
            except Exception:
                logger.exception("Celebration listener failed for spin #%d", celebration.spin_id)
