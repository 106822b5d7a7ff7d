"""Tests for the celebration flow after a spin settles (no DB dependency)."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from app.wheel.coordinator import (
    CelebrationState,
    QuoteRequestCoordinator,
    SubjectProfile,
    clean_quote,
    is_well_formed_quote,
    provisional_text,
)
from fakes import MemoryStore, quote_hanging, quote_raising, quote_returning

MEENA = SubjectProfile(id=7, name="Meena", group="Computer Science", preference_tags=("Coffee", "Books", "Music"))
QUOTE = "Dear, Meena 🌸 Since you love Coffee ☕, Aamir Khan says your energy lights every path 🌟 Happy Teacher’s Day 🎉"


def _ticking_clock():
    base = datetime(2025, 9, 5, 10, 0, tzinfo=timezone.utc)
    ticks = iter(range(1000))
    return lambda: base + timedelta(seconds=next(ticks))


def _run_celebration(coordinator, subject=MEENA, outcome="Aamir Khan"):
    events = []
    coordinator.add_listener(lambda record, celebration: events.append(record))

    async def main():
        celebration = coordinator.on_spin_settled(subject, outcome)
        provisional_seen = list(events)
        final = await celebration.wait()
        return celebration, provisional_seen, final

    celebration, provisional_seen, final = asyncio.run(main())
    return celebration, provisional_seen, final, events


class TestQuoteValidation:

    @pytest.mark.parametrize("text", [QUOTE, "Happy Teacher's Day!", "  Dear, Arjun  ", "A"])
    def test_well_formed(self, text):
        assert is_well_formed_quote(text)

    @pytest.mark.parametrize("text", ["0.01", "42", "", "   ", "...", "!!! ??", "1,000.00", None, 0.01, {"quote": "x"}])
    def test_malformed(self, text):
        assert not is_well_formed_quote(text)

    def test_clean_strips_wrapping_quotes(self):
        assert clean_quote('  "Dear, Meena 🎉"\n') == "Dear, Meena 🎉"
        assert clean_quote("“Dear, Meena”") == "Dear, Meena"
        assert clean_quote('Dear, "Meena"') == 'Dear, "Meena"'

    def test_provisional_text_mentions_subject_and_outcome(self):
        assert provisional_text("Meena", "Aamir Khan") == (
            "Congratulations Meena! Aamir Khan is celebrating with you today! 🎉"
        )


class TestSuccessfulQuote:

    def test_final_record_carries_generated_text_and_is_persisted(self):
        store = MemoryStore()
        generate = quote_returning(QUOTE)
        coordinator = QuoteRequestCoordinator(generate, store, now=_ticking_clock())

        celebration, _, final, _ = _run_celebration(coordinator)

        assert final.generated_text == QUOTE
        assert final.generated is True
        assert final.provisional is False
        assert celebration.state is CelebrationState.SETTLED
        assert celebration.persisted is True
        assert store.rows == [(7, "Aamir Khan", QUOTE, final.timestamp)]

    def test_request_carries_subject_and_outcome(self):
        generate = quote_returning(QUOTE)
        coordinator = QuoteRequestCoordinator(generate, MemoryStore())
        _run_celebration(coordinator, outcome="Ajay Devgn")
        assert generate.calls == [(MEENA, "Ajay Devgn")]

    def test_provisional_emitted_before_final(self):
        coordinator = QuoteRequestCoordinator(quote_returning(QUOTE), MemoryStore(), now=_ticking_clock())

        celebration, provisional_seen, final, events = _run_celebration(coordinator)

        assert len(provisional_seen) == 1
        assert provisional_seen[0].provisional is True
        assert provisional_seen[0].generated_text == provisional_text("Meena", "Aamir Khan")
        assert [r.provisional for r in events] == [True, False]
        assert events[1] is final
        assert final.timestamp > events[0].timestamp
        assert celebration.current is final

    def test_wrapping_quotes_removed_before_persisting(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_returning(f'"{QUOTE}"'), store)
        _, _, final, _ = _run_celebration(coordinator)
        assert final.generated_text == QUOTE
        assert store.rows[0][2] == QUOTE


class TestFallback:

    def _assert_fallback(self, celebration, final, store):
        expected = provisional_text("Meena", "Aamir Khan")
        assert final.generated_text == expected
        assert final.generated is False
        assert celebration.state is CelebrationState.SETTLED
        assert celebration.persisted is True
        assert [row[2] for row in store.rows] == [expected]

    def test_numeric_reply_is_malformed(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_returning("0.01"), store)
        celebration, _, final, _ = _run_celebration(coordinator)
        assert final.generated_text != "0.01"
        self._assert_fallback(celebration, final, store)

    def test_empty_reply(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_returning("   "), store)
        celebration, _, final, _ = _run_celebration(coordinator)
        self._assert_fallback(celebration, final, store)

    def test_transport_error(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_raising(ConnectionError("unreachable")), store)
        celebration, _, final, _ = _run_celebration(coordinator)
        self._assert_fallback(celebration, final, store)

    def test_timeout(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_hanging(), store, timeout_seconds=0.05)
        celebration, _, final, _ = _run_celebration(coordinator)
        self._assert_fallback(celebration, final, store)

    def test_invalid_timeout_rejected(self):
        with pytest.raises(ValueError):
            QuoteRequestCoordinator(quote_returning(QUOTE), MemoryStore(), timeout_seconds=0)


class TestPersistenceFailure:

    def test_write_failure_is_swallowed_and_display_kept(self):
        store = MemoryStore(fail=True)
        coordinator = QuoteRequestCoordinator(quote_returning(QUOTE), store)

        celebration, _, final, events = _run_celebration(coordinator)

        assert celebration.persisted is False
        assert celebration.state is CelebrationState.SETTLED
        assert celebration.current.generated_text == QUOTE
        assert len(events) == 2
        assert store.rows == []

    def test_failing_listener_does_not_stop_flow(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_returning(QUOTE), store)

        def broken(record, celebration):
            raise RuntimeError("ui went away")

        coordinator.add_listener(broken)
        celebration, _, final, _ = _run_celebration(coordinator)
        assert final.generated_text == QUOTE
        assert len(store.rows) == 1


class TestAbandon:

    def test_abandon_before_reply_persists_nothing(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_hanging(), store, timeout_seconds=10)

        async def main():
            celebration = coordinator.on_spin_settled(MEENA, "Aamir Khan")
            await asyncio.sleep(0)
            abandoned = coordinator.abandon()
            final = await celebration.wait()
            return celebration, abandoned, final

        celebration, abandoned, final = asyncio.run(main())

        assert abandoned is True
        assert final is None
        assert celebration.state is CelebrationState.ABANDONED
        assert celebration.current.provisional is True
        assert store.rows == []

    def test_abandon_after_final_is_refused(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_returning(QUOTE), store)
        celebration, _, _, _ = _run_celebration(coordinator)
        assert coordinator.abandon(celebration) is False
        assert celebration.state is CelebrationState.SETTLED
        assert len(store.rows) == 1

    def test_abandon_without_celebration(self):
        coordinator = QuoteRequestCoordinator(quote_returning(QUOTE), MemoryStore())
        assert coordinator.abandon() is False


class TestSequentialSpins:

    def test_second_spin_appends_independent_record(self):
        store = MemoryStore()
        coordinator = QuoteRequestCoordinator(quote_returning(QUOTE), store, now=_ticking_clock())

        async def main():
            first = coordinator.on_spin_settled(MEENA, "Aamir Khan")
            await first.wait()
            second = coordinator.on_spin_settled(MEENA, "Ajay Devgn")
            await second.wait()
            return first, second

        first, second = asyncio.run(main())

        assert first.spin_id != second.spin_id
        assert [row[1] for row in store.rows] == ["Aamir Khan", "Ajay Devgn"]
        history = store.list_for(7)
        assert [h["outcome_label"] for h in history] == ["Ajay Devgn", "Aamir Khan"]

    def test_to_dict(self):
        coordinator = QuoteRequestCoordinator(quote_returning(QUOTE), MemoryStore())
        celebration, _, _, _ = _run_celebration(coordinator)
        data = celebration.to_dict()
        assert data["staffId"] == 7
        assert data["staffName"] == "Meena"
        assert data["actorName"] == "Aamir Khan"
        assert data["quote"] == QUOTE
        assert data["state"] == "settled"
        assert data["persisted"] is True
        assert data["provisional"] is False
