"""Result stores — append-only history of settled spins."""

import threading
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from app.models.spin_result import SpinResult
from app.services import staff_service


def _as_dict(result_id, outcome_label: str, text: str, timestamp: datetime) -> dict:
    return {
        "id": result_id,
        "outcome_label": outcome_label,
        "text": text,
        "timestamp": timestamp.isoformat(),
    }


class SqlResultStore:
    """Writes spin results through SQLAlchemy.

    Each call opens its own session, so it is safe to use from the worker
    threads that persist celebrations.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def append(self, subject_id: int, outcome_label: str, text: str, timestamp: datetime) -> int:
        db = self._session_factory()
        try:
            result = SpinResult(
                staff_id=subject_id,
                actor_name=outcome_label,
                ai_quote=text,
                spun_at=timestamp,
            )
            db.add(result)
            db.commit()
            return result.id
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def list_for(self, subject_id: int) -> list[dict]:
        db = self._session_factory()
        try:
            rows = staff_service.spin_history(db, subject_id)
            return [_as_dict(r.id, r.actor_name, r.ai_quote, r.spun_at) for r in rows]
        finally:
            db.close()


class InMemoryResultStore:
    """Process-local store used by tests and demos."""

    def __init__(self):
        self._rows: list[dict] = []
        self._lock = threading.Lock()

    def append(self, subject_id: int, outcome_label: str, text: str, timestamp: datetime) -> int:
        with self._lock:
            result_id = len(self._rows) + 1
            self._rows.append({
                "id": result_id,
                "subject_id": subject_id,
                "outcome_label": outcome_label,
                "text": text,
                "timestamp": timestamp,
            })
            return result_id

    def list_for(self, subject_id: int) -> list[dict]:
        with self._lock:
            rows = [r for r in self._rows if r["subject_id"] == subject_id]
        rows.sort(key=lambda r: (r["timestamp"], r["id"]), reverse=True)
        return [_as_dict(r["id"], r["outcome_label"], r["text"], r["timestamp"]) for r in rows]

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
