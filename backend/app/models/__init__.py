"""SQLAlchemy ORM models."""

from app.models.staff import Staff
from app.models.spin_result import SpinResult

__all__ = [
    "Staff",
    "SpinResult",
]
