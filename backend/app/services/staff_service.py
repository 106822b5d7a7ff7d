"""Staff service — registration, listing, and participation counts."""

from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy import func

from app.models.staff import Staff
from app.models.spin_result import SpinResult
from app.wheel.coordinator import SubjectProfile


class StaffNotFound(ValueError):
    """No staff member with the requested id."""


FAVORITE_THINGS_COUNT = 3


def register(db: Session, name: str, department: str, favorite_things: list[str]) -> Staff:
    """Insert a staff member and return the new row."""
    name = name.strip()
    department = department.strip()
    things = [t.strip() for t in favorite_things]
    if not name:
        raise ValueError("Name is required")
    if not department:
        raise ValueError("Department is required")
    if len(things) != FAVORITE_THINGS_COUNT or not all(things):
        raise ValueError(f"Exactly {FAVORITE_THINGS_COUNT} favorite things are required")

    staff = Staff(
        name=name,
        department=department,
        favorite_thing_1=things[0],
        favorite_thing_2=things[1],
        favorite_thing_3=things[2],
    )
    db.add(staff)
    db.commit()
    db.refresh(staff)
    return staff


def get_staff(db: Session, staff_id: int) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if not staff:
        raise StaffNotFound(f"Staff {staff_id} not found")
    return staff


def spin_history(db: Session, staff_id: int) -> list[SpinResult]:
    """Spin results for one staff member, newest first."""
    return (
        db.query(SpinResult)
        .filter(SpinResult.staff_id == staff_id)
        .order_by(SpinResult.spun_at.desc(), SpinResult.id.desc())
        .all()
    )


def list_staff(db: Session, staff_id: Optional[int] = None) -> list[dict]:
    """All staff, newest first, with derived status and spin count.

    A staff member is ``completed`` once they have at least one spin result.
    Pass ``staff_id`` to restrict the listing to one row.
    """
    spin_count = func.count(SpinResult.id).label("spin_count")
    query = db.query(Staff, spin_count).outerjoin(SpinResult, SpinResult.staff_id == Staff.id)
    if staff_id is not None:
        query = query.filter(Staff.id == staff_id)
    rows = (
        query
        .group_by(Staff.id)
        .order_by(Staff.created_at.desc(), Staff.id.desc())
        .all()
    )
    return [
        {
            "id": staff.id,
            "name": staff.name,
            "department": staff.department,
            "favorite_thing_1": staff.favorite_thing_1,
            "favorite_thing_2": staff.favorite_thing_2,
            "favorite_thing_3": staff.favorite_thing_3,
            "status": "completed" if count > 0 else "pending",
            "spin_count": count,
            "created_at": staff.created_at.isoformat(),
        }
        for staff, count in rows
    ]


def counts_by_status(db: Session) -> dict:
    total_staff = db.query(func.count(Staff.id)).scalar() or 0
    completed_staff = db.query(func.count(func.distinct(SpinResult.staff_id))).scalar() or 0
    total_spins = db.query(func.count(SpinResult.id)).scalar() or 0
    return {
        "total_staff": total_staff,
        "pending_staff": total_staff - completed_staff,
        "completed_staff": completed_staff,
        "total_spins": total_spins,
    }


def to_profile(staff: Staff) -> SubjectProfile:
    return SubjectProfile(
        id=staff.id,
        name=staff.name,
        group=staff.department,
        preference_tags=tuple(staff.favorite_things),
    )
