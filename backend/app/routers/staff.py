"""Staff router — registration, listing, spin history and analytics."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.rate_limit import limiter
from app.schemas.staff import (
    RegisterStaffRequest,
    RegisterStaffResponse,
    StaffResponse,
    SpinHistoryItem,
    AnalyticsResponse,
)
from app.services import staff_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["staff"])


@router.post("/staff/register", response_model=RegisterStaffResponse)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
def register_staff(request: Request, req: RegisterStaffRequest, db: Session = Depends(get_db)):
    """Register a staff member for the wheel."""
    try:
        staff = staff_service.register(db, req.name, req.department, req.favorite_things)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Registration error")
        raise HTTPException(status_code=500, detail="Registration failed")
    logger.info("Registered staff %s (%s, %s)", staff.id, staff.name, staff.department)
    return RegisterStaffResponse(staff_id=staff.id)


@router.get("/staff", response_model=list[StaffResponse])
def list_staff(db: Session = Depends(get_db)):
    """All staff, newest first, with status and spin count."""
    try:
        return [StaffResponse(**row) for row in staff_service.list_staff(db)]
    except SQLAlchemyError:
        logger.exception("Error fetching staff")
        raise HTTPException(status_code=500, detail="Failed to fetch staff")


@router.get("/staff/{staff_id}", response_model=StaffResponse)
def get_staff(staff_id: int, db: Session = Depends(get_db)):
    try:
        rows = staff_service.list_staff(db, staff_id=staff_id)
    except SQLAlchemyError:
        logger.exception("Error fetching staff %s", staff_id)
        raise HTTPException(status_code=500, detail="Failed to fetch staff")
    if not rows:
        raise HTTPException(status_code=404, detail="Staff not found")
    return StaffResponse(**rows[0])


@router.get("/staff/{staff_id}/spins", response_model=list[SpinHistoryItem])
def get_staff_spins(staff_id: int, db: Session = Depends(get_db)):
    """Spin history for one staff member, most recent first."""
    try:
        staff_service.get_staff(db, staff_id)
        rows = staff_service.spin_history(db, staff_id)
    except staff_service.StaffNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error fetching spin history for staff %s", staff_id)
        raise HTTPException(status_code=500, detail="Failed to fetch spin history")

    return [
        SpinHistoryItem(
            id=r.id,
            staff_id=r.staff_id,
            actor_name=r.actor_name,
            ai_quote=r.ai_quote,
            spun_at=r.spun_at.isoformat(),
        )
        for r in rows
    ]


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(db: Session = Depends(get_db)):
    try:
        return AnalyticsResponse(**staff_service.counts_by_status(db))
    except SQLAlchemyError:
        logger.exception("Analytics error")
        raise HTTPException(status_code=500, detail="Failed to fetch analytics")
