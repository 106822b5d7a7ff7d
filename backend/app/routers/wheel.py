"""Wheel router — server-driven spins for hall mode and the admin console.

The server owns the spin: it plans the rotation, commits to the outcome,
runs the animation timeline and celebrates when it settles. Clients replay
the returned session (start, delta, duration) and poll ``/state``.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth import require_admin
from app.schemas.spin import OutcomesResponse, SpinResponse, SpinSessionResponse, WheelActionResponse
from app.services import staff_service
from app.wheel import SubjectProfile, WheelController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/wheel", tags=["wheel"])


def get_wheel(request: Request) -> WheelController:
    return request.app.state.wheel


def get_subject(staff_id: int, db: Session = Depends(get_db)) -> SubjectProfile:
    """Load the staff member to spin for.

    Sync, so the query runs in the threadpool and not on the wheel's loop.
    """
    try:
        return staff_service.to_profile(staff_service.get_staff(db, staff_id))
    except staff_service.StaffNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error loading staff %s for a spin", staff_id)
        raise HTTPException(status_code=500, detail="Failed to fetch staff")


@router.get("/outcomes", response_model=OutcomesResponse)
def list_outcomes(wheel: WheelController = Depends(get_wheel)):
    return OutcomesResponse(outcomes=list(wheel.outcomes), slot_size=wheel.outcomes.slot_size)


@router.post("/spin/{staff_id}", response_model=SpinResponse)
async def spin(
    admin: str = Depends(require_admin),
    subject: SubjectProfile = Depends(get_subject),
    wheel: WheelController = Depends(get_wheel),
):
    """Start a spin for a staff member. Ignored while another spin is running."""
    session = wheel.request_spin(subject)
    if session is None:
        return SpinResponse(accepted=False, message="Wheel is currently spinning. Please wait.")

    return SpinResponse(
        accepted=True,
        session=SpinSessionResponse(
            start_rotation=session.start_rotation,
            total_rotation_delta=session.total_rotation_delta,
            target_rotation=session.target_rotation,
            committed_index=session.committed_index,
            committed_outcome=session.committed_outcome,
            animation_duration_ms=session.animation_duration_ms,
        ),
    )


@router.get("/state")
def wheel_state(wheel: WheelController = Depends(get_wheel)):
    return wheel.snapshot()


@router.post("/reset", response_model=WheelActionResponse)
async def reset(wheel: WheelController = Depends(get_wheel), admin: str = Depends(require_admin)):
    """Force-cancel the running spin; no result is recorded for it."""
    return WheelActionResponse(success=wheel.reset())


@router.post("/leave", response_model=WheelActionResponse)
async def leave(wheel: WheelController = Depends(get_wheel), admin: str = Depends(require_admin)):
    """Abandon a quote request that has not returned yet."""
    return WheelActionResponse(success=wheel.leave())
