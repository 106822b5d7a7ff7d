"""Spin router — AI quote generation and direct result persistence."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.spin_result import SpinResult
from app.schemas.spin import (
    GenerateQuoteRequest,
    GenerateQuoteResponse,
    SaveSpinResultRequest,
    SaveSpinResultResponse,
)
from app.services import staff_service
from app.services.ai_client import generate_quote
from app.wheel.coordinator import clean_quote, is_well_formed_quote, provisional_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["spin"])


@router.post("/generate-quote", response_model=GenerateQuoteResponse)
async def generate_quote_endpoint(req: GenerateQuoteRequest):
    """Generate a celebration quote; falls back to template text on any failure."""
    try:
        raw = await asyncio.wait_for(
            generate_quote(req.staff_name, req.department, req.favorite_things, req.actor_name),
            timeout=settings.QUOTE_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning("AI quote generation timed out for '%s'", req.staff_name)
        raw = None
    except Exception as e:
        logger.warning("AI quote generation error: %s", e)
        raw = None

    if raw is not None and is_well_formed_quote(raw):
        return GenerateQuoteResponse(quote=clean_quote(raw), generated=True)
    if raw is not None:
        logger.warning("Malformed AI quote for '%s': %r", req.staff_name, raw)
    return GenerateQuoteResponse(
        quote=provisional_text(req.staff_name, req.actor_name),
        generated=False,
    )


@router.post("/spin/result", response_model=SaveSpinResultResponse)
def save_spin_result(req: SaveSpinResultRequest, db: Session = Depends(get_db)):
    """Persist a spin result produced by a client-driven wheel."""
    try:
        staff_service.get_staff(db, req.staff_id)
    except staff_service.StaffNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        result = SpinResult(
            staff_id=req.staff_id,
            actor_name=req.actor_name,
            ai_quote=req.ai_quote,
        )
        db.add(result)
        db.commit()
        db.refresh(result)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error saving spin result")
        raise HTTPException(status_code=500, detail="Failed to save result")
    return SaveSpinResultResponse(id=result.id)
