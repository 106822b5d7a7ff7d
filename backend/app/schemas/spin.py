"""Quote generation, spin result and wheel control schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class GenerateQuoteRequest(BaseModel):
    staff_name: str = Field(alias="staffName", min_length=1)
    department: str
    favorite_things: list[str] = Field(alias="favoriteThings", default_factory=list)
    actor_name: str = Field(alias="actorName", min_length=1)

    class Config:
        populate_by_name = True


class GenerateQuoteResponse(BaseModel):
    quote: str
    generated: bool


class SaveSpinResultRequest(BaseModel):
    staff_id: int = Field(alias="staffId")
    actor_name: str = Field(alias="actorName", min_length=1)
    ai_quote: str = Field(alias="aiQuote", min_length=1)

    class Config:
        populate_by_name = True


class SaveSpinResultResponse(BaseModel):
    success: bool = True
    id: int


class OutcomesResponse(BaseModel):
    outcomes: list[str]
    slot_size: float = Field(serialization_alias="slotSize")


class SpinSessionResponse(BaseModel):
    start_rotation: float = Field(serialization_alias="startRotation")
    total_rotation_delta: float = Field(serialization_alias="totalRotationDelta")
    target_rotation: float = Field(serialization_alias="targetRotation")
    committed_index: int = Field(serialization_alias="committedIndex")
    committed_outcome: str = Field(serialization_alias="committedOutcome")
    animation_duration_ms: int = Field(serialization_alias="animationDurationMs")


class SpinResponse(BaseModel):
    accepted: bool
    session: Optional[SpinSessionResponse] = None
    message: Optional[str] = None


class WheelActionResponse(BaseModel):
    success: bool
