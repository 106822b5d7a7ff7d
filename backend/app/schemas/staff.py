"""Staff registration, listing and analytics schemas."""

from pydantic import BaseModel, Field


class RegisterStaffRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    department: str = Field(min_length=1, max_length=255)
    favorite_things: list[str] = Field(alias="favoriteThings", min_length=3, max_length=3)

    class Config:
        populate_by_name = True


class RegisterStaffResponse(BaseModel):
    success: bool = True
    staff_id: int = Field(serialization_alias="staffId")


class StaffResponse(BaseModel):
    id: int
    name: str
    department: str
    favorite_thing_1: str
    favorite_thing_2: str
    favorite_thing_3: str
    status: str  # pending | completed
    spin_count: int
    created_at: str


class SpinHistoryItem(BaseModel):
    id: int
    staff_id: int
    actor_name: str
    ai_quote: str
    spun_at: str


class AnalyticsResponse(BaseModel):
    total_staff: int = Field(serialization_alias="totalStaff")
    pending_staff: int = Field(serialization_alias="pendingStaff")
    completed_staff: int = Field(serialization_alias="completedStaff")
    total_spins: int = Field(serialization_alias="totalSpins")
