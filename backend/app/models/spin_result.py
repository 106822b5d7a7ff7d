"""SpinResult model — append-only record of every settled spin."""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from app.database import Base


class SpinResult(Base):
    __tablename__ = "spin_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False, index=True)
    actor_name = Column(String(255), nullable=False)
    ai_quote = Column(Text, nullable=False)
    spun_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    staff = relationship("Staff", back_populates="spin_results")
