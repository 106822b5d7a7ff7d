"""Staff model — one row per registered staff member."""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.orm import relationship

from app.database import Base


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    department = Column(String(255), nullable=False)
    favorite_thing_1 = Column(String(255), nullable=False)
    favorite_thing_2 = Column(String(255), nullable=False)
    favorite_thing_3 = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    spin_results = relationship(
        "SpinResult",
        back_populates="staff",
        order_by="SpinResult.spun_at.desc()",
    )

    @property
    def favorite_things(self) -> list[str]:
        return [self.favorite_thing_1, self.favorite_thing_2, self.favorite_thing_3]
