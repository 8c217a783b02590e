from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, CheckConstraint, Enum as SQLEnum
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class HostelGender(str, enum.Enum):
    BOYS = "boys"
    GIRLS = "girls"


class Hostel(Base):
    """Hostel block with capacity tracking"""
    __tablename__ = "hostels"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_hostels_capacity"),
        CheckConstraint("current_occupancy >= 0 AND current_occupancy <= capacity", name="ck_hostels_occupancy"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    code = Column(String(20), unique=True, index=True, nullable=False)
    gender = Column(SQLEnum(HostelGender, values_callable=lambda e: [m.value for m in e], name="hostel_gender"), nullable=False)
    type = Column(String(50), default="Regular", nullable=False)

    capacity = Column(Integer, nullable=False)
    current_occupancy = Column(Integer, default=0, nullable=False)
    floors = Column(Integer, nullable=True)
    rooms_per_floor = Column(Integer, nullable=True)

    incharge_id = Column(GUID, nullable=True)
    hostel_rep_id = Column(GUID, nullable=True)
    mess_rep_id = Column(GUID, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def available_capacity(self) -> int:
        return max(0, self.capacity - (self.current_occupancy or 0))

    @property
    def occupancy_percentage(self) -> float:
        if not self.capacity:
            return 0.0
        return round((self.current_occupancy or 0) / self.capacity * 100, 2)

    def __repr__(self):
        return f"<Hostel {self.code}>"
