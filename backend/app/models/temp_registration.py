"""
Temporary registration - the provisional record a student submits before paying.

Lives for REGISTRATION_TTL_HOURS. Once expired it is treated as absent by
every read and by promotion, and the sweeper deletes it.
"""

from sqlalchemy import Column, String, DateTime, Date, Integer, JSON, Enum as SQLEnum
from datetime import datetime, timedelta
from typing import Optional
import enum

from app.core.config import settings
from app.core.database import Base
from app.core.types import GUID, LowercaseString, generate_uuid, utcnow


class RegistrationStatus(str, enum.Enum):
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_PROCESSING = "payment_processing"
    PAYMENT_FAILED = "payment_failed"
    COMPLETED = "completed"


def registration_expiry(created_at: Optional[datetime] = None) -> datetime:
    """Absolute expiry for a record created at `created_at` (default now)"""
    return (created_at or utcnow()) + timedelta(hours=settings.REGISTRATION_TTL_HOURS)


class TempRegistration(Base):
    """Pre-payment registration, one per email"""
    __tablename__ = "temp_registrations"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(LowercaseString, unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Personal / academic
    name = Column(String(200), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    course = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    gender = Column(String(20), nullable=False)
    category = Column(String(10), nullable=False)
    mess_preference = Column(String(10), nullable=False)
    profile_image_path = Column(String(500), nullable=True)

    # {name, occupation, address, pin, contact}
    parent_info = Column(JSON, nullable=False)
    guardian_info = Column(JSON, nullable=False)

    status = Column(
        SQLEnum(RegistrationStatus, values_callable=lambda e: [m.value for m in e], name="registration_status"),
        default=RegistrationStatus.PENDING_PAYMENT,
        nullable=False,
    )

    # Filled in at payment completion
    payment_id = Column(String(100), nullable=True)
    transaction_id = Column(String(100), nullable=True)
    payment_method = Column(String(50), nullable=True)
    payment_date = Column(DateTime, nullable=True)
    payment_amount = Column(Integer, nullable=True)

    submitted_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, default=registration_expiry, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > self.expires_at

    def __repr__(self):
        return f"<TempRegistration {self.email} ({self.status.value})>"
