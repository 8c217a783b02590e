"""
Fee invoice issued once per completed registration payment.

The fee schedule is fixed; every invoice carries a copy of it and the total
is always the precomputed sum, never caller input.
"""

from sqlalchemy import Column, String, DateTime, Integer, Boolean, Text, JSON, ForeignKey, Enum as SQLEnum
from datetime import datetime
from typing import Optional
import enum

from app.core.database import Base
from app.core.types import GUID, LowercaseString, generate_uuid, utcnow


# Fee components in rupees, in print order
FEE_COMPONENTS = (
    ("admissionFee", 500),
    ("amenitiesFund", 600),
    ("blockAdvance", 5000),
    ("roomRent", 600),
    ("electricityCharges", 600),
    ("waterCharges", 500),
    ("establishmentCharges", 15000),
    ("messAdvance", 24000),
)

FEE_TOTAL = sum(amount for _, amount in FEE_COMPONENTS)  # 46800


def fee_schedule() -> dict:
    """Fresh copy of the fee breakdown including totalAmount"""
    details = {name: amount for name, amount in FEE_COMPONENTS}
    details["totalAmount"] = FEE_TOTAL
    return details


class InvoiceStatus(str, enum.Enum):
    GENERATED = "generated"
    SENT = "sent"
    DOWNLOADED = "downloaded"
    ARCHIVED = "archived"


class Invoice(Base):
    """Invoice model"""
    __tablename__ = "invoices"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    invoice_number = Column(String(30), unique=True, index=True, nullable=False)
    invoice_date = Column(DateTime, default=utcnow, nullable=False)
    academic_year = Column(String(9), nullable=False)

    # {name, email, registerNumber, course, year, gender, category, hostelType}
    student_details = Column(JSON, nullable=False)
    student_email = Column(LowercaseString, index=True, nullable=False)
    fee_details = Column(JSON, nullable=False)
    # {paymentId, transactionId, paymentMethod, paymentDate, paymentStatus}
    payment_details = Column(JSON, nullable=False)
    college_details = Column(JSON, nullable=False)

    temp_registration_id = Column(GUID, nullable=False)
    student_id = Column(GUID, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    student_pool = Column(String(20), nullable=False)

    status = Column(
        SQLEnum(InvoiceStatus, values_callable=lambda e: [m.value for m in e], name="invoice_status"),
        default=InvoiceStatus.GENERATED,
        nullable=False,
    )
    remarks = Column(Text, nullable=True)

    # Rendered document
    document_path = Column(String(500), nullable=True)
    document_generated = Column(Boolean, default=False, nullable=False)

    download_count = Column(Integer, default=0, nullable=False)
    last_downloaded = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def total_amount(self) -> int:
        return (self.fee_details or {}).get("totalAmount", FEE_TOTAL)

    def track_download(self, now: Optional[datetime] = None) -> None:
        """Count a download; only a `generated` invoice moves to `downloaded`"""
        self.download_count = (self.download_count or 0) + 1
        self.last_downloaded = now or utcnow()
        if self.status == InvoiceStatus.GENERATED:
            self.status = InvoiceStatus.DOWNLOADED

    def __repr__(self):
        return f"<Invoice {self.invoice_number}>"
