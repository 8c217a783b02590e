"""
Report filed by a mess or hostel representative for staff attention.
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum as SQLEnum
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class ReportPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ReportStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class RepresentativeReport(Base):
    __tablename__ = "representative_reports"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    submitted_by_id = Column(GUID, ForeignKey("accounts.id", ondelete="CASCADE"), index=True, nullable=False)
    submitter_role = Column(String(40), nullable=False)
    hostel_id = Column(GUID, ForeignKey("hostels.id", ondelete="SET NULL"), index=True, nullable=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=True)
    priority = Column(
        SQLEnum(ReportPriority, values_callable=lambda e: [m.value for m in e], name="report_priority"),
        default=ReportPriority.MEDIUM, nullable=False
    )
    target_audience = Column(String(50), default="staff", nullable=False)
    status = Column(
        SQLEnum(ReportStatus, values_callable=lambda e: [m.value for m in e], name="report_status"),
        default=ReportStatus.SUBMITTED, nullable=False
    )

    submitted_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<RepresentativeReport {self.title[:20]}>"
