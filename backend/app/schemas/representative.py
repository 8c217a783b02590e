"""
Representative Schemas - nomination, term details and representative reports
"""

from pydantic import ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from app.models.representative_report import ReportPriority, ReportStatus
from app.modules.auth.roles import Role
from app.schemas.common import CamelModel


class RepresentativeType(str, Enum):
    MESS = "mess"
    HOSTEL = "hostel"

    @property
    def role(self) -> Role:
        return Role.MESS_REPRESENTATIVE if self is RepresentativeType.MESS else Role.HOSTEL_REPRESENTATIVE


class NominateRequest(CamelModel):
    """POST /representatives/nominate body"""
    student_id: str = Field(..., min_length=1)
    representative_type: RepresentativeType
    hostel_id: Optional[str] = None
    elected_date: Optional[datetime] = None
    term_end: Optional[datetime] = None
    responsibilities: List[str] = Field(default_factory=list)


class RepresentativeUpdate(CamelModel):
    responsibilities: Optional[List[str]] = None
    achievements: Optional[List[str]] = None


class ReportSubmit(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=50)
    priority: ReportPriority = ReportPriority.MEDIUM
    target_audience: str = Field("staff", min_length=1, max_length=50)


class ReportResponse(CamelModel):
    id: str
    submitted_by_id: str
    submitter_role: str
    hostel_id: Optional[str] = None
    title: str
    description: str
    category: Optional[str] = None
    priority: ReportPriority
    target_audience: str
    status: ReportStatus
    submitted_at: datetime


def report_to_dict(report) -> dict:
    return ReportResponse.model_validate(report).dump()
