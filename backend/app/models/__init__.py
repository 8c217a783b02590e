# Re-export all models for convenient imports
from app.models.hostel import Hostel, HostelGender
from app.models.account import (
    Account,
    AccountPool,
    POOL_LOOKUP_ORDER,
    STUDENT_POOLS,
    pool_for_gender,
)
from app.models.temp_registration import TempRegistration, RegistrationStatus
from app.models.invoice import Invoice, InvoiceStatus, FEE_TOTAL, fee_schedule
from app.models.representative_report import RepresentativeReport, ReportPriority, ReportStatus

__all__ = [
    # Hostel
    "Hostel",
    "HostelGender",
    # Accounts
    "Account",
    "AccountPool",
    "POOL_LOOKUP_ORDER",
    "STUDENT_POOLS",
    "pool_for_gender",
    # Registration
    "TempRegistration",
    "RegistrationStatus",
    # Invoice
    "Invoice",
    "InvoiceStatus",
    "FEE_TOTAL",
    "fee_schedule",
    # Representatives
    "RepresentativeReport",
    "ReportPriority",
    "ReportStatus",
]
