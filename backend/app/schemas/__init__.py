# Pydantic schemas
from app.schemas.common import CamelModel
from app.schemas.auth import (
    LoginRequest,
    AccountRegister,
    ProfileUpdate,
    StaffUpdate,
    StaffRoleUpdate,
    ChangePasswordRequest,
    AccountResponse,
    account_to_dict,
)
from app.schemas.registration import (
    ContactInfo,
    RegistrationSubmit,
    PaymentCompletion,
    TempRegistrationResponse,
)
from app.schemas.invoice import (
    InvoiceResponse,
    InvoiceSummary,
    Pagination,
    invoice_to_dict,
    invoice_summary,
)
from app.schemas.hostel import (
    HostelCreate,
    HostelResponse,
    OccupancyUpdate,
    AssignHostelRequest,
    hostel_to_dict,
)
from app.schemas.representative import (
    RepresentativeType,
    NominateRequest,
    RepresentativeUpdate,
    ReportSubmit,
    ReportResponse,
    report_to_dict,
)

__all__ = [
    "CamelModel",
    # Auth
    "LoginRequest",
    "AccountRegister",
    "ProfileUpdate",
    "StaffUpdate",
    "StaffRoleUpdate",
    "ChangePasswordRequest",
    "AccountResponse",
    "account_to_dict",
    # Registration
    "ContactInfo",
    "RegistrationSubmit",
    "PaymentCompletion",
    "TempRegistrationResponse",
    # Invoice
    "InvoiceResponse",
    "InvoiceSummary",
    "Pagination",
    "invoice_to_dict",
    "invoice_summary",
    # Hostel
    "HostelCreate",
    "HostelResponse",
    "OccupancyUpdate",
    "AssignHostelRequest",
    "hostel_to_dict",
    # Representatives
    "RepresentativeType",
    "NominateRequest",
    "RepresentativeUpdate",
    "ReportSubmit",
    "ReportResponse",
    "report_to_dict",
]
