from app.services.account_repository import AccountRepository
from app.services.auth_service import AuthService, auth_service
from app.services.registration_service import RegistrationService, registration_service
from app.services.invoice_service import InvoiceService, invoice_service
from app.services.hostel_service import HostelService, hostel_service
from app.services.staff_service import StaffService, staff_service
from app.services.representative_service import RepresentativeService, representative_service

__all__ = [
    "AccountRepository",
    "AuthService",
    "auth_service",
    "RegistrationService",
    "registration_service",
    "InvoiceService",
    "invoice_service",
    "HostelService",
    "hostel_service",
    "StaffService",
    "staff_service",
    "RepresentativeService",
    "representative_service",
]
