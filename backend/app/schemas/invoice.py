from typing import Optional
from datetime import datetime

from app.models.invoice import InvoiceStatus
from app.schemas.common import CamelModel


class InvoiceResponse(CamelModel):
    """Invoice record (document location stays server-side)"""
    id: str
    invoice_number: str
    invoice_date: datetime
    academic_year: str
    student_details: dict
    fee_details: dict
    payment_details: dict
    college_details: dict
    temp_registration_id: str
    student_id: str
    student_pool: str
    status: InvoiceStatus
    remarks: Optional[str] = None
    document_generated: bool
    download_count: int
    last_downloaded: Optional[datetime] = None
    created_at: datetime


class InvoiceSummary(CamelModel):
    """Short form returned by complete-payment"""
    invoice_number: str
    invoice_id: str
    total_amount: int
    invoice_date: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_invoices: int
    has_next: bool
    has_prev: bool


def invoice_to_dict(invoice) -> dict:
    return InvoiceResponse.model_validate(invoice).dump()


def invoice_summary(invoice) -> dict:
    return InvoiceSummary(
        invoice_number=invoice.invoice_number,
        invoice_id=str(invoice.id),
        total_amount=invoice.total_amount,
        invoice_date=invoice.invoice_date,
    ).dump()
