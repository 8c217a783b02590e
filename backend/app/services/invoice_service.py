"""
Invoice Service - fee invoices for completed registrations

Handles:
- Invoice creation with the fixed fee schedule
- HTML document rendering to INVOICES_PATH
- Lookup by id, number and student email; paginated listing
- Download tracking
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import math

import aiofiles
import aiofiles.os

from app.core.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError, InvoiceNotFoundError
from app.core.logging_config import logger
from app.core.types import normalize_email, utcnow
from app.models.account import Account
from app.models.invoice import Invoice, InvoiceStatus, fee_schedule
from app.modules.auth.identity import Identity
from app.services.identifiers import generate_unique, invoice_number_candidate
from app.services.invoice_renderer import render_invoice_html


def academic_year(now: Optional[datetime] = None) -> str:
    year = (now or utcnow()).year
    return f"{year}-{year + 1}"


def college_details() -> Dict[str, str]:
    return {
        "name": settings.COLLEGE_NAME,
        "address": settings.COLLEGE_ADDRESS,
        "phone": settings.COLLEGE_PHONE,
        "email": settings.COLLEGE_EMAIL,
        "website": settings.COLLEGE_WEBSITE,
        "affiliatedTo": settings.COLLEGE_AFFILIATION,
    }


class InvoiceService:
    """Service for generating and serving invoices"""

    def __init__(self, invoices_dir: Optional[Path] = None):
        self._invoices_dir = invoices_dir

    @property
    def invoices_dir(self) -> Path:
        return self._invoices_dir or settings.INVOICES_DIR

    # ==================== CREATE ====================

    async def generate(
        self,
        db: AsyncSession,
        account: Account,
        payment: Dict[str, Any],
        temp_registration_id: str,
    ) -> Invoice:
        """
        Create the invoice for a freshly promoted account and render its document.

        `payment` holds paymentId, transactionId, paymentMethod and
        paymentDate (ISO string). Fee amounts never come from the caller.
        """
        now = utcnow()
        invoice_number = await generate_unique(
            db, Invoice.invoice_number, lambda: invoice_number_candidate(now), "invoice number"
        )

        invoice = Invoice(
            invoice_number=invoice_number,
            invoice_date=now,
            academic_year=academic_year(now),
            student_details={
                "name": account.full_name,
                "email": account.email,
                "registerNumber": account.register_number,
                "course": account.course,
                "year": account.year,
                "gender": account.gender,
                "category": account.category,
                "hostelType": account.hostel_type,
            },
            student_email=account.email,
            fee_details=fee_schedule(),
            payment_details={
                "paymentId": payment.get("paymentId"),
                "transactionId": payment.get("transactionId"),
                "paymentMethod": payment.get("paymentMethod"),
                "paymentDate": payment.get("paymentDate"),
                "paymentStatus": "Completed",
            },
            college_details=college_details(),
            temp_registration_id=str(temp_registration_id),
            student_id=str(account.id),
            student_pool=account.pool.value,
            status=InvoiceStatus.GENERATED,
        )
        db.add(invoice)
        await db.flush()

        invoice.document_path = await self._write_document(invoice)
        invoice.document_generated = True

        await db.commit()
        await db.refresh(invoice)

        logger.info(f"Generated invoice {invoice.invoice_number} for {account.email}")
        return invoice

    async def _write_document(self, invoice: Invoice) -> str:
        directory = self.invoices_dir
        await aiofiles.os.makedirs(directory, exist_ok=True)
        path = directory / f"{invoice.invoice_number}.html"
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(render_invoice_html(invoice))
        return str(path)

    # ==================== READ ====================

    async def get(self, db: AsyncSession, invoice_id: str) -> Invoice:
        invoice = await db.get(Invoice, str(invoice_id))
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def get_by_number(self, db: AsyncSession, invoice_number: str) -> Invoice:
        result = await db.execute(select(Invoice).where(Invoice.invoice_number == invoice_number))
        invoice = result.scalar_one_or_none()
        if invoice is None:
            raise InvoiceNotFoundError(invoice_number)
        return invoice

    async def list_for_student(self, db: AsyncSession, email: str) -> List[Invoice]:
        """Newest first"""
        result = await db.execute(
            select(Invoice)
            .where(Invoice.student_email == normalize_email(email))
            .order_by(Invoice.created_at.desc())
        )
        return list(result.scalars().all())

    async def latest_for_student(self, db: AsyncSession, email: str) -> Optional[Invoice]:
        invoices = await self.list_for_student(db, email)
        return invoices[0] if invoices else None

    async def list_page(self, db: AsyncSession, page: int = 1, limit: int = 20) -> Tuple[List[Invoice], Dict[str, Any]]:
        total = (await db.execute(select(func.count(Invoice.id)))).scalar_one()
        result = await db.execute(
            select(Invoice)
            .order_by(Invoice.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        pagination = {
            "current_page": page,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "total_invoices": total,
            "has_next": page * limit < total,
            "has_prev": page > 1,
        }
        return list(result.scalars().all()), pagination

    # ==================== ACCESS ====================

    def in_guest_window(self, invoice: Invoice, now: Optional[datetime] = None) -> bool:
        """Fresh invoices are readable without a session (post-payment redirect)"""
        window = timedelta(minutes=settings.INVOICE_GUEST_WINDOW_MINUTES)
        return (now or utcnow()) - invoice.created_at <= window

    def authorize(self, invoice: Invoice, identity: Optional[Identity], now: Optional[datetime] = None) -> None:
        """
        Guests only inside the guest window; staff always; anyone else only
        for invoices issued to their own email.
        """
        if identity is None:
            if not self.in_guest_window(invoice, now):
                raise AuthenticationError("Authentication required to access this invoice")
            return
        if not identity.is_staff and normalize_email(identity.email) != invoice.student_email:
            raise AuthorizationError("Access denied. Can only view own invoices.")

    # ==================== DOCUMENT ====================

    async def read_document(self, invoice: Invoice) -> str:
        """Rendered HTML; InvoiceNotFoundError when the file is gone"""
        if not invoice.document_path or not await aiofiles.os.path.exists(invoice.document_path):
            raise InvoiceNotFoundError(str(invoice.id), message="Invoice file not found on server")
        async with aiofiles.open(invoice.document_path, "r", encoding="utf-8") as f:
            return await f.read()

    async def download(self, db: AsyncSession, invoice: Invoice) -> Tuple[str, str]:
        """Read the document and record the download. Returns (filename, html)."""
        content = await self.read_document(invoice)
        invoice.track_download()
        await db.commit()
        return f"{invoice.invoice_number}.html", content


invoice_service = InvoiceService()
