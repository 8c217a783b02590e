"""
Invoice endpoints

Fresh invoices can be fetched without a session for a short window after
payment; everything else needs a bearer token.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import AuthorizationError, success_response
from app.core.types import normalize_email
from app.modules.auth.dependencies import get_identity, get_optional_identity, require_staff
from app.modules.auth.identity import Identity
from app.schemas.invoice import Pagination, invoice_to_dict
from app.services.invoice_service import invoice_service


router = APIRouter()


@router.get("/")
async def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """All invoices, newest first (staff only)"""
    invoices, pagination = await invoice_service.list_page(db, page, limit)
    return success_response({
        "invoices": [invoice_to_dict(i) for i in invoices],
        "pagination": Pagination(**pagination).dump(),
    })


@router.get("/student/{email}")
async def student_invoices(
    email: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
):
    """Invoices issued to one student email (self or staff)"""
    if not identity.is_staff and normalize_email(identity.email) != normalize_email(email):
        raise AuthorizationError("Access denied. Can only view own invoices.")

    invoices = await invoice_service.list_for_student(db, email)
    return success_response({
        "invoices": [invoice_to_dict(i) for i in invoices],
        "count": len(invoices),
    })


@router.get("/number/{invoice_number}")
async def invoice_by_number(
    invoice_number: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
):
    invoice = await invoice_service.get_by_number(db, invoice_number)
    invoice_service.authorize(invoice, identity)
    return success_response({"invoice": invoice_to_dict(invoice)})


@router.get("/{invoice_id}")
async def get_invoice(
    invoice_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db)
):
    """Invoice record (guest window or session)"""
    invoice = await invoice_service.get(db, invoice_id)
    invoice_service.authorize(invoice, identity)
    return success_response({"invoice": invoice_to_dict(invoice)})


@router.get("/{invoice_id}/download")
async def download_invoice(
    invoice_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db)
):
    """Rendered invoice as an HTML attachment; counts the download"""
    invoice = await invoice_service.get(db, invoice_id)
    invoice_service.authorize(invoice, identity)

    filename, content = await invoice_service.download(db, invoice)
    return Response(
        content=content,
        media_type="text/html",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{invoice_id}/view", response_class=HTMLResponse)
async def view_invoice(
    invoice_id: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
):
    """Rendered invoice inline (session required)"""
    invoice = await invoice_service.get(db, invoice_id)
    invoice_service.authorize(invoice, identity)
    return HTMLResponse(content=await invoice_service.read_document(invoice))
