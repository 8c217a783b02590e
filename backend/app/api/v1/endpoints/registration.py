"""
Registration endpoints: submit, complete payment, status and staff listing.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import success_response
from app.core.rate_limiter import submission_rate_limit
from app.models.account import HOSTEL_TYPE_BY_POOL, pool_for_gender
from app.modules.auth.dependencies import require_staff
from app.modules.auth.identity import Identity
from app.schemas.auth import account_to_dict
from app.schemas.invoice import invoice_summary
from app.schemas.registration import (
    PaymentCompletion,
    RegistrationSubmit,
    TempRegistrationResponse,
)
from app.services.registration_service import registration_service


router = APIRouter()


def temp_to_dict(temp) -> dict:
    return TempRegistrationResponse.model_validate(temp).dump()


@router.post("/submit", status_code=status.HTTP_201_CREATED)
@submission_rate_limit()
async def submit_registration(
    request: Request,
    data: RegistrationSubmit,
    db: AsyncSession = Depends(get_db)
):
    """Save a temporary registration; payment must follow within 24 hours"""
    temp = await registration_service.submit(db, data)
    record = temp_to_dict(temp)
    return success_response(
        {
            "tempRegistration": record,
            "registrationId": record["id"],
            "paymentRequired": True,
            "expiresAt": record["expiresAt"],
        },
        "Registration saved temporarily. Please complete payment to confirm your hostel admission.",
    )


@router.post("/complete-payment", status_code=status.HTTP_201_CREATED)
async def complete_payment(
    data: PaymentCompletion,
    db: AsyncSession = Depends(get_db)
):
    """Promote a paid temporary registration to a student account"""
    result = await registration_service.complete_payment(db, data)
    return success_response(
        {
            "user": account_to_dict(result.account),
            "hostelType": result.hostel_type,
            "registerNumber": result.account.register_number,
            "canLogin": True,
            "invoice": invoice_summary(result.invoice) if result.invoice else None,
        },
        f"Registration completed successfully! Welcome to {result.hostel_type}.",
    )


@router.get("/status/{identifier}")
async def registration_status(
    identifier: str,
    db: AsyncSession = Depends(get_db)
):
    """Lookup by temp id/email, or by register number/id/email once promoted"""
    found = await registration_service.lookup(db, identifier)

    if found.is_temporary:
        record = temp_to_dict(found.temp)
        return success_response({
            "registration": record,
            "status": found.temp.status.value,
            "submittedAt": record["submittedAt"],
            "isTemporary": True,
            "paymentRequired": True,
            "expiresAt": record["expiresAt"],
        })

    account = found.account
    registration_data = account.registration_data or {}
    return success_response({
        "user": account_to_dict(account),
        "status": "completed",
        "hostelType": account.hostel_type,
        "submittedAt": registration_data.get("originalSubmissionDate"),
        "completedAt": registration_data.get("paymentCompletedAt"),
        "isVerified": account.is_verified,
        "isActive": account.is_active,
        "isTemporary": False,
        "canLogin": True,
    })


@router.get("/all")
async def list_registrations(
    identity: Identity = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """All live temporary registrations plus both student pools (staff only)"""
    found = await registration_service.list_all(db)

    temporary = [
        {
            **temp_to_dict(temp),
            "type": "temporary",
            "paymentStatus": "pending",
            "hostelType": HOSTEL_TYPE_BY_POOL[pool_for_gender(temp.gender)],
        }
        for temp in found["temporary"]
    ]

    def completed(accounts):
        return [
            {**account_to_dict(a), "type": "completed", "paymentStatus": "completed"}
            for a in accounts
        ]

    boys = completed(found["boys"])
    girls = completed(found["girls"])

    return success_response({
        "temporary": temporary,
        "boysHostel": boys,
        "girlsHostel": girls,
        "summary": {
            "totalTemporary": len(temporary),
            "totalBoysHostel": len(boys),
            "totalGirlsHostel": len(girls),
            "totalCompleted": len(boys) + len(girls),
        },
    })
