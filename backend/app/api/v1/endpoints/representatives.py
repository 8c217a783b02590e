"""
Student representative endpoints

Staff nominate and remove mess/hostel representatives; students may look
up the representatives of their own hostel; representatives file reports.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import success_response
from app.modules.auth.dependencies import get_identity, require_representative, require_staff
from app.modules.auth.identity import Identity
from app.schemas.auth import account_to_dict
from app.schemas.representative import (
    NominateRequest,
    ReportSubmit,
    RepresentativeType,
    RepresentativeUpdate,
    report_to_dict,
)
from app.services.representative_service import representative_service


router = APIRouter()


@router.get("")
async def list_representatives(
    rep_type: Optional[RepresentativeType] = Query(None, alias="type"),
    hostel: Optional[str] = Query(None),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
):
    reps = await representative_service.list_for(db, identity, rep_type=rep_type, hostel_id=hostel)
    return success_response({"representatives": [account_to_dict(r) for r in reps]})


@router.get("/reports")
async def list_reports(
    hostel: Optional[str] = Query(None),
    identity: Identity = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Representative reports, newest first (staff only)"""
    reports = await representative_service.list_reports(db, hostel_id=hostel)
    return success_response({"reports": [report_to_dict(r) for r in reports], "count": len(reports)})


@router.post("/report", status_code=status.HTTP_201_CREATED)
async def submit_report(
    data: ReportSubmit,
    identity: Identity = Depends(require_representative),
    db: AsyncSession = Depends(get_db)
):
    report = await representative_service.submit_report(db, identity, data)
    return success_response({"report": report_to_dict(report)}, "Report submitted successfully")


@router.post("/nominate", status_code=status.HTTP_201_CREATED)
async def nominate_representative(
    data: NominateRequest,
    identity: Identity = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    rep = await representative_service.nominate(db, identity, data)
    return success_response(
        {"representative": account_to_dict(rep)},
        f"{data.representative_type.value} representative nominated successfully",
    )


@router.get("/hostel/{hostel_id}")
async def hostel_representatives(
    hostel_id: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
):
    hostel, reps = await representative_service.list_for_hostel(db, identity, hostel_id)
    return success_response({
        "hostel": {
            "id": str(hostel.id),
            "name": hostel.name,
            "code": hostel.code,
            "gender": hostel.gender.value,
        },
        "representatives": [account_to_dict(r) for r in reps],
    })


@router.get("/{rep_id}")
async def get_representative(
    rep_id: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
):
    rep = await representative_service.get_for(db, identity, rep_id)
    return success_response({"representative": account_to_dict(rep)})


@router.put("/{rep_id}")
async def update_representative(
    rep_id: str,
    data: RepresentativeUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
):
    rep = await representative_service.update(db, identity, rep_id, data)
    return success_response(
        {"representative": account_to_dict(rep)},
        "Representative information updated successfully",
    )


@router.put("/{rep_id}/remove")
async def remove_representative(
    rep_id: str,
    identity: Identity = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    student = await representative_service.remove(db, rep_id)
    return success_response({"student": account_to_dict(student)}, "Representative role removed successfully")
