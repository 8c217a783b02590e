"""
Staff administration endpoints (warden tier manages, senior staff list)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import success_response
from app.modules.auth.dependencies import require_owner_or_senior_staff, require_roles
from app.modules.auth.identity import Identity
from app.modules.auth.roles import GenderScope, Role, SENIOR_STAFF_ROLES, WARDEN_TIER_ROLES
from app.schemas.auth import AccountRegister, StaffRoleUpdate, StaffUpdate, account_to_dict
from app.schemas.hostel import AssignHostelRequest
from app.services.staff_service import staff_service


router = APIRouter()

require_warden_tier = require_roles(*WARDEN_TIER_ROLES)


@router.get("")
async def list_staff(
    role: Optional[Role] = Query(None),
    gender: Optional[GenderScope] = Query(None),
    hostel: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Identity = Depends(require_roles(*SENIOR_STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    staff, pagination = await staff_service.list(
        db, role=role, gender=gender, hostel_id=hostel, page=page, limit=limit
    )
    return success_response({
        "staff": [account_to_dict(s) for s in staff],
        "pagination": pagination,
    })


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_staff(
    data: AccountRegister,
    identity: Identity = Depends(require_warden_tier),
    db: AsyncSession = Depends(get_db)
):
    staff = await staff_service.create(db, data)
    return success_response({"staff": account_to_dict(staff)}, "Staff member created successfully")


@router.get("/role/{role}")
async def staff_by_role(
    role: str,
    identity: Identity = Depends(require_roles(*SENIOR_STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """Active staff holding one role, newest first"""
    staff = await staff_service.list_by_role(db, role)
    return success_response({"staff": [account_to_dict(s) for s in staff]})


@router.get("/{staff_id}")
async def get_staff(
    staff_id: str,
    identity: Identity = Depends(require_owner_or_senior_staff),
    db: AsyncSession = Depends(get_db)
):
    staff = await staff_service.get(db, staff_id)
    return success_response({"staff": account_to_dict(staff)})


@router.put("/{staff_id}")
async def update_staff(
    staff_id: str,
    data: StaffUpdate,
    identity: Identity = Depends(require_warden_tier),
    db: AsyncSession = Depends(get_db)
):
    staff = await staff_service.update(db, staff_id, data)
    return success_response({"staff": account_to_dict(staff)}, "Staff member updated successfully")


@router.put("/{staff_id}/role")
async def update_staff_role(
    staff_id: str,
    data: StaffRoleUpdate,
    identity: Identity = Depends(require_warden_tier),
    db: AsyncSession = Depends(get_db)
):
    staff = await staff_service.change_role(db, staff_id, data)
    return success_response({"staff": account_to_dict(staff)}, "Staff role updated successfully")


@router.put("/{staff_id}/assign-hostel")
async def assign_hostel(
    staff_id: str,
    data: AssignHostelRequest,
    identity: Identity = Depends(require_warden_tier),
    db: AsyncSession = Depends(get_db)
):
    staff = await staff_service.assign_hostel(db, staff_id, data.hostel_id)
    return success_response({"staff": account_to_dict(staff)}, "Hostel assigned successfully")


@router.put("/{staff_id}/deactivate")
async def deactivate_staff(
    staff_id: str,
    identity: Identity = Depends(require_warden_tier),
    db: AsyncSession = Depends(get_db)
):
    staff = await staff_service.set_active(db, staff_id, False)
    return success_response({"staff": account_to_dict(staff)}, "Staff member deactivated successfully")


@router.put("/{staff_id}/activate")
async def activate_staff(
    staff_id: str,
    identity: Identity = Depends(require_warden_tier),
    db: AsyncSession = Depends(get_db)
):
    staff = await staff_service.set_active(db, staff_id, True)
    return success_response({"staff": account_to_dict(staff)}, "Staff member activated successfully")
