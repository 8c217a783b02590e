from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import success_response
from app.models.hostel import Hostel, HostelGender
from app.modules.auth.dependencies import (
    get_scoped_hostel,
    require_gender_scope,
    require_permission,
)
from app.modules.auth.identity import Identity
from app.modules.auth.roles import Permission
from app.schemas.hostel import HostelCreate, OccupancyUpdate, hostel_to_dict
from app.services.hostel_service import hostel_service


router = APIRouter()


@router.get("")
async def list_hostels(
    gender: Optional[HostelGender] = Query(None),
    identity: Identity = Depends(require_gender_scope),
    db: AsyncSession = Depends(get_db)
):
    """Hostels within the caller's gender scope (staff only)"""
    hostels = await hostel_service.list_for(db, identity, gender.value if gender else None)
    return success_response({
        "hostels": [hostel_to_dict(h) for h in hostels],
        "count": len(hostels),
    })


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_hostel(
    data: HostelCreate,
    identity: Identity = Depends(require_permission(Permission.MANAGE_ALL_HOSTELS)),
    db: AsyncSession = Depends(get_db)
):
    hostel = await hostel_service.create(db, data)
    return success_response({"hostel": hostel_to_dict(hostel)}, "Hostel created successfully")


@router.get("/{hostel_id}")
async def get_hostel(hostel: Hostel = Depends(get_scoped_hostel)):
    return success_response({"hostel": hostel_to_dict(hostel)})


@router.put("/{hostel_id}/occupancy")
async def update_occupancy(
    data: OccupancyUpdate,
    hostel: Hostel = Depends(get_scoped_hostel),
    db: AsyncSession = Depends(get_db)
):
    """Set current occupancy; must stay within [0, capacity]"""
    hostel = await hostel_service.update_occupancy(db, hostel, data.current_occupancy)
    return success_response({"hostel": hostel_to_dict(hostel)}, "Occupancy updated successfully")
