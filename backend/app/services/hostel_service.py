"""
Hostel Service - hostel records and occupancy
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from typing import List, Optional

from app.core.exceptions import DuplicateError, ValidationError
from app.core.logging_config import logger
from app.models.hostel import Hostel, HostelGender
from app.modules.auth.identity import Identity
from app.modules.auth.roles import GenderScope
from app.schemas.hostel import HostelCreate


class HostelService:
    """Service for hostel CRUD"""

    async def get(self, db: AsyncSession, hostel_id: str) -> Optional[Hostel]:
        return await db.get(Hostel, str(hostel_id))

    async def list_for(
        self,
        db: AsyncSession,
        identity: Identity,
        gender: Optional[str] = None
    ) -> List[Hostel]:
        """Hostels visible to the caller's gender scope, optionally narrowed to one gender"""
        query = select(Hostel).order_by(Hostel.code)
        if identity.gender_scope is None:
            return []
        if identity.gender_scope != GenderScope.BOTH:
            query = query.where(Hostel.gender == HostelGender(identity.gender_scope.value))
        if gender:
            query = query.where(Hostel.gender == HostelGender(gender.lower()))
        result = await db.execute(query)
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, data: HostelCreate) -> Hostel:
        existing = await db.execute(select(Hostel.id).where(Hostel.code == data.code))
        if existing.first() is not None:
            raise DuplicateError(f"Hostel with code '{data.code}' already exists", field="code")

        hostel = Hostel(**data.model_dump())
        db.add(hostel)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateError(f"Hostel with code '{data.code}' already exists", field="code")
        await db.refresh(hostel)

        logger.info(f"Created hostel {hostel.code} ({hostel.gender.value}, capacity {hostel.capacity})")
        return hostel

    async def update_occupancy(self, db: AsyncSession, hostel: Hostel, occupancy: int) -> Hostel:
        """Occupancy must stay within [0, capacity]"""
        if occupancy < 0 or occupancy > hostel.capacity:
            raise ValidationError(
                f"Occupancy must be between 0 and {hostel.capacity}",
                field="currentOccupancy"
            )
        hostel.current_occupancy = occupancy
        await db.commit()
        await db.refresh(hostel)
        return hostel


hostel_service = HostelService()
