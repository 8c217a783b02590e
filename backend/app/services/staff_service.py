"""
Staff Service - staff account administration (warden tier)
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Any, Dict, List, Optional, Tuple
import math

from app.core.exceptions import HostelNotFoundError, NotFoundError, ValidationError
from app.core.logging_config import logger
from app.models.account import Account, AccountPool
from app.models.hostel import Hostel
from app.modules.auth.roles import Role, STAFF_ROLES, GenderScope, coerce_role, default_gender_scope
from app.schemas.auth import AccountRegister, StaffRoleUpdate, StaffUpdate
from app.services.auth_service import auth_service


def staff_not_found(staff_id: str) -> NotFoundError:
    return NotFoundError("Staff", staff_id, message="Staff member not found")


def staff_role(value, message: str = "Invalid staff role specified") -> Role:
    role = coerce_role(value)
    if role not in STAFF_ROLES:
        raise ValidationError(message, field="role")
    return role


class StaffService:
    """Lookup and lifecycle changes for staff accounts"""

    async def get(self, db: AsyncSession, staff_id: str) -> Account:
        result = await db.execute(
            select(Account).where(
                Account.id == str(staff_id),
                Account.pool == AccountPool.STAFF,
                Account.role.in_(STAFF_ROLES),
            )
        )
        staff = result.scalar_one_or_none()
        if staff is None:
            raise staff_not_found(staff_id)
        return staff

    async def list(
        self,
        db: AsyncSession,
        role: Optional[Role] = None,
        gender: Optional[GenderScope] = None,
        hostel_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Account], Dict[str, Any]]:
        """Active staff, newest first, with optional filters"""
        conditions = [
            Account.pool == AccountPool.STAFF,
            Account.role.in_(STAFF_ROLES),
            Account.is_active.is_(True),
        ]
        if role is not None:
            conditions.append(Account.role == role)
        if gender is not None:
            conditions.append(Account.assigned_gender == gender)
        if hostel_id:
            conditions.append(Account.assigned_hostel_id == hostel_id)

        total = (await db.execute(select(func.count(Account.id)).where(*conditions))).scalar_one()
        result = await db.execute(
            select(Account)
            .where(*conditions)
            .order_by(Account.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        pagination = {
            "currentPage": page,
            "totalPages": math.ceil(total / limit) if limit else 0,
            "totalItems": total,
            "itemsPerPage": limit,
        }
        return list(result.scalars().all()), pagination

    async def list_by_role(self, db: AsyncSession, role: str) -> List[Account]:
        resolved = staff_role(role, message="Invalid staff role")
        result = await db.execute(
            select(Account)
            .where(
                Account.pool == AccountPool.STAFF,
                Account.role == resolved,
                Account.is_active.is_(True),
            )
            .order_by(Account.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, data: AccountRegister) -> Account:
        """New staff-pool account; student roles are refused here"""
        staff_role(data.role)
        staff = await auth_service.create_account(db, data)
        logger.info(f"Created staff member {staff.email} ({staff.role.value})")
        return staff

    async def update(self, db: AsyncSession, staff_id: str, data: StaffUpdate) -> Account:
        staff = await self.get(db, staff_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(staff, field, value)
        await db.commit()
        await db.refresh(staff)
        return staff

    async def change_role(self, db: AsyncSession, staff_id: str, data: StaffRoleUpdate) -> Account:
        """
        Gendered roles force their gender scope; other roles take the one
        given in the request, or keep the current scope.
        """
        role = staff_role(data.role)
        staff = await self.get(db, staff_id)

        if staff.role == Role.HOSTEL_INCHARGE and role != Role.HOSTEL_INCHARGE:
            result = await db.execute(select(Hostel).where(Hostel.incharge_id == str(staff.id)))
            for hostel in result.scalars().all():
                hostel.incharge_id = None

        staff.role = role
        scope = default_gender_scope(role)
        if scope != GenderScope.BOTH:
            staff.assigned_gender = scope
        elif data.assigned_gender is not None:
            staff.assigned_gender = data.assigned_gender

        await db.commit()
        await db.refresh(staff)
        logger.info(f"Changed role of {staff.email} to {role.value}")
        return staff

    async def assign_hostel(self, db: AsyncSession, staff_id: str, hostel_id: str) -> Account:
        hostel = await db.get(Hostel, str(hostel_id))
        if hostel is None:
            raise HostelNotFoundError(hostel_id)

        staff = await self.get(db, staff_id)
        staff.assigned_hostel_id = str(hostel.id)
        if staff.role == Role.HOSTEL_INCHARGE:
            hostel.incharge_id = str(staff.id)

        await db.commit()
        await db.refresh(staff)
        logger.info(f"Assigned {staff.email} to hostel {hostel.code}")
        return staff

    async def set_active(self, db: AsyncSession, staff_id: str, active: bool) -> Account:
        staff = await self.get(db, staff_id)
        staff.is_active = active
        await db.commit()
        await db.refresh(staff)
        logger.log_auth_event(
            "activate" if active else "deactivate",
            success=True,
            user_email=staff.email,
        )
        return staff


staff_service = StaffService()
