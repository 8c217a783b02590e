"""
Representative Service - mess and hostel representatives

Handles:
- Nomination of an active student into a representative role
- Term details (responsibilities, achievements) and removal
- Keeping Hostel.mess_rep_id / hostel_rep_id in step with the role
- Reports filed by representatives
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import timedelta
from typing import List, Optional

from app.core.exceptions import DuplicateError, HostelNotFoundError, NotFoundError
from app.core.logging_config import logger
from app.core.types import utcnow
from app.models.account import Account
from app.models.hostel import Hostel
from app.models.representative_report import RepresentativeReport
from app.modules.auth.guards import GuardContext, enforce, hostel_scope, self_or_staff, staff_or_hostel_member
from app.modules.auth.identity import Identity
from app.modules.auth.roles import Role, REPRESENTATIVE_ROLES
from app.schemas.representative import (
    NominateRequest,
    ReportSubmit,
    RepresentativeType,
    RepresentativeUpdate,
)


DEFAULT_TERM = timedelta(days=365)

# Hostel column that points at the representative of each role
HOSTEL_REP_COLUMN = {
    Role.MESS_REPRESENTATIVE: "mess_rep_id",
    Role.HOSTEL_REPRESENTATIVE: "hostel_rep_id",
}


def representative_not_found(rep_id: str) -> NotFoundError:
    return NotFoundError("Representative", rep_id, message="Representative not found")


def _elected_date(account: Account) -> str:
    return (account.representative_info or {}).get("electedDate") or ""


class RepresentativeService:
    """Nominate, update and remove student representatives"""

    async def get(self, db: AsyncSession, rep_id: str) -> Account:
        result = await db.execute(
            select(Account).where(
                Account.id == str(rep_id),
                Account.role.in_(REPRESENTATIVE_ROLES),
            )
        )
        rep = result.scalar_one_or_none()
        if rep is None:
            raise representative_not_found(rep_id)
        return rep

    async def get_for(self, db: AsyncSession, identity: Identity, rep_id: str) -> Account:
        """Staff see any representative; students only those of their own hostel"""
        rep = await self.get(db, rep_id)
        enforce(identity, GuardContext(hostel_id=rep.assigned_hostel_id), staff_or_hostel_member)
        return rep

    async def list_for(
        self,
        db: AsyncSession,
        identity: Identity,
        rep_type: Optional[RepresentativeType] = None,
        hostel_id: Optional[str] = None,
    ) -> List[Account]:
        """
        Active representatives, most recently elected first. A student only
        ever sees their own hostel, and nothing when not assigned to one.
        """
        if not identity.is_staff:
            if not identity.assigned_hostel_id:
                return []
            hostel_id = identity.assigned_hostel_id

        roles = [rep_type.role] if rep_type else list(REPRESENTATIVE_ROLES)
        query = select(Account).where(Account.role.in_(roles), Account.is_active.is_(True))
        if hostel_id:
            query = query.where(Account.assigned_hostel_id == str(hostel_id))

        result = await db.execute(query)
        return sorted(result.scalars().all(), key=_elected_date, reverse=True)

    async def list_for_hostel(self, db: AsyncSession, identity: Identity, hostel_id: str):
        """(hostel, representatives) for one hostel, ordered by role"""
        hostel = await db.get(Hostel, str(hostel_id))
        if hostel is None:
            raise HostelNotFoundError(hostel_id)
        enforce(identity, GuardContext(hostel_id=str(hostel.id)), staff_or_hostel_member)

        result = await db.execute(
            select(Account).where(
                Account.assigned_hostel_id == str(hostel.id),
                Account.role.in_(REPRESENTATIVE_ROLES),
                Account.is_active.is_(True),
            )
        )
        reps = sorted(result.scalars().all(), key=lambda a: a.role.value)
        return hostel, reps

    async def nominate(self, db: AsyncSession, identity: Identity, data: NominateRequest) -> Account:
        """
        Promote an active plain student to a representative role.

        At most one active representative of each type per hostel. The
        hostel defaults to the student's current assignment.
        """
        result = await db.execute(
            select(Account).where(
                Account.id == data.student_id,
                Account.role == Role.STUDENT,
                Account.is_active.is_(True),
            )
        )
        student = result.scalar_one_or_none()
        if student is None:
            raise NotFoundError("Student", data.student_id, message="Student not found or not eligible")

        role = data.representative_type.role
        hostel_id = data.hostel_id or student.assigned_hostel_id
        hostel = None
        if hostel_id:
            hostel = await db.get(Hostel, str(hostel_id))
            enforce(identity, GuardContext(hostel_id=str(hostel_id), hostel=hostel), hostel_scope)

            existing = await db.execute(
                select(Account.id).where(
                    Account.role == role,
                    Account.assigned_hostel_id == str(hostel.id),
                    Account.is_active.is_(True),
                ).limit(1)
            )
            if existing.first() is not None:
                raise DuplicateError(
                    f"A {data.representative_type.value} representative already exists for this hostel",
                    field="representativeType",
                )

        elected = data.elected_date or utcnow()
        student.role = role
        student.assigned_hostel_id = str(hostel.id) if hostel else None
        student.representative_info = {
            "electedDate": elected.isoformat(),
            "termEnd": (data.term_end or elected + DEFAULT_TERM).isoformat(),
            "responsibilities": list(data.responsibilities),
            "achievements": [],
        }
        if hostel is not None:
            setattr(hostel, HOSTEL_REP_COLUMN[role], str(student.id))

        await db.commit()
        await db.refresh(student)
        logger.info(
            f"Nominated {student.email} as {role.value}"
            + (f" for hostel {hostel.code}" if hostel else "")
        )
        return student

    async def update(
        self,
        db: AsyncSession,
        identity: Identity,
        rep_id: str,
        data: RepresentativeUpdate,
    ) -> Account:
        """Staff or the representative themself may edit term details"""
        rep = await self.get(db, rep_id)
        enforce(identity, GuardContext(target_id=str(rep.id)), self_or_staff)

        # Reassign so the JSON column is flagged dirty
        info = dict(rep.representative_info or {})
        if data.responsibilities is not None:
            info["responsibilities"] = list(data.responsibilities)
        if data.achievements is not None:
            info["achievements"] = list(data.achievements)
        rep.representative_info = info

        await db.commit()
        await db.refresh(rep)
        return rep

    async def remove(self, db: AsyncSession, rep_id: str) -> Account:
        """Back to plain student; the hostel reference is cleared if it points here"""
        rep = await self.get(db, rep_id)
        old_role = rep.role

        if rep.assigned_hostel_id:
            hostel = await db.get(Hostel, str(rep.assigned_hostel_id))
            column = HOSTEL_REP_COLUMN[old_role]
            if hostel is not None and getattr(hostel, column) == str(rep.id):
                setattr(hostel, column, None)

        rep.role = Role.STUDENT
        rep.representative_info = None

        await db.commit()
        await db.refresh(rep)
        logger.info(f"Removed {old_role.value} role from {rep.email}")
        return rep

    # ==================== REPORTS ====================

    async def submit_report(self, db: AsyncSession, identity: Identity, data: ReportSubmit) -> RepresentativeReport:
        report = RepresentativeReport(
            submitted_by_id=identity.id,
            submitter_role=identity.role.value,
            hostel_id=identity.assigned_hostel_id,
            **data.model_dump(),
        )
        db.add(report)
        await db.commit()
        await db.refresh(report)
        logger.info(f"Representative report '{report.title}' filed by {identity.email}")
        return report

    async def list_reports(self, db: AsyncSession, hostel_id: Optional[str] = None) -> List[RepresentativeReport]:
        query = select(RepresentativeReport).order_by(RepresentativeReport.submitted_at.desc())
        if hostel_id:
            query = query.where(RepresentativeReport.hostel_id == str(hostel_id))
        result = await db.execute(query)
        return list(result.scalars().all())


representative_service = RepresentativeService()
