from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from app.modules.auth.roles import GenderScope, Role, coerce_role, permissions_of


@dataclass(frozen=True)
class Identity:
    """
    Authenticated caller, resolved from session claims.

    Carries everything the guards need so no guard has to touch the
    database except HostelScope (hostel lookup).
    """
    id: str
    email: str
    pool: str
    role: Optional[Role]
    gender_scope: Optional[GenderScope]
    assigned_hostel_id: Optional[str] = None
    is_staff: bool = False
    is_student: bool = False
    is_representative: bool = False
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_account(cls, account) -> "Identity":
        role = coerce_role(account.role)
        return cls(
            id=str(account.id),
            email=account.email,
            pool=account.pool.value,
            role=role,
            gender_scope=account.gender_scope,
            assigned_hostel_id=str(account.assigned_hostel_id) if account.assigned_hostel_id else None,
            is_staff=account.is_staff,
            is_student=account.is_student,
            is_representative=account.is_representative,
            permissions=permissions_of(role),
        )
