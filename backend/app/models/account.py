from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Integer, JSON, ForeignKey,
    Enum as SQLEnum, UniqueConstraint, Index,
)
from typing import Optional
import enum

from app.core.database import Base
from app.core.types import GUID, LowercaseString, generate_uuid, utcnow
from app.modules.auth.roles import (
    Role, GenderScope, default_gender_scope, is_staff_role, is_student_role,
    is_representative_role,
)


def _values(enum_cls):
    return [member.value for member in enum_cls]


class AccountPool(str, enum.Enum):
    """Which credential pool an account lives in"""
    STAFF = "staff"
    BOYS_STUDENT = "boys_student"
    GIRLS_STUDENT = "girls_student"


# Login checks pools in this order; first email match wins
POOL_LOOKUP_ORDER = (AccountPool.STAFF, AccountPool.BOYS_STUDENT, AccountPool.GIRLS_STUDENT)
STUDENT_POOLS = (AccountPool.BOYS_STUDENT, AccountPool.GIRLS_STUDENT)

HOSTEL_TYPE_BY_POOL = {
    AccountPool.BOYS_STUDENT: "Boys Hostel",
    AccountPool.GIRLS_STUDENT: "Girls Hostel",
}

REGISTER_PREFIX_BY_POOL = {
    AccountPool.BOYS_STUDENT: "BH",
    AccountPool.GIRLS_STUDENT: "GH",
}


def pool_for_gender(gender: str) -> AccountPool:
    """male -> boys pool; female and transgender -> girls pool"""
    if (gender or "").lower() == "male":
        return AccountPool.BOYS_STUDENT
    return AccountPool.GIRLS_STUDENT


class Account(Base):
    """
    Staff or student account.

    One table for the three credential pools; `pool` decides where the
    account lives, `role` decides what it may do.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("pool", "email", name="uq_accounts_pool_email"),
        Index("ix_accounts_email", "email"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    pool = Column(SQLEnum(AccountPool, values_callable=_values, name="account_pool"), nullable=False)
    role = Column(SQLEnum(Role, values_callable=_values, name="account_role"), nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(LowercaseString, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    profile_picture = Column(String(500), nullable=True)

    # Student fields
    register_number = Column(String(20), unique=True, nullable=True)
    course = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)
    department = Column(String(100), nullable=True)
    gender = Column(String(20), nullable=True)  # male / female / transgender
    category = Column(String(10), nullable=True)
    mess_preference = Column(String(10), nullable=True)
    parent_contact = Column(JSON, nullable=True)
    emergency_contact = Column(JSON, nullable=True)
    payment_details = Column(JSON, nullable=True)
    registration_data = Column(JSON, nullable=True)
    # {electedDate, termEnd, responsibilities, achievements}; set while holding a representative role
    representative_info = Column(JSON, nullable=True)

    # Staff fields
    employee_id = Column(String(20), unique=True, nullable=True)
    date_of_joining = Column(Date, nullable=True)
    qualification = Column(String(200), nullable=True)
    experience = Column(Integer, nullable=True)
    assigned_hostel_id = Column(GUID, ForeignKey("hostels.id", ondelete="SET NULL"), nullable=True)
    assigned_gender = Column(SQLEnum(GenderScope, values_callable=_values, name="gender_scope"), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    last_login = Column(DateTime, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_staff(self) -> bool:
        return is_staff_role(self.role)

    @property
    def is_student(self) -> bool:
        return is_student_role(self.role)

    @property
    def is_representative(self) -> bool:
        return is_representative_role(self.role)

    @property
    def hostel_type(self):
        return HOSTEL_TYPE_BY_POOL.get(self.pool)

    @property
    def gender_scope(self) -> Optional[GenderScope]:
        """
        Staff: the stored scope (role default when unset).
        Students: the hostel side of their pool, or of their gender when
        they live in the staff pool. Never BOTH for a student role.
        """
        if self.pool == AccountPool.BOYS_STUDENT:
            return GenderScope.BOYS
        if self.pool == AccountPool.GIRLS_STUDENT:
            return GenderScope.GIRLS
        if self.is_student:
            if not self.gender:
                return None
            return GenderScope.BOYS if pool_for_gender(self.gender) == AccountPool.BOYS_STUDENT else GenderScope.GIRLS
        return self.assigned_gender or default_gender_scope(self.role)

    def __repr__(self):
        return f"<Account {self.pool.value}:{self.email}>"
