"""
Authentication Service - login across the three pools, session claims,
direct account creation and self-service profile changes.

Handles:
- Credential checks (one generic failure for every login error)
- Session claims issue / verify
- Staff-pool account registration
- Profile update and password rotation
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple

from app.core.exceptions import (
    AccountNotFoundError,
    DuplicateError,
    HostelNotFoundError,
    InvalidCredentialsError,
    InvalidSessionError,
    RoleMismatchError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from app.core.types import utcnow
from app.models.account import Account, AccountPool
from app.models.hostel import Hostel
from app.modules.auth.identity import Identity
from app.modules.auth.roles import (
    coerce_role,
    default_gender_scope,
    is_staff_role,
    permissions_of,
)
from app.schemas.auth import AccountRegister, ProfileUpdate
from app.services.account_repository import AccountRepository
from app.services.identifiers import employee_id_candidate, generate_unique


ADMIN_HINT = "admin"
STUDENT_HINT = "student"


@dataclass
class LoginResult:
    account: Account
    token: str
    user_type: str
    hostel_type: Optional[str]
    permissions: FrozenSet[str]


def session_claims(account: Account) -> Dict[str, Any]:
    """
    Claims carried by the bearer token.

    Student sub-roles (representatives included) are flattened to "student"
    here; the account keeps its real role.
    """
    claims: Dict[str, Any] = {
        "sub": str(account.id),
        "userId": str(account.id),
        "userType": account.pool.value,
        "email": account.email,
        "isStaff": account.is_staff,
        "isStudent": account.is_student,
        "role": STUDENT_HINT if account.is_student else account.role.value,
    }
    if account.pool != AccountPool.STAFF:
        claims["gender"] = account.gender
        claims["hostelType"] = account.hostel_type
    return claims


class AuthService:
    """Service for authentication and account self-service"""

    def issue_token(self, account: Account) -> str:
        return create_access_token(session_claims(account))

    # ==================== LOGIN ====================

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        role_hint: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> LoginResult:
        """
        Authenticate against staff, boys and girls pools (in that order).

        Unknown email, inactive account and wrong password all raise the
        same InvalidCredentialsError; the real reason is only logged.
        """
        repo = AccountRepository(db)
        account = await repo.find_by_email_across_pools(email)

        failure = None
        if account is None:
            failure = "unknown email"
        elif not account.is_active:
            failure = "account deactivated"
        elif not await verify_password(password, account.hashed_password):
            failure = "wrong password"

        if failure:
            logger.log_auth_event("login", success=False, user_email=email,
                                  reason=failure, client_ip=client_ip)
            raise InvalidCredentialsError()

        if role_hint == ADMIN_HINT and not account.is_staff:
            logger.log_auth_event("login", success=False, user_email=email,
                                  reason="admin hint on non-staff account", client_ip=client_ip)
            if account.pool == AccountPool.STAFF:
                raise RoleMismatchError()
            raise RoleMismatchError("Invalid role for this account. Students cannot access admin panel.")

        if role_hint == STUDENT_HINT and account.is_staff:
            logger.log_auth_event("login", success=False, user_email=email,
                                  reason="student hint on staff account", client_ip=client_ip)
            raise RoleMismatchError()

        account.last_login = utcnow()
        await db.commit()

        logger.log_auth_event("login", success=True, user_email=email,
                              client_ip=client_ip, user_type=account.pool.value)

        return LoginResult(
            account=account,
            token=self.issue_token(account),
            user_type=account.pool.value,
            hostel_type=account.hostel_type,
            permissions=permissions_of(account.role),
        )

    # ==================== SESSION ====================

    async def verify(self, db: AsyncSession, claims: Dict[str, Any]) -> Account:
        """Resolve claims to a live, active account in the pool they name"""
        account_id = claims.get("sub") or claims.get("userId")
        try:
            pool = AccountPool(claims.get("userType"))
        except ValueError:
            raise InvalidSessionError("Invalid token payload")
        if not account_id:
            raise InvalidSessionError("Invalid token payload")

        account = await AccountRepository(db).get_in_pool(pool, account_id)
        if account is None:
            raise InvalidSessionError("Invalid token. User not found.")
        if not account.is_active:
            raise InvalidSessionError("Account is deactivated.")
        return account

    async def authenticate_token(self, db: AsyncSession, token: str) -> Tuple[Account, Identity]:
        """Bearer token -> (account, identity). Raises AuthenticationError subclasses."""
        claims = decode_token(token)
        account = await self.verify(db, claims)
        return account, Identity.from_account(account)

    # ==================== REGISTRATION (direct) ====================

    async def register_account(
        self,
        db: AsyncSession,
        data: AccountRegister,
        client_ip: Optional[str] = None,
    ) -> Tuple[Account, str]:
        """Create a staff-pool account (staff or student role) and log it in"""
        account = await self.create_account(db, data, client_ip=client_ip)
        return account, self.issue_token(account)

    async def create_account(
        self,
        db: AsyncSession,
        data: AccountRegister,
        client_ip: Optional[str] = None,
    ) -> Account:
        role = coerce_role(data.role)
        if role is None:
            raise ValidationError("Invalid role specified", field="role")

        repo = AccountRepository(db)
        if await repo.find_in_pool(AccountPool.STAFF, data.email):
            logger.log_auth_event("register", success=False, user_email=data.email,
                                  reason="email exists", client_ip=client_ip)
            raise DuplicateError("User with this email already exists", field="email")

        account = Account(
            pool=AccountPool.STAFF,
            role=role,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            hashed_password=await get_password_hash(data.password),
            phone=data.phone,
            date_of_birth=data.date_of_birth,
            is_active=True,
            is_verified=False,
        )

        if is_staff_role(role):
            if data.employee_id:
                if await repo.exists(Account.employee_id, data.employee_id):
                    raise DuplicateError("Employee with this ID already exists", field="employeeId")
                account.employee_id = data.employee_id
            else:
                account.employee_id = await generate_unique(
                    db, Account.employee_id, employee_id_candidate, "employee id"
                )
            if data.assigned_hostel:
                if await db.get(Hostel, data.assigned_hostel) is None:
                    raise HostelNotFoundError(data.assigned_hostel)
                account.assigned_hostel_id = data.assigned_hostel
            account.date_of_joining = data.date_of_joining
            account.qualification = data.qualification
            account.experience = data.experience
            account.assigned_gender = data.assigned_gender or default_gender_scope(role)
        else:
            if data.register_number and await repo.exists(Account.register_number, data.register_number):
                raise DuplicateError("Student with this register number already exists", field="registerNumber")
            account.register_number = data.register_number
            account.course = data.course
            account.year = data.year
            account.department = data.department

        repo.add(account)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateError("User with this email already exists", field="email")
        await db.refresh(account)

        logger.log_auth_event("register", success=True, user_email=data.email,
                              client_ip=client_ip, user_role=role.value)
        return account

    # ==================== PROFILE ====================

    async def update_profile(self, db: AsyncSession, account: Account, data: ProfileUpdate) -> Account:
        """Apply only the fields present in the request body"""
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(account, field, value)
        await db.commit()
        await db.refresh(account)
        return account

    async def update_staff_pool_profile(
        self,
        db: AsyncSession,
        account_id: str,
        data: ProfileUpdate,
    ) -> Account:
        """Profile update by id; only staff-pool accounts are addressable here"""
        account = await AccountRepository(db).get_in_pool(AccountPool.STAFF, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return await self.update_profile(db, account, data)

    async def change_password(
        self,
        db: AsyncSession,
        account: Account,
        current_password: str,
        new_password: str,
    ) -> None:
        if not await verify_password(current_password, account.hashed_password):
            logger.log_auth_event("change_password", success=False, user_email=account.email,
                                  reason="current password mismatch")
            raise ValidationError("Current password is incorrect", field="currentPassword")

        account.hashed_password = await get_password_hash(new_password)
        await db.commit()
        logger.log_auth_event("change_password", success=True, user_email=account.email)


auth_service = AuthService()
