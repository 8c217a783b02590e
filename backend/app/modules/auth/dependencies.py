from fastapi import Depends, Path, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Callable, Optional

from app.core.database import get_db
from app.core.exceptions import AuthenticationError, InvalidSessionError
from app.core.logging_config import set_user_id
from app.models.account import Account
from app.models.hostel import Hostel, HostelGender
from app.modules.auth.guards import (
    GuardContext,
    enforce,
    gender_scope,
    hostel_scope,
    owner_or_senior_staff,
    representative_only,
    requires_permission,
    role_in,
    self_or_staff,
    staff_only,
    student_only,
)
from app.modules.auth.identity import Identity
from app.services.auth_service import auth_service

# Missing or malformed header is reported by get_current_account
security = HTTPBearer(auto_error=False)


async def _authenticate(request: Request, token: str, db: AsyncSession) -> Account:
    account, identity = await auth_service.authenticate_token(db, token)
    request.state.user_id = identity.id
    request.state.identity = identity
    set_user_id(identity.id)
    return account


async def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Account:
    """Get current authenticated account (any pool)"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access denied. No token provided.")
    return await _authenticate(request, credentials.credentials, db)


async def get_identity(
    account: Account = Depends(get_current_account)
) -> Identity:
    """Identity of the authenticated caller"""
    return Identity.from_account(account)


async def get_optional_identity(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> Optional[Identity]:
    """
    None only when no Authorization header was sent at all. Any header that
    is present must carry a valid bearer token, otherwise 401.
    """
    header = request.headers.get("Authorization")
    if header is None:
        return None

    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise InvalidSessionError("Invalid authentication token")

    account = await _authenticate(request, token, db)
    return Identity.from_account(account)


# ==================== Guard Dependencies ====================

def _guarded(*guards) -> Callable[..., Any]:
    async def dependency(identity: Identity = Depends(get_identity)) -> Identity:
        return enforce(identity, GuardContext(), *guards)
    return dependency


def require_roles(*roles) -> Callable[..., Any]:
    """
    Usage:
        @router.put("/{staff_id}/activate")
        async def activate(identity: Identity = Depends(require_roles(*WARDEN_TIER_ROLES))):
            ...
    """
    return _guarded(role_in(roles))


def require_permission(permission) -> Callable[..., Any]:
    return _guarded(requires_permission(permission))


require_staff = _guarded(staff_only)
require_student = _guarded(student_only)
require_representative = _guarded(representative_only)


async def require_gender_scope(
    gender: Optional[HostelGender] = Query(None, description="Hostel gender filter"),
    identity: Identity = Depends(require_staff)
) -> Identity:
    """Staff caller whose gender scope covers the requested gender"""
    target = gender.value if gender else None
    return enforce(identity, GuardContext(target_gender=target), gender_scope)


# ==================== Target Ownership Dependencies ====================

async def require_self_or_staff(
    user_id: str = Path(..., description="Account ID"),
    identity: Identity = Depends(get_identity)
) -> Identity:
    return enforce(identity, GuardContext(target_id=user_id), self_or_staff)


async def require_owner_or_senior_staff(
    staff_id: str = Path(..., description="Staff account ID"),
    identity: Identity = Depends(get_identity)
) -> Identity:
    return enforce(identity, GuardContext(target_id=staff_id), owner_or_senior_staff)


async def get_scoped_hostel(
    hostel_id: str = Path(..., description="Hostel ID"),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db)
) -> Hostel:
    """
    Hostel the caller may act on. Raises 404 for an unknown hostel and 403
    when the caller's gender scope or assignment does not cover it.

    Usage:
        @router.get("/{hostel_id}")
        async def get_hostel(hostel: Hostel = Depends(get_scoped_hostel)):
            return hostel
    """
    hostel = await db.get(Hostel, hostel_id)
    enforce(identity, GuardContext(hostel_id=hostel_id, hostel=hostel), staff_only, hostel_scope)
    return hostel
