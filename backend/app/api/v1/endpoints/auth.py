from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import success_response
from app.core.logging_config import logger, set_user_id
from app.core.rate_limiter import auth_rate_limit, strict_rate_limit
from app.models.account import Account
from app.modules.auth.dependencies import get_current_account, require_self_or_staff
from app.modules.auth.identity import Identity
from app.modules.auth.roles import permissions_of, role_tables
from app.schemas.auth import (
    AccountRegister,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    account_to_dict,
)
from app.services.auth_service import auth_service


router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/register", status_code=status.HTTP_201_CREATED)
@strict_rate_limit()
async def register(
    request: Request,
    data: AccountRegister,
    db: AsyncSession = Depends(get_db)
):
    """Create a staff-pool account directly (rate limited: 3/min)"""
    account, token = await auth_service.register_account(db, data, client_ip=_client_ip(request))
    return success_response(
        {"user": account_to_dict(account), "token": token},
        "User registered successfully",
    )


@router.post("/login")
@auth_rate_limit()
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login across staff, boys and girls pools (rate limited: 5/min)"""
    result = await auth_service.login(
        db,
        credentials.email,
        credentials.password,
        role_hint=credentials.role,
        client_ip=_client_ip(request),
    )
    set_user_id(str(result.account.id))

    data = {
        "user": account_to_dict(result.account),
        "token": result.token,
        "userType": result.user_type,
        "hostelType": result.hostel_type,
    }
    if result.account.is_staff:
        data["permissions"] = sorted(result.permissions)

    message = "Login successful"
    if result.hostel_type:
        message = f"Login successful - Welcome to {result.hostel_type}"
    return success_response(data, message)


@router.get("/profile")
async def get_profile(account: Account = Depends(get_current_account)):
    return success_response({"user": account_to_dict(account)})


@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db)
):
    """Update own profile. Credentials, role and status fields are ignored."""
    account = await auth_service.update_profile(db, account, data)
    return success_response({"user": account_to_dict(account)}, "Profile updated successfully")


@router.put("/profile/{user_id}")
async def update_profile_by_id(
    user_id: str,
    data: ProfileUpdate,
    identity: Identity = Depends(require_self_or_staff),
    db: AsyncSession = Depends(get_db)
):
    """Update a staff-pool account's profile (self or staff)"""
    account = await auth_service.update_staff_pool_profile(db, user_id, data)
    logger.info(f"Profile {user_id} updated by {identity.id}")
    return success_response({"user": account_to_dict(account)}, "Profile updated successfully")


@router.put("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db)
):
    await auth_service.change_password(db, account, data.current_password, data.new_password)
    return success_response(message="Password changed successfully")


@router.post("/logout")
async def logout(account: Account = Depends(get_current_account)):
    """Sessions are stateless bearer tokens; the client discards its copy"""
    logger.log_auth_event("logout", success=True, user_email=account.email)
    return success_response(message="Logged out successfully")


@router.get("/roles")
async def get_roles():
    return success_response(role_tables())


@router.get("/verify")
async def verify(account: Account = Depends(get_current_account)):
    """Validate the bearer token and return the caller's permissions"""
    return success_response({
        "user": {
            "id": str(account.id),
            "email": account.email,
            "role": account.role.value,
            "isStaff": account.is_staff,
            "isStudent": account.is_student,
        },
        "permissions": sorted(permissions_of(account.role)),
    })
