"""
Authorization guards
====================

Each guard is a plain function of (identity, context) returning a Decision.
Guards are chained with `evaluate`; the first deny wins and carries the
exception the API layer turns into a 401/403/404 envelope.

    decision = evaluate(identity, GuardContext(target_id=user_id),
                        staff_only, self_or_staff)
    if not decision.allowed:
        raise decision.error

Authentication itself (session claims -> Identity) lives in the FastAPI
dependencies, so every guard here may assume a resolved identity, except
that `evaluate` still denies with Unauthenticated when identity is None.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    HostelError,
    HostelNotFoundError,
)
from app.modules.auth.identity import Identity
from app.modules.auth.roles import (
    Role,
    WARDEN_TIER_ROLES,
    can_manage_gender,
    coerce_role,
    has_permission,
)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    error: Optional[HostelError] = None


ALLOW = Decision(True)


def deny(error: HostelError) -> Decision:
    return Decision(False, error)


@dataclass
class GuardContext:
    """Request data a guard may look at"""
    target_id: Optional[str] = None
    target_gender: Optional[str] = None
    hostel_id: Optional[str] = None
    hostel: Any = None  # resolved Hostel row, None when absent


Guard = Callable[[Identity, GuardContext], Decision]


def evaluate(identity: Optional[Identity], context: GuardContext, *guards: Guard) -> Decision:
    """Run guards in order, short-circuiting on the first deny"""
    if identity is None:
        return deny(AuthenticationError("Access denied. No token provided."))
    for guard in guards:
        decision = guard(identity, context)
        if not decision.allowed:
            return decision
    return ALLOW


def enforce(identity: Optional[Identity], context: GuardContext, *guards: Guard) -> Identity:
    """evaluate() that raises the deny reason"""
    decision = evaluate(identity, context, *guards)
    if not decision.allowed:
        raise decision.error
    return identity


# ==================== Role / permission guards ====================

def role_in(roles: Iterable[Any]) -> Guard:
    allowed = frozenset(r for r in (coerce_role(role) for role in roles) if r is not None)

    def _guard(identity: Identity, context: GuardContext) -> Decision:
        if identity.role in allowed:
            return ALLOW
        return deny(AuthorizationError())

    _guard.__name__ = "role_in"
    return _guard


def requires_permission(permission: Any) -> Guard:
    name = getattr(permission, "value", permission)

    def _guard(identity: Identity, context: GuardContext) -> Decision:
        if has_permission(identity.role, name):
            return ALLOW
        return deny(AuthorizationError(f"Access denied. Permission '{name}' required."))

    _guard.__name__ = "requires_permission"
    return _guard


def staff_only(identity: Identity, context: GuardContext) -> Decision:
    if identity.is_staff:
        return ALLOW
    return deny(AuthorizationError("Access denied. Staff privileges required."))


def student_only(identity: Identity, context: GuardContext) -> Decision:
    if identity.is_student:
        return ALLOW
    return deny(AuthorizationError("Access denied. Student access required."))


def representative_only(identity: Identity, context: GuardContext) -> Decision:
    if identity.is_representative:
        return ALLOW
    return deny(AuthorizationError("Access denied. Representative access required."))


# ==================== Scope guards ====================

def gender_scope(identity: Identity, context: GuardContext) -> Decision:
    """No target gender means nothing to check"""
    target = context.target_gender
    if not target or can_manage_gender(identity.gender_scope, target.lower()):
        return ALLOW
    return deny(AuthorizationError(f"Access denied. Cannot manage {target} hostels."))


def self_or_staff(identity: Identity, context: GuardContext) -> Decision:
    if identity.is_staff or (context.target_id and identity.id == str(context.target_id)):
        return ALLOW
    return deny(AuthorizationError("Access denied. Can only access own data."))


def staff_or_hostel_member(identity: Identity, context: GuardContext) -> Decision:
    """Staff pass; anyone else must live in the target hostel"""
    if identity.is_staff:
        return ALLOW
    if context.hostel_id and identity.assigned_hostel_id == str(context.hostel_id):
        return ALLOW
    return deny(AuthorizationError("Access denied"))


def owner_or_senior_staff(identity: Identity, context: GuardContext) -> Decision:
    if identity.role in WARDEN_TIER_ROLES:
        return ALLOW
    if context.target_id and identity.id == str(context.target_id):
        return ALLOW
    return deny(AuthorizationError())


def hostel_scope(identity: Identity, context: GuardContext) -> Decision:
    """
    Warden passes for any existing hostel. Everyone else needs a matching
    gender scope; a hostel incharge additionally needs to be assigned to it.
    """
    hostel = context.hostel
    if hostel is None:
        return deny(HostelNotFoundError(context.hostel_id or ""))

    if identity.role == Role.WARDEN:
        return ALLOW

    hostel_gender = getattr(hostel.gender, "value", hostel.gender)
    if not can_manage_gender(identity.gender_scope, hostel_gender):
        return deny(AuthorizationError("Access denied. Cannot access this hostel."))

    if identity.role == Role.HOSTEL_INCHARGE and identity.assigned_hostel_id != str(hostel.id):
        return deny(AuthorizationError("Access denied. Not assigned to this hostel."))

    return ALLOW
