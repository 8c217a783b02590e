# Authentication and authorization module
# (FastAPI dependencies: app.modules.auth.dependencies)

from app.modules.auth.roles import (
    Role,
    Permission,
    GenderScope,
    STAFF_ROLES,
    STUDENT_ROLES,
    REPRESENTATIVE_ROLES,
    WARDEN_TIER_ROLES,
    SENIOR_STAFF_ROLES,
    permissions_of,
    has_permission,
    is_staff_role,
    is_student_role,
    is_representative_role,
    default_gender_scope,
)
from app.modules.auth.identity import Identity

__all__ = [
    "Role",
    "Permission",
    "GenderScope",
    "STAFF_ROLES",
    "STUDENT_ROLES",
    "REPRESENTATIVE_ROLES",
    "WARDEN_TIER_ROLES",
    "SENIOR_STAFF_ROLES",
    "permissions_of",
    "has_permission",
    "is_staff_role",
    "is_student_role",
    "is_representative_role",
    "default_gender_scope",
    "Identity",
]
