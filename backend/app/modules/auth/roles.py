"""
Role / permission registry.

Single source of truth for which capabilities each role carries. Everything
here is pure data plus total lookup functions: an unknown role yields an
empty permission set (or False) rather than an exception.
"""
import enum
from typing import Any, Dict, FrozenSet, Optional


class Role(str, enum.Enum):
    """Every account has exactly one of these"""
    # Staff
    WARDEN = "warden"
    DEPUTY_WARDEN_BOYS = "deputy_warden_boys"
    DEPUTY_WARDEN_GIRLS = "deputy_warden_girls"
    EXECUTIVE_WARDEN = "executive_warden"
    RESIDENTIAL_COUNSELLOR_BOYS = "residential_counsellor_boys"
    RESIDENTIAL_COUNSELLOR_GIRLS = "residential_counsellor_girls"
    HOSTEL_INCHARGE = "hostel_incharge"
    MESS_INCHARGE = "mess_incharge"
    # Students
    STUDENT = "student"
    MESS_REPRESENTATIVE = "mess_representative"
    HOSTEL_REPRESENTATIVE = "hostel_representative"


class GenderScope(str, enum.Enum):
    """Which hostels/students a staff account may act upon"""
    BOYS = "boys"
    GIRLS = "girls"
    BOTH = "both"


class Permission(str, enum.Enum):
    # Warden
    MANAGE_ALL_HOSTELS = "manage_all_hostels"
    MANAGE_ALL_STAFF = "manage_all_staff"
    MANAGE_ALL_STUDENTS = "manage_all_students"
    VIEW_ALL_REPORTS = "view_all_reports"
    MANAGE_MESS_OPERATIONS = "manage_mess_operations"
    APPROVE_MAJOR_REQUESTS = "approve_major_requests"
    MANAGE_FINANCES = "manage_finances"
    # Deputy wardens
    MANAGE_BOYS_HOSTELS = "manage_boys_hostels"
    MANAGE_BOYS_STUDENTS = "manage_boys_students"
    VIEW_BOYS_REPORTS = "view_boys_reports"
    APPROVE_BOYS_REQUESTS = "approve_boys_requests"
    MANAGE_BOYS_DISCIPLINARY = "manage_boys_disciplinary"
    MANAGE_GIRLS_HOSTELS = "manage_girls_hostels"
    MANAGE_GIRLS_STUDENTS = "manage_girls_students"
    VIEW_GIRLS_REPORTS = "view_girls_reports"
    APPROVE_GIRLS_REQUESTS = "approve_girls_requests"
    MANAGE_GIRLS_DISCIPLINARY = "manage_girls_disciplinary"
    # Executive warden
    ASSIST_WARDEN = "assist_warden"
    MANAGE_HOSTEL_OPERATIONS = "manage_hostel_operations"
    VIEW_COMPREHENSIVE_REPORTS = "view_comprehensive_reports"
    COORDINATE_DEPARTMENTS = "coordinate_departments"
    HANDLE_EMERGENCIES = "handle_emergencies"
    # Residential counsellors
    COUNSEL_BOYS_STUDENTS = "counsel_boys_students"
    HANDLE_BOYS_STUDENT_ISSUES = "handle_boys_student_issues"
    CREATE_BOYS_STUDENT_REPORTS = "create_boys_student_reports"
    CONDUCT_BOYS_WELLNESS_PROGRAMS = "conduct_boys_wellness_programs"
    MANAGE_BOYS_STUDENT_ACTIVITIES = "manage_boys_student_activities"
    COUNSEL_GIRLS_STUDENTS = "counsel_girls_students"
    HANDLE_GIRLS_STUDENT_ISSUES = "handle_girls_student_issues"
    CREATE_GIRLS_STUDENT_REPORTS = "create_girls_student_reports"
    CONDUCT_GIRLS_WELLNESS_PROGRAMS = "conduct_girls_wellness_programs"
    MANAGE_GIRLS_STUDENT_ACTIVITIES = "manage_girls_student_activities"
    # Hostel incharge
    MANAGE_ASSIGNED_HOSTEL = "manage_assigned_hostel"
    VIEW_HOSTEL_REPORTS = "view_hostel_reports"
    MANAGE_HOSTEL_MAINTENANCE = "manage_hostel_maintenance"
    HANDLE_ROOM_ALLOCATION = "handle_room_allocation"
    MANAGE_HOSTEL_STAFF = "manage_hostel_staff"
    # Mess incharge
    VIEW_MESS_REPORTS = "view_mess_reports"
    MANAGE_MEAL_PLANS = "manage_meal_plans"
    HANDLE_FOOD_COMPLAINTS = "handle_food_complaints"
    MANAGE_MESS_STAFF = "manage_mess_staff"
    # Students
    VIEW_OWN_PROFILE = "view_own_profile"
    BOOK_ROOMS = "book_rooms"
    PAY_FEES = "pay_fees"
    SUBMIT_REQUESTS = "submit_requests"
    VIEW_ANNOUNCEMENTS = "view_announcements"
    # Representatives
    REPRESENT_MESS_ISSUES = "represent_mess_issues"
    COORDINATE_WITH_MESS_INCHARGE = "coordinate_with_mess_incharge"
    GATHER_STUDENT_FEEDBACK = "gather_student_feedback"
    REPRESENT_HOSTEL_ISSUES = "represent_hostel_issues"
    COORDINATE_WITH_HOSTEL_INCHARGE = "coordinate_with_hostel_incharge"
    ORGANIZE_HOSTEL_EVENTS = "organize_hostel_events"


STAFF_ROLES: FrozenSet[Role] = frozenset({
    Role.WARDEN,
    Role.DEPUTY_WARDEN_BOYS,
    Role.DEPUTY_WARDEN_GIRLS,
    Role.EXECUTIVE_WARDEN,
    Role.RESIDENTIAL_COUNSELLOR_BOYS,
    Role.RESIDENTIAL_COUNSELLOR_GIRLS,
    Role.HOSTEL_INCHARGE,
    Role.MESS_INCHARGE,
})

STUDENT_ROLES: FrozenSet[Role] = frozenset({
    Role.STUDENT,
    Role.MESS_REPRESENTATIVE,
    Role.HOSTEL_REPRESENTATIVE,
})

REPRESENTATIVE_ROLES: FrozenSet[Role] = frozenset({
    Role.MESS_REPRESENTATIVE,
    Role.HOSTEL_REPRESENTATIVE,
})

# Warden and deputies: may act on any account (owner-or-senior checks)
WARDEN_TIER_ROLES: FrozenSet[Role] = frozenset({
    Role.WARDEN,
    Role.DEPUTY_WARDEN_BOYS,
    Role.DEPUTY_WARDEN_GIRLS,
    Role.EXECUTIVE_WARDEN,
})

SENIOR_STAFF_ROLES: FrozenSet[Role] = WARDEN_TIER_ROLES | frozenset({
    Role.RESIDENTIAL_COUNSELLOR_BOYS,
    Role.RESIDENTIAL_COUNSELLOR_GIRLS,
})

_STUDENT_BASE = frozenset({
    Permission.VIEW_OWN_PROFILE,
    Permission.BOOK_ROOMS,
    Permission.PAY_FEES,
    Permission.SUBMIT_REQUESTS,
    Permission.VIEW_ANNOUNCEMENTS,
})

ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.WARDEN: frozenset({
        Permission.MANAGE_ALL_HOSTELS,
        Permission.MANAGE_ALL_STAFF,
        Permission.MANAGE_ALL_STUDENTS,
        Permission.VIEW_ALL_REPORTS,
        Permission.MANAGE_MESS_OPERATIONS,
        Permission.APPROVE_MAJOR_REQUESTS,
        Permission.MANAGE_FINANCES,
    }),
    Role.DEPUTY_WARDEN_BOYS: frozenset({
        Permission.MANAGE_BOYS_HOSTELS,
        Permission.MANAGE_BOYS_STUDENTS,
        Permission.VIEW_BOYS_REPORTS,
        Permission.APPROVE_BOYS_REQUESTS,
        Permission.MANAGE_BOYS_DISCIPLINARY,
    }),
    Role.DEPUTY_WARDEN_GIRLS: frozenset({
        Permission.MANAGE_GIRLS_HOSTELS,
        Permission.MANAGE_GIRLS_STUDENTS,
        Permission.VIEW_GIRLS_REPORTS,
        Permission.APPROVE_GIRLS_REQUESTS,
        Permission.MANAGE_GIRLS_DISCIPLINARY,
    }),
    Role.EXECUTIVE_WARDEN: frozenset({
        Permission.ASSIST_WARDEN,
        Permission.MANAGE_HOSTEL_OPERATIONS,
        Permission.VIEW_COMPREHENSIVE_REPORTS,
        Permission.COORDINATE_DEPARTMENTS,
        Permission.HANDLE_EMERGENCIES,
    }),
    Role.RESIDENTIAL_COUNSELLOR_BOYS: frozenset({
        Permission.COUNSEL_BOYS_STUDENTS,
        Permission.HANDLE_BOYS_STUDENT_ISSUES,
        Permission.CREATE_BOYS_STUDENT_REPORTS,
        Permission.CONDUCT_BOYS_WELLNESS_PROGRAMS,
        Permission.MANAGE_BOYS_STUDENT_ACTIVITIES,
    }),
    Role.RESIDENTIAL_COUNSELLOR_GIRLS: frozenset({
        Permission.COUNSEL_GIRLS_STUDENTS,
        Permission.HANDLE_GIRLS_STUDENT_ISSUES,
        Permission.CREATE_GIRLS_STUDENT_REPORTS,
        Permission.CONDUCT_GIRLS_WELLNESS_PROGRAMS,
        Permission.MANAGE_GIRLS_STUDENT_ACTIVITIES,
    }),
    Role.HOSTEL_INCHARGE: frozenset({
        Permission.MANAGE_ASSIGNED_HOSTEL,
        Permission.VIEW_HOSTEL_REPORTS,
        Permission.MANAGE_HOSTEL_MAINTENANCE,
        Permission.HANDLE_ROOM_ALLOCATION,
        Permission.MANAGE_HOSTEL_STAFF,
    }),
    Role.MESS_INCHARGE: frozenset({
        Permission.MANAGE_MESS_OPERATIONS,
        Permission.VIEW_MESS_REPORTS,
        Permission.MANAGE_MEAL_PLANS,
        Permission.HANDLE_FOOD_COMPLAINTS,
        Permission.MANAGE_MESS_STAFF,
    }),
    Role.STUDENT: _STUDENT_BASE,
    Role.MESS_REPRESENTATIVE: _STUDENT_BASE | frozenset({
        Permission.REPRESENT_MESS_ISSUES,
        Permission.COORDINATE_WITH_MESS_INCHARGE,
        Permission.GATHER_STUDENT_FEEDBACK,
    }),
    Role.HOSTEL_REPRESENTATIVE: _STUDENT_BASE | frozenset({
        Permission.REPRESENT_HOSTEL_ISSUES,
        Permission.COORDINATE_WITH_HOSTEL_INCHARGE,
        Permission.ORGANIZE_HOSTEL_EVENTS,
    }),
}

# A role added to the enum without a permission entry fails at import time
_unmapped = set(Role) - set(ROLE_PERMISSIONS)
if _unmapped:
    raise RuntimeError(f"Roles without permissions: {sorted(r.value for r in _unmapped)}")
if STAFF_ROLES | STUDENT_ROLES != set(Role) or STAFF_ROLES & STUDENT_ROLES:
    raise RuntimeError("Every role must belong to exactly one family (staff or student)")


def coerce_role(role: Any) -> Optional[Role]:
    """Return the Role for a Role or its string value, None when unknown"""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def permissions_of(role: Any) -> FrozenSet[str]:
    """Permission names carried by a role (empty for unknown roles)"""
    resolved = coerce_role(role)
    if resolved is None:
        return frozenset()
    return frozenset(p.value for p in ROLE_PERMISSIONS[resolved])


def has_permission(role: Any, permission: Any) -> bool:
    name = permission.value if isinstance(permission, Permission) else permission
    return name in permissions_of(role)


def is_staff_role(role: Any) -> bool:
    return coerce_role(role) in STAFF_ROLES


def is_student_role(role: Any) -> bool:
    return coerce_role(role) in STUDENT_ROLES


def is_representative_role(role: Any) -> bool:
    return coerce_role(role) in REPRESENTATIVE_ROLES


def default_gender_scope(role: Any) -> GenderScope:
    """Gender scope assigned at account creation when none is given"""
    resolved = coerce_role(role)
    if resolved in (Role.DEPUTY_WARDEN_BOYS, Role.RESIDENTIAL_COUNSELLOR_BOYS):
        return GenderScope.BOYS
    if resolved in (Role.DEPUTY_WARDEN_GIRLS, Role.RESIDENTIAL_COUNSELLOR_GIRLS):
        return GenderScope.GIRLS
    return GenderScope.BOTH


def can_manage_gender(scope: Any, gender: Optional[str]) -> bool:
    """True when a gender scope covers the target gender ('boys'/'girls')"""
    scope_value = scope.value if isinstance(scope, GenderScope) else scope
    if scope_value == GenderScope.BOTH.value:
        return True
    return scope_value is not None and scope_value == gender


def role_tables() -> Dict[str, Any]:
    """Role and permission tables in the shape served by GET /api/auth/roles"""
    def _key(role: Role) -> str:
        return role.name

    staff = {_key(r): r.value for r in Role if r in STAFF_ROLES}
    students = {_key(r): r.value for r in Role if r in STUDENT_ROLES}
    return {
        "staffRoles": staff,
        "studentRoles": students,
        "allRoles": {**staff, **students},
        "rolePermissions": {
            r.value: sorted(permissions_of(r)) for r in Role
        },
    }
