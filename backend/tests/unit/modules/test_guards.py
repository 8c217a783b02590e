"""
Unit Tests for the authorization guard chain
"""
import pytest
from types import SimpleNamespace

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    HostelNotFoundError,
)
from app.modules.auth.guards import (
    GuardContext,
    enforce,
    evaluate,
    gender_scope,
    hostel_scope,
    owner_or_senior_staff,
    representative_only,
    requires_permission,
    role_in,
    self_or_staff,
    staff_only,
    staff_or_hostel_member,
    student_only,
)
from app.modules.auth.identity import Identity
from app.modules.auth.roles import (
    GenderScope,
    Permission,
    Role,
    default_gender_scope,
    is_representative_role,
    is_staff_role,
    is_student_role,
    permissions_of,
)


def identity(role: Role, scope: GenderScope = None, user_id: str = "u-1", hostel_id: str = None) -> Identity:
    return Identity(
        id=user_id,
        email=f"{user_id}@ucet.ac.in",
        pool="staff",
        role=role,
        gender_scope=scope or default_gender_scope(role),
        assigned_hostel_id=hostel_id,
        is_staff=is_staff_role(role),
        is_student=is_student_role(role),
        is_representative=is_representative_role(role),
        permissions=permissions_of(role),
    )


def hostel(gender: str = "boys", hostel_id: str = "h-1"):
    return SimpleNamespace(id=hostel_id, gender=gender)


EMPTY = GuardContext()


class TestEvaluate:

    def test_missing_identity_is_unauthenticated(self):
        decision = evaluate(None, EMPTY, staff_only)

        assert not decision.allowed
        assert isinstance(decision.error, AuthenticationError)
        assert decision.error.status_code == 401

    def test_no_guards_allows(self):
        assert evaluate(identity(Role.STUDENT), EMPTY).allowed

    def test_first_deny_wins(self):
        calls = []

        def recording(ident, ctx):
            calls.append("second")
            return evaluate(ident, ctx)

        decision = evaluate(identity(Role.STUDENT), EMPTY, staff_only, recording)

        assert not decision.allowed
        assert calls == []

    def test_enforce_raises_deny_reason(self):
        with pytest.raises(AuthorizationError):
            enforce(identity(Role.STUDENT), EMPTY, staff_only)

    def test_enforce_returns_identity(self):
        ident = identity(Role.WARDEN)

        assert enforce(ident, EMPTY, staff_only) is ident


class TestRoleGuards:

    def test_role_in(self):
        guard = role_in([Role.WARDEN, "executive_warden"])

        assert evaluate(identity(Role.WARDEN), EMPTY, guard).allowed
        assert evaluate(identity(Role.EXECUTIVE_WARDEN), EMPTY, guard).allowed
        assert not evaluate(identity(Role.MESS_INCHARGE), EMPTY, guard).allowed

    def test_role_in_ignores_unknown_names(self):
        guard = role_in(["janitor"])

        assert not evaluate(identity(Role.WARDEN), EMPTY, guard).allowed

    def test_requires_permission(self):
        guard = requires_permission(Permission.MANAGE_ALL_HOSTELS)

        assert evaluate(identity(Role.WARDEN), EMPTY, guard).allowed
        decision = evaluate(identity(Role.DEPUTY_WARDEN_BOYS), EMPTY, guard)
        assert not decision.allowed
        assert "manage_all_hostels" in decision.error.message

    def test_family_guards(self):
        assert evaluate(identity(Role.HOSTEL_INCHARGE), EMPTY, staff_only).allowed
        assert not evaluate(identity(Role.HOSTEL_REPRESENTATIVE), EMPTY, staff_only).allowed
        assert evaluate(identity(Role.HOSTEL_REPRESENTATIVE), EMPTY, student_only).allowed
        assert not evaluate(identity(Role.WARDEN), EMPTY, student_only).allowed
        assert evaluate(identity(Role.MESS_REPRESENTATIVE), EMPTY, representative_only).allowed
        assert not evaluate(identity(Role.STUDENT), EMPTY, representative_only).allowed


class TestTargetGuards:

    def test_self_or_staff(self):
        me = identity(Role.STUDENT, user_id="s-1")

        assert evaluate(me, GuardContext(target_id="s-1"), self_or_staff).allowed
        assert not evaluate(me, GuardContext(target_id="s-2"), self_or_staff).allowed
        assert evaluate(identity(Role.MESS_INCHARGE), GuardContext(target_id="s-2"), self_or_staff).allowed

    def test_owner_or_senior_staff(self):
        context = GuardContext(target_id="staff-9")

        assert evaluate(identity(Role.DEPUTY_WARDEN_GIRLS), context, owner_or_senior_staff).allowed
        assert evaluate(identity(Role.HOSTEL_INCHARGE, user_id="staff-9"), context, owner_or_senior_staff).allowed
        assert not evaluate(identity(Role.HOSTEL_INCHARGE, user_id="staff-1"), context, owner_or_senior_staff).allowed
        # Residential counsellors are senior staff but not warden tier
        assert not evaluate(identity(Role.RESIDENTIAL_COUNSELLOR_BOYS), context, owner_or_senior_staff).allowed

    def test_gender_scope(self):
        boys_deputy = identity(Role.DEPUTY_WARDEN_BOYS)

        assert evaluate(boys_deputy, GuardContext(target_gender="boys"), gender_scope).allowed
        assert evaluate(boys_deputy, GuardContext(target_gender="BOYS"), gender_scope).allowed
        assert evaluate(boys_deputy, EMPTY, gender_scope).allowed
        decision = evaluate(boys_deputy, GuardContext(target_gender="girls"), gender_scope)
        assert not decision.allowed
        assert decision.error.message == "Access denied. Cannot manage girls hostels."


class TestHostelScope:

    def test_missing_hostel_is_not_found(self):
        decision = evaluate(identity(Role.WARDEN), GuardContext(hostel_id="nope"), hostel_scope)

        assert isinstance(decision.error, HostelNotFoundError)

    def test_warden_passes_any_hostel(self):
        context = GuardContext(hostel=hostel("girls"))

        assert evaluate(identity(Role.WARDEN, GenderScope.BOYS), context, hostel_scope).allowed

    def test_gender_mismatch_denied(self):
        context = GuardContext(hostel=hostel("girls"))

        decision = evaluate(identity(Role.DEPUTY_WARDEN_BOYS), context, hostel_scope)

        assert isinstance(decision.error, AuthorizationError)

    def test_incharge_needs_assignment(self):
        context = GuardContext(hostel=hostel("boys", "h-1"))

        assigned = identity(Role.HOSTEL_INCHARGE, GenderScope.BOYS, hostel_id="h-1")
        other = identity(Role.HOSTEL_INCHARGE, GenderScope.BOYS, hostel_id="h-2")

        assert evaluate(assigned, context, hostel_scope).allowed
        decision = evaluate(other, context, hostel_scope)
        assert decision.error.message == "Access denied. Not assigned to this hostel."

    def test_executive_warden_with_both_scope(self):
        context = GuardContext(hostel=hostel("girls"))

        assert evaluate(identity(Role.EXECUTIVE_WARDEN), context, hostel_scope).allowed


class TestHostelMembership:

    def test_staff_pass_without_hostel(self):
        assert evaluate(identity(Role.MESS_INCHARGE), EMPTY, staff_or_hostel_member).allowed

    def test_resident_passes_own_hostel(self):
        resident = identity(Role.STUDENT, GenderScope.BOYS, hostel_id="h-1")

        assert evaluate(resident, GuardContext(hostel_id="h-1"), staff_or_hostel_member).allowed

    def test_other_hostel_or_unassigned_denied(self):
        resident = identity(Role.MESS_REPRESENTATIVE, GenderScope.BOYS, hostel_id="h-1")
        unassigned = identity(Role.STUDENT, GenderScope.BOYS)

        decision = evaluate(resident, GuardContext(hostel_id="h-2"), staff_or_hostel_member)
        assert decision.error.message == "Access denied"
        assert not evaluate(unassigned, GuardContext(hostel_id="h-1"), staff_or_hostel_member).allowed
        assert not evaluate(unassigned, EMPTY, staff_or_hostel_member).allowed
