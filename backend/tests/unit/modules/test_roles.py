"""
Unit Tests for the role / permission registry
"""
import pytest

from app.modules.auth.roles import (
    GenderScope,
    Permission,
    REPRESENTATIVE_ROLES,
    ROLE_PERMISSIONS,
    Role,
    STAFF_ROLES,
    STUDENT_ROLES,
    can_manage_gender,
    coerce_role,
    default_gender_scope,
    has_permission,
    is_representative_role,
    is_staff_role,
    is_student_role,
    permissions_of,
    role_tables,
)


class TestRoleFamilies:

    def test_every_role_has_permissions(self):
        assert set(ROLE_PERMISSIONS) == set(Role)

    def test_families_partition_roles(self):
        assert STAFF_ROLES | STUDENT_ROLES == set(Role)
        assert not STAFF_ROLES & STUDENT_ROLES
        assert len(STAFF_ROLES) == 8
        assert len(STUDENT_ROLES) == 3

    def test_representatives_are_students(self):
        assert REPRESENTATIVE_ROLES <= STUDENT_ROLES
        assert Role.STUDENT not in REPRESENTATIVE_ROLES

    @pytest.mark.parametrize("role", list(Role))
    def test_staff_and_student_are_exclusive(self, role):
        assert is_staff_role(role) != is_student_role(role)

    def test_predicates_accept_strings(self):
        assert is_staff_role("warden")
        assert is_student_role("hostel_representative")
        assert is_representative_role("mess_representative")

    @pytest.mark.parametrize("unknown", ["janitor", "", None, "WARDEN"])
    def test_unknown_roles_are_in_no_family(self, unknown):
        assert coerce_role(unknown) is None
        assert not is_staff_role(unknown)
        assert not is_student_role(unknown)
        assert not is_representative_role(unknown)


class TestPermissions:

    def test_warden_permissions(self):
        assert permissions_of(Role.WARDEN) == {
            "manage_all_hostels",
            "manage_all_staff",
            "manage_all_students",
            "view_all_reports",
            "manage_mess_operations",
            "approve_major_requests",
            "manage_finances",
        }

    def test_mess_incharge_shares_mess_operations(self):
        assert has_permission(Role.MESS_INCHARGE, Permission.MANAGE_MESS_OPERATIONS)
        assert has_permission(Role.WARDEN, "manage_mess_operations")

    def test_representative_extends_student(self):
        base = permissions_of(Role.STUDENT)
        mess_rep = permissions_of(Role.MESS_REPRESENTATIVE)

        assert base < mess_rep
        assert mess_rep - base == {
            "represent_mess_issues",
            "coordinate_with_mess_incharge",
            "gather_student_feedback",
        }

    def test_deputy_warden_scoped_permissions(self):
        assert has_permission(Role.DEPUTY_WARDEN_BOYS, "manage_boys_hostels")
        assert not has_permission(Role.DEPUTY_WARDEN_BOYS, "manage_girls_hostels")
        assert not has_permission(Role.DEPUTY_WARDEN_BOYS, "manage_all_hostels")

    def test_unknown_role_has_no_permissions(self):
        assert permissions_of("janitor") == frozenset()
        assert not has_permission("janitor", "manage_all_hostels")

    def test_unknown_permission_is_false(self):
        assert not has_permission(Role.WARDEN, "launch_rockets")


class TestGenderScope:

    @pytest.mark.parametrize("role, scope", [
        (Role.DEPUTY_WARDEN_BOYS, GenderScope.BOYS),
        (Role.RESIDENTIAL_COUNSELLOR_BOYS, GenderScope.BOYS),
        (Role.DEPUTY_WARDEN_GIRLS, GenderScope.GIRLS),
        (Role.RESIDENTIAL_COUNSELLOR_GIRLS, GenderScope.GIRLS),
        (Role.WARDEN, GenderScope.BOTH),
        (Role.HOSTEL_INCHARGE, GenderScope.BOTH),
        (Role.STUDENT, GenderScope.BOTH),
    ])
    def test_default_gender_scope(self, role, scope):
        assert default_gender_scope(role) == scope

    def test_can_manage_gender(self):
        assert can_manage_gender(GenderScope.BOTH, "girls")
        assert can_manage_gender(GenderScope.BOYS, "boys")
        assert not can_manage_gender(GenderScope.BOYS, "girls")
        assert not can_manage_gender(None, "boys")
        assert can_manage_gender("girls", "girls")


class TestRoleTables:

    def test_role_tables_shape(self):
        tables = role_tables()

        assert tables["staffRoles"]["WARDEN"] == "warden"
        assert tables["studentRoles"]["MESS_REPRESENTATIVE"] == "mess_representative"
        assert len(tables["allRoles"]) == len(Role)
        assert tables["rolePermissions"]["student"] == sorted(permissions_of(Role.STUDENT))
