"""
Unit Tests for the authentication service
Tests for: multi-pool login, session claims, verify, direct registration, profile
"""
import re
import pytest

from app.core.exceptions import (
    AccountNotFoundError,
    DuplicateError,
    HostelNotFoundError,
    InvalidCredentialsError,
    InvalidSessionError,
    RoleMismatchError,
    ValidationError,
)
from app.core.security import decode_token, verify_password
from app.models.account import AccountPool
from app.modules.auth.identity import Identity
from app.modules.auth.roles import GenderScope, Role
from app.schemas.auth import AccountRegister, ProfileUpdate
from app.services.auth_service import auth_service, session_claims

PASSWORD = "Password123!"


def register_body(**overrides) -> AccountRegister:
    data = {
        "firstName": "Meena",
        "lastName": "Sundaram",
        "email": "meena@ucet.ac.in",
        "password": "secret123",
        "phone": "9876543210",
        "role": "deputy_warden_girls",
    }
    data.update(overrides)
    return AccountRegister.model_validate(data)


class TestLogin:

    async def test_login_staff(self, db_session, warden):
        result = await auth_service.login(db_session, warden.email, PASSWORD)

        assert result.account.id == warden.id
        assert result.user_type == "staff"
        assert result.hostel_type is None
        assert "manage_all_hostels" in result.permissions
        assert result.account.last_login is not None

    async def test_login_student_pool(self, db_session, student):
        result = await auth_service.login(db_session, student.email.upper(), PASSWORD)

        assert result.user_type == "boys_student"
        assert result.hostel_type == "Boys Hostel"

    async def test_staff_pool_wins_when_email_in_two_pools(self, db_session, make_account):
        staff = await make_account(Role.MESS_INCHARGE, email="dual@ucet.ac.in")
        await make_account(Role.STUDENT, pool=AccountPool.GIRLS_STUDENT, email="dual@ucet.ac.in",
                           password="other-password")

        result = await auth_service.login(db_session, "dual@ucet.ac.in", PASSWORD)

        assert result.account.id == staff.id

    @pytest.mark.parametrize("case", ["unknown", "wrong_password", "inactive"])
    async def test_failures_are_indistinguishable(self, db_session, make_account, case):
        account = await make_account(Role.WARDEN, is_active=(case != "inactive"))
        email = "ghost@ucet.ac.in" if case == "unknown" else account.email
        password = "nope" if case == "wrong_password" else PASSWORD

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await auth_service.login(db_session, email, password)
        assert exc_info.value.message == "Invalid credentials"

    async def test_admin_hint_on_student_account(self, db_session, student):
        with pytest.raises(RoleMismatchError):
            await auth_service.login(db_session, student.email, PASSWORD, role_hint="admin")

    async def test_student_hint_on_staff_account(self, db_session, warden):
        with pytest.raises(RoleMismatchError):
            await auth_service.login(db_session, warden.email, PASSWORD, role_hint="student")

    async def test_matching_hints_pass(self, db_session, warden, student):
        assert (await auth_service.login(db_session, warden.email, PASSWORD, role_hint="admin")).account
        assert (await auth_service.login(db_session, student.email, PASSWORD, role_hint="student")).account


class TestSessionClaims:

    async def test_student_claims_flatten_role(self, make_account):
        rep = await make_account(Role.HOSTEL_REPRESENTATIVE, pool=AccountPool.GIRLS_STUDENT, gender="female")

        claims = session_claims(rep)

        assert claims["role"] == "student"
        assert claims["userType"] == "girls_student"
        assert claims["hostelType"] == "Girls Hostel"
        assert claims["isStudent"] is True

    async def test_staff_claims(self, warden):
        claims = session_claims(warden)

        assert claims["role"] == "warden"
        assert claims["isStaff"] is True
        assert "hostelType" not in claims

    async def test_token_roundtrip(self, db_session, student):
        token = auth_service.issue_token(student)

        account, identity = await auth_service.authenticate_token(db_session, token)

        assert account.id == student.id
        assert identity.gender_scope == GenderScope.BOYS
        assert identity.role == Role.STUDENT
        assert identity.is_student and not identity.is_staff

    async def test_representative_identity_keeps_real_role(self, db_session, make_account):
        rep = await make_account(Role.MESS_REPRESENTATIVE, pool=AccountPool.BOYS_STUDENT, gender="male")

        _, identity = await auth_service.authenticate_token(db_session, auth_service.issue_token(rep))

        assert identity.role == Role.MESS_REPRESENTATIVE
        assert identity.is_representative


class TestVerify:

    async def test_verify_deactivated_account(self, db_session, warden):
        claims = session_claims(warden)
        warden.is_active = False
        await db_session.commit()

        with pytest.raises(InvalidSessionError):
            await auth_service.verify(db_session, claims)

    async def test_verify_wrong_pool(self, db_session, warden):
        claims = {**session_claims(warden), "userType": "girls_student"}

        with pytest.raises(InvalidSessionError):
            await auth_service.verify(db_session, claims)

    async def test_verify_unknown_pool(self, db_session, warden):
        claims = {**session_claims(warden), "userType": "alumni"}

        with pytest.raises(InvalidSessionError):
            await auth_service.verify(db_session, claims)


class TestRegisterAccount:

    async def test_staff_registration_defaults(self, db_session):
        account, token = await auth_service.register_account(db_session, register_body())

        assert account.pool == AccountPool.STAFF
        assert account.role == Role.DEPUTY_WARDEN_GIRLS
        assert account.assigned_gender == GenderScope.GIRLS
        assert re.fullmatch(r"EMP\d{5}", account.employee_id)
        assert await verify_password("secret123", account.hashed_password)
        assert decode_token(token)["sub"] == str(account.id)

    async def test_explicit_gender_scope_kept(self, db_session):
        account, _ = await auth_service.register_account(
            db_session, register_body(role="hostel_incharge", assignedGender="boys")
        )

        assert account.gender_scope == GenderScope.BOYS

    async def test_student_role_in_staff_pool(self, db_session):
        account, _ = await auth_service.register_account(
            db_session,
            register_body(role="student", dateOfBirth="2005-01-01", registerNumber="BH250099"),
        )

        assert account.pool == AccountPool.STAFF
        assert account.is_student
        assert account.employee_id is None
        assert account.register_number == "BH250099"

    async def test_student_role_never_scoped_to_both(self, db_session):
        account, _ = await auth_service.register_account(
            db_session,
            register_body(role="mess_representative", dateOfBirth="2005-01-01"),
        )

        assert account.assigned_gender is None
        assert account.gender_scope is None
        assert Identity.from_account(account).gender_scope is None

        account.gender = "male"
        assert account.gender_scope == GenderScope.BOYS
        account.gender = "transgender"
        assert account.gender_scope == GenderScope.GIRLS

    async def test_invalid_role(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.register_account(db_session, register_body(role="janitor"))
        assert exc_info.value.message == "Invalid role specified"

    async def test_duplicate_email(self, db_session):
        await auth_service.register_account(db_session, register_body())

        with pytest.raises(DuplicateError):
            await auth_service.register_account(db_session, register_body(employeeId="EMP99999"))

    async def test_duplicate_employee_id(self, db_session):
        await auth_service.register_account(db_session, register_body(employeeId="EMP12345"))

        with pytest.raises(DuplicateError) as exc_info:
            await auth_service.register_account(
                db_session, register_body(email="other@ucet.ac.in", employeeId="EMP12345")
            )
        assert exc_info.value.details["field"] == "employeeId"

    async def test_unknown_assigned_hostel(self, db_session):
        with pytest.raises(HostelNotFoundError):
            await auth_service.register_account(db_session, register_body(assignedHostel="no-such-hostel"))


class TestProfile:

    async def test_update_profile(self, db_session, student):
        updated = await auth_service.update_profile(
            db_session, student, ProfileUpdate(first_name="Karthik", phone="9000000000")
        )

        assert updated.first_name == "Karthik"
        assert updated.phone == "9000000000"

    async def test_update_staff_pool_profile_rejects_students(self, db_session, student):
        with pytest.raises(AccountNotFoundError):
            await auth_service.update_staff_pool_profile(db_session, str(student.id), ProfileUpdate(first_name="X"))

    async def test_change_password(self, db_session, student):
        await auth_service.change_password(db_session, student, PASSWORD, "brand-new-pass")

        assert await verify_password("brand-new-pass", student.hashed_password)

    async def test_change_password_wrong_current(self, db_session, student):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.change_password(db_session, student, "wrong", "brand-new-pass")
        assert exc_info.value.message == "Current password is incorrect"
