"""
Unit Tests for the representative service
Tests for: nomination, one representative per type and hostel, removal, reports
"""
import pytest
from datetime import datetime, timedelta

from app.core.exceptions import (
    AuthorizationError,
    DuplicateError,
    HostelNotFoundError,
    NotFoundError,
)
from app.models.account import AccountPool
from app.models.hostel import HostelGender
from app.models.representative_report import ReportPriority, ReportStatus
from app.modules.auth.identity import Identity
from app.modules.auth.roles import Role
from app.schemas.representative import NominateRequest, ReportSubmit, RepresentativeUpdate
from app.services.representative_service import representative_service


@pytest.fixture
async def hostel(make_hostel):
    return await make_hostel(HostelGender.BOYS, code="BH-A")


@pytest.fixture
def resident(make_account, hostel):
    """Factory: active student living in the boys hostel"""
    async def _make(**fields):
        return await make_account(
            fields.pop("role", Role.STUDENT),
            pool=AccountPool.BOYS_STUDENT,
            gender="male",
            assigned_hostel_id=fields.pop("assigned_hostel_id", hostel.id),
            **fields
        )
    return _make


def nominate_body(student, rep_type="mess", **overrides) -> NominateRequest:
    data = {"studentId": student.id, "representativeType": rep_type}
    data.update(overrides)
    return NominateRequest.model_validate(data)


class TestNominate:

    async def test_mess_representative(self, db_session, warden, hostel, resident):
        student = await resident()

        rep = await representative_service.nominate(
            db_session, Identity.from_account(warden),
            nominate_body(student, hostelId=hostel.id, responsibilities=["Menu feedback"]),
        )

        assert rep.role == Role.MESS_REPRESENTATIVE
        assert rep.assigned_hostel_id == hostel.id
        assert hostel.mess_rep_id == rep.id
        assert hostel.hostel_rep_id is None
        info = rep.representative_info
        assert info["responsibilities"] == ["Menu feedback"]
        assert info["achievements"] == []
        term = datetime.fromisoformat(info["termEnd"]) - datetime.fromisoformat(info["electedDate"])
        assert term == timedelta(days=365)

    async def test_hostel_defaults_to_assignment(self, db_session, warden, hostel, resident):
        student = await resident()

        rep = await representative_service.nominate(
            db_session, Identity.from_account(warden), nominate_body(student, "hostel")
        )

        assert rep.role == Role.HOSTEL_REPRESENTATIVE
        assert hostel.hostel_rep_id == rep.id

    async def test_one_per_type_and_hostel(self, db_session, warden, hostel, resident):
        caller = Identity.from_account(warden)
        first, second, third = await resident(), await resident(), await resident()
        await representative_service.nominate(db_session, caller, nominate_body(first))

        with pytest.raises(DuplicateError) as exc_info:
            await representative_service.nominate(db_session, caller, nominate_body(second))
        assert exc_info.value.message == "A mess representative already exists for this hostel"

        other_type = await representative_service.nominate(db_session, caller, nominate_body(third, "hostel"))
        assert other_type.role == Role.HOSTEL_REPRESENTATIVE

    @pytest.mark.parametrize("case", ["already_rep", "inactive", "staff"])
    async def test_only_active_plain_students(self, db_session, make_account, warden, resident, case):
        if case == "staff":
            candidate = await make_account(Role.MESS_INCHARGE)
        elif case == "inactive":
            candidate = await resident(is_active=False)
        else:
            candidate = await resident(role=Role.HOSTEL_REPRESENTATIVE)

        with pytest.raises(NotFoundError) as exc_info:
            await representative_service.nominate(
                db_session, Identity.from_account(warden), nominate_body(candidate)
            )
        assert exc_info.value.message == "Student not found or not eligible"

    async def test_unknown_hostel(self, db_session, warden, resident):
        student = await resident()

        with pytest.raises(HostelNotFoundError):
            await representative_service.nominate(
                db_session, Identity.from_account(warden), nominate_body(student, hostelId="missing")
            )

    async def test_outside_gender_scope(self, db_session, make_account, resident):
        girls_deputy = await make_account(Role.DEPUTY_WARDEN_GIRLS)
        student = await resident()

        with pytest.raises(AuthorizationError):
            await representative_service.nominate(
                db_session, Identity.from_account(girls_deputy), nominate_body(student)
            )
        assert student.role == Role.STUDENT


class TestUpdateAndRemove:

    async def test_self_update_keeps_other_fields(self, db_session, warden, resident):
        student = await resident()
        rep = await representative_service.nominate(
            db_session, Identity.from_account(warden), nominate_body(student, responsibilities=["Menu"])
        )

        updated = await representative_service.update(
            db_session, Identity.from_account(rep), rep.id,
            RepresentativeUpdate(achievements=["Reduced food waste"]),
        )

        assert updated.representative_info["achievements"] == ["Reduced food waste"]
        assert updated.representative_info["responsibilities"] == ["Menu"]

    async def test_other_student_cannot_update(self, db_session, warden, resident):
        rep = await representative_service.nominate(
            db_session, Identity.from_account(warden), nominate_body(await resident())
        )
        other = await resident()

        with pytest.raises(AuthorizationError):
            await representative_service.update(
                db_session, Identity.from_account(other), rep.id, RepresentativeUpdate(achievements=["x"])
            )

    async def test_remove_reverts_role_and_hostel(self, db_session, warden, hostel, resident):
        rep = await representative_service.nominate(
            db_session, Identity.from_account(warden), nominate_body(await resident())
        )

        student = await representative_service.remove(db_session, rep.id)

        assert student.role == Role.STUDENT
        assert student.representative_info is None
        assert hostel.mess_rep_id is None

    async def test_remove_plain_student_not_found(self, db_session, resident):
        student = await resident()

        with pytest.raises(NotFoundError) as exc_info:
            await representative_service.remove(db_session, student.id)
        assert exc_info.value.message == "Representative not found"


class TestListing:

    async def test_student_sees_only_own_hostel(self, db_session, make_hostel, warden, resident):
        caller = Identity.from_account(warden)
        other_hostel = await make_hostel(HostelGender.BOYS, code="BH-B")
        own_rep = await representative_service.nominate(db_session, caller, nominate_body(await resident()))
        await representative_service.nominate(
            db_session, caller, nominate_body(await resident(assigned_hostel_id=other_hostel.id))
        )
        viewer = await resident()

        staff_view = await representative_service.list_for(db_session, caller)
        student_view = await representative_service.list_for(
            db_session, Identity.from_account(viewer), hostel_id=other_hostel.id
        )

        assert len(staff_view) == 2
        assert [r.id for r in student_view] == [own_rep.id]

    async def test_unassigned_student_sees_nothing(self, db_session, warden, resident):
        await representative_service.nominate(
            db_session, Identity.from_account(warden), nominate_body(await resident())
        )
        drifter = await resident(assigned_hostel_id=None)

        assert await representative_service.list_for(db_session, Identity.from_account(drifter)) == []


class TestReports:

    async def test_submit_and_list(self, db_session, warden, hostel, resident):
        rep = await representative_service.nominate(
            db_session, Identity.from_account(warden), nominate_body(await resident())
        )

        report = await representative_service.submit_report(
            db_session, Identity.from_account(rep),
            ReportSubmit(title="Water cooler broken", description="Second floor cooler leaks"),
        )

        assert report.priority == ReportPriority.MEDIUM
        assert report.status == ReportStatus.SUBMITTED
        assert report.target_audience == "staff"
        assert report.hostel_id == hostel.id
        assert report.submitter_role == "mess_representative"
        assert [r.id for r in await representative_service.list_reports(db_session, hostel.id)] == [report.id]
        assert await representative_service.list_reports(db_session, "elsewhere") == []
