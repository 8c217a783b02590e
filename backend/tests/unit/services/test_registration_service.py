"""
Unit Tests for the registration pipeline
Tests for: submit, expiry, payment completion / promotion, lookup, sweep
"""
import re
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock
from sqlalchemy import select, func

from app.core.exceptions import (
    AlreadyRegisteredError,
    DuplicatePendingError,
    NotFoundError,
    RegistrationNotFoundError,
)
from app.core.security import verify_password
from app.core.types import utcnow
from app.models.account import Account, AccountPool
from app.models.invoice import Invoice
from app.models.temp_registration import RegistrationStatus, TempRegistration
from app.modules.auth.roles import Role
from app.schemas.registration import PaymentCompletion, RegistrationSubmit
from app.services.invoice_service import InvoiceService
from app.services.registration_service import RegistrationService, split_name


@pytest.fixture
def service(tmp_path) -> RegistrationService:
    return RegistrationService(invoices=InvoiceService(invoices_dir=tmp_path / "invoices"))


def payment(email: str, **extra) -> PaymentCompletion:
    return PaymentCompletion(email=email, payment_id="pay_123", transaction_id="txn_456",
                             payment_method="upi", **extra)


async def expire(db_session, temp: TempRegistration):
    temp.expires_at = utcnow() - timedelta(minutes=1)
    await db_session.commit()


async def count(db_session, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar_one()


class TestSplitName:

    def test_split_name(self):
        assert split_name("Asha Devi Kumar") == ("Asha", "Devi Kumar")
        assert split_name("Asha") == ("Asha", "Asha")


class TestSubmit:

    async def test_submit_creates_pending_record(self, db_session, service, registration_data):
        data = RegistrationSubmit.model_validate(registration_data())

        temp = await service.submit(db_session, data)

        assert temp.status == RegistrationStatus.PENDING_PAYMENT
        assert temp.hashed_password != data.password
        assert await verify_password(data.password, temp.hashed_password)
        assert timedelta(hours=23, minutes=59) < temp.expires_at - temp.created_at <= timedelta(hours=24)

    async def test_duplicate_pending_rejected(self, db_session, service, registration_data):
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))

        with pytest.raises(DuplicatePendingError):
            await service.submit(db_session, RegistrationSubmit.model_validate(body))

    async def test_duplicate_check_is_case_insensitive(self, db_session, service, registration_data):
        body = registration_data(email="asha@example.com")
        await service.submit(db_session, RegistrationSubmit.model_validate(body))

        body["email"] = "ASHA@Example.com"
        with pytest.raises(DuplicatePendingError):
            await service.submit(db_session, RegistrationSubmit.model_validate(body))

    async def test_expired_record_frees_email(self, db_session, service, registration_data):
        body = registration_data()
        first = await service.submit(db_session, RegistrationSubmit.model_validate(body))
        first_id = first.id
        await expire(db_session, first)

        second = await service.submit(db_session, RegistrationSubmit.model_validate(body))

        assert second.id != first_id
        assert await count(db_session, TempRegistration) == 1

    async def test_already_registered_rejected(self, db_session, service, registration_data, student):
        body = registration_data(email=student.email)

        with pytest.raises(AlreadyRegisteredError):
            await service.submit(db_session, RegistrationSubmit.model_validate(body))


class TestCompletePayment:

    async def test_promotes_male_to_boys_pool(self, db_session, service, registration_data):
        body = registration_data(gender="male", name="Arun Prakash Raj")
        await service.submit(db_session, RegistrationSubmit.model_validate(body))

        result = await service.complete_payment(db_session, payment(body["email"]))

        account = result.account
        assert result.created is True
        assert account.pool == AccountPool.BOYS_STUDENT
        assert account.role == Role.STUDENT
        assert account.first_name == "Arun"
        assert account.last_name == "Prakash Raj"
        assert re.fullmatch(r"BH\d{6}", account.register_number)
        assert account.is_verified and account.is_active
        assert account.hostel_type == "Boys Hostel"
        assert account.emergency_contact["relationship"] == "Guardian"
        assert account.phone == body["parentInfo"]["contact"]
        assert account.registration_data["status"] == "completed_with_payment"

    async def test_female_and_transgender_go_to_girls_pool(self, db_session, service, registration_data):
        for gender in ("female", "transgender"):
            body = registration_data(gender=gender)
            await service.submit(db_session, RegistrationSubmit.model_validate(body))

            result = await service.complete_payment(db_session, payment(body["email"]))

            assert result.account.pool == AccountPool.GIRLS_STUDENT
            assert result.account.register_number.startswith("GH")

    async def test_password_hash_carried_over(self, db_session, service, registration_data):
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))

        result = await service.complete_payment(db_session, payment(body["email"]))

        assert await verify_password(body["password"], result.account.hashed_password)

    async def test_temp_record_removed_and_invoice_created(self, db_session, service, registration_data):
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))

        result = await service.complete_payment(db_session, payment(body["email"]))

        assert await count(db_session, TempRegistration) == 0
        assert result.invoice is not None
        assert result.invoice.total_amount == 46800
        assert result.invoice.student_id == str(result.account.id)

    async def test_payment_defaults(self, db_session, service, registration_data):
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))

        result = await service.complete_payment(db_session, payment(body["email"]))

        assert result.account.payment_details["amount"] == 46800
        assert result.account.payment_details["status"] == "completed"
        assert result.account.payment_details["paymentDate"] is not None

    async def test_unknown_email(self, db_session, service):
        with pytest.raises(RegistrationNotFoundError):
            await service.complete_payment(db_session, payment("nobody@example.com"))

    async def test_expired_registration_not_found(self, db_session, service, registration_data):
        body = registration_data()
        temp = await service.submit(db_session, RegistrationSubmit.model_validate(body))
        await expire(db_session, temp)

        with pytest.raises(RegistrationNotFoundError):
            await service.complete_payment(db_session, payment(body["email"]))

    async def test_second_completion_is_not_found(self, db_session, service, registration_data):
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))
        await service.complete_payment(db_session, payment(body["email"]))

        with pytest.raises(RegistrationNotFoundError):
            await service.complete_payment(db_session, payment(body["email"]))

        assert await count(db_session, Account) == 1

    async def test_reentry_returns_existing_account(self, db_session, service, registration_data):
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))
        first = await service.complete_payment(db_session, payment(body["email"]))

        # A stale temp record for the same email (left by an interrupted attempt)
        stale = TempRegistration(
            email=body["email"],
            hashed_password="x",
            name=body["name"],
            date_of_birth=first.account.date_of_birth,
            course="x",
            year=1,
            gender="male",
            category="BC",
            mess_preference="VEG",
            parent_info={},
            guardian_info={},
            status=RegistrationStatus.PENDING_PAYMENT,
            submitted_at=utcnow(),
        )
        db_session.add(stale)
        await db_session.commit()

        again = await service.complete_payment(db_session, payment(body["email"]))

        assert again.created is False
        assert again.account.id == first.account.id
        assert await count(db_session, Account) == 1
        assert await count(db_session, TempRegistration) == 0

    async def test_invoice_failure_does_not_fail_promotion(self, db_session, registration_data):
        invoices = InvoiceService()
        invoices.generate = AsyncMock(side_effect=OSError("disk full"))
        service = RegistrationService(invoices=invoices)
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))

        result = await service.complete_payment(db_session, payment(body["email"]))

        assert result.invoice is None
        assert result.account.register_number is not None
        assert await count(db_session, Account) == 1
        assert await count(db_session, Invoice) == 0


class TestLookup:

    async def test_lookup_temp_by_email_and_id(self, db_session, service, registration_data):
        body = registration_data()
        temp = await service.submit(db_session, RegistrationSubmit.model_validate(body))

        by_email = await service.lookup(db_session, body["email"].upper())
        by_id = await service.lookup(db_session, str(temp.id))

        assert by_email.is_temporary and by_email.temp.id == temp.id
        assert by_id.temp.id == temp.id

    async def test_lookup_promoted_by_register_number(self, db_session, service, registration_data):
        body = registration_data()
        await service.submit(db_session, RegistrationSubmit.model_validate(body))
        result = await service.complete_payment(db_session, payment(body["email"]))

        found = await service.lookup(db_session, result.account.register_number)

        assert not found.is_temporary
        assert found.account.id == result.account.id

    async def test_lookup_unknown(self, db_session, service):
        with pytest.raises(NotFoundError) as exc_info:
            await service.lookup(db_session, "nobody@example.com")
        assert exc_info.value.message == "Registration not found"

    async def test_lookup_ignores_expired_temp(self, db_session, service, registration_data):
        body = registration_data()
        temp = await service.submit(db_session, RegistrationSubmit.model_validate(body))
        await expire(db_session, temp)

        with pytest.raises(NotFoundError):
            await service.lookup(db_session, body["email"])


class TestListAndSweep:

    async def test_list_all_skips_expired(self, db_session, service, registration_data, student):
        live = await service.submit(db_session, RegistrationSubmit.model_validate(registration_data()))
        stale = await service.submit(db_session, RegistrationSubmit.model_validate(registration_data()))
        await expire(db_session, stale)

        found = await service.list_all(db_session)

        assert [t.id for t in found["temporary"]] == [live.id]
        assert [a.id for a in found["boys"]] == [student.id]
        assert found["girls"] == []

    async def test_sweep_deletes_only_expired(self, db_session, service, registration_data):
        await service.submit(db_session, RegistrationSubmit.model_validate(registration_data()))
        stale = await service.submit(db_session, RegistrationSubmit.model_validate(registration_data()))
        await expire(db_session, stale)

        removed = await service.sweep_expired(db_session)

        assert removed == 1
        assert await count(db_session, TempRegistration) == 1
