"""
Registration Service - pay-to-confirm student onboarding

    NONE -> pending_payment -> completed -> promoted into a student pool
                 |
                 +-- expired (24h, treated as not found, swept later)

Promotion (mark completed, insert account, delete temp record) is a single
transaction. The invoice is written afterwards in its own transaction and a
failure there never fails the promotion.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, delete, or_
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from app.core.exceptions import (
    AlreadyRegisteredError,
    DuplicatePendingError,
    IntegrationFailure,
    NotFoundError,
    RegistrationNotFoundError,
)
from app.core.logging_config import logger
from app.core.security import get_password_hash
from app.core.types import normalize_email, to_naive_utc, utcnow
from app.models.account import Account, AccountPool, pool_for_gender
from app.models.invoice import FEE_TOTAL, Invoice
from app.models.temp_registration import (
    RegistrationStatus,
    TempRegistration,
    registration_expiry,
)
from app.modules.auth.roles import Role
from app.schemas.registration import PaymentCompletion, RegistrationSubmit
from app.services.account_repository import AccountRepository
from app.services.identifiers import generate_unique, register_number_candidate
from app.services.invoice_service import InvoiceService, invoice_service as default_invoice_service


@dataclass
class PromotionResult:
    account: Account
    invoice: Optional[Invoice]
    # False when an earlier attempt had already promoted this email
    created: bool = True

    @property
    def hostel_type(self) -> Optional[str]:
        return self.account.hostel_type


@dataclass
class RegistrationLookup:
    """Status query result: exactly one of temp / account is set"""
    temp: Optional[TempRegistration] = None
    account: Optional[Account] = None

    @property
    def is_temporary(self) -> bool:
        return self.temp is not None


def split_name(full_name: str) -> Tuple[str, str]:
    """'Asha Devi Kumar' -> ('Asha', 'Devi Kumar'); single token fills both"""
    parts = full_name.split()
    first = parts[0] if parts else full_name.strip()
    last = " ".join(parts[1:]) or first
    return first, last


class RegistrationService:
    """Temp registration lifecycle and promotion"""

    def __init__(self, invoices: Optional[InvoiceService] = None):
        self.invoices = invoices or default_invoice_service

    # ==================== QUERIES ====================

    async def _find_temp(self, db: AsyncSession, *conditions) -> Optional[TempRegistration]:
        result = await db.execute(select(TempRegistration).where(*conditions).limit(1))
        return result.scalar_one_or_none()

    async def get_live(self, db: AsyncSession, email: str) -> Optional[TempRegistration]:
        """Temp registration for an email, None when absent or expired"""
        temp = await self._find_temp(db, TempRegistration.email == normalize_email(email))
        if temp is None or temp.is_expired():
            return None
        return temp

    async def lookup(self, db: AsyncSession, identifier: str) -> RegistrationLookup:
        """
        Temp record (by id or email) first, then the boys and girls pools
        (by register number, id or email).
        """
        temp = await self._find_temp(
            db,
            or_(
                TempRegistration.id == identifier,
                TempRegistration.email == normalize_email(identifier),
            )
        )
        if temp is not None and not temp.is_expired():
            return RegistrationLookup(temp=temp)

        account = await AccountRepository(db).find_student_by_identifier(identifier)
        if account is not None:
            return RegistrationLookup(account=account)

        raise NotFoundError("Registration", identifier, message="Registration not found")

    async def list_all(self, db: AsyncSession) -> Dict[str, List[Any]]:
        """Live temp records plus both student pools, newest first"""
        result = await db.execute(
            select(TempRegistration)
            .where(TempRegistration.expires_at >= utcnow())
            .order_by(TempRegistration.created_at.desc())
        )
        repo = AccountRepository(db)
        return {
            "temporary": list(result.scalars().all()),
            "boys": await repo.list_pool(AccountPool.BOYS_STUDENT),
            "girls": await repo.list_pool(AccountPool.GIRLS_STUDENT),
        }

    # ==================== SUBMIT ====================

    async def submit(self, db: AsyncSession, data: RegistrationSubmit) -> TempRegistration:
        """NONE -> pending_payment"""
        email = normalize_email(data.email)

        existing = await self._find_temp(db, TempRegistration.email == email)
        if existing is not None:
            if not existing.is_expired():
                raise DuplicatePendingError(email)
            # Expired records are "not found"; free the email
            await db.delete(existing)
            await db.flush()
            logger.log_registration_event("expired_purged", email)

        if await AccountRepository(db).email_taken_in_student_pools(email):
            raise AlreadyRegisteredError(email)

        now = utcnow()
        temp = TempRegistration(
            email=email,
            hashed_password=await get_password_hash(data.password),
            name=data.name,
            date_of_birth=data.date_of_birth,
            course=data.course,
            year=data.year,
            gender=data.gender.value,
            category=data.category,
            mess_preference=data.mess_preference,
            parent_info=data.parent_info.model_dump(),
            guardian_info=data.guardian_info.model_dump(),
            profile_image_path=data.profile_image_path,
            status=RegistrationStatus.PENDING_PAYMENT,
            submitted_at=to_naive_utc(data.submitted_at) or now,
            expires_at=registration_expiry(now),
            created_at=now,
        )
        db.add(temp)
        try:
            await db.commit()
        except IntegrityError:
            # Concurrent submit for the same email won the race
            await db.rollback()
            raise DuplicatePendingError(email)
        await db.refresh(temp)

        logger.log_registration_event("submitted", email, registration_id=str(temp.id),
                                      gender=temp.gender)
        return temp

    # ==================== COMPLETE PAYMENT ====================

    async def complete_payment(self, db: AsyncSession, data: PaymentCompletion) -> PromotionResult:
        """pending_payment -> completed -> permanent account (+ invoice)"""
        email = normalize_email(data.email)
        temp = await self.get_live(db, email)
        if temp is None:
            raise RegistrationNotFoundError(email)

        repo = AccountRepository(db)
        existing = await repo.email_taken_in_student_pools(email)
        if existing is not None:
            # A previous attempt promoted this email; drop the stale temp record
            await db.delete(temp)
            await db.commit()
            logger.log_registration_event("completed_reentry", email, account_id=str(existing.id))
            invoice = await self.invoices.latest_for_student(db, email)
            return PromotionResult(account=existing, invoice=invoice, created=False)

        now = utcnow()
        payment_date = to_naive_utc(data.payment_date) or now
        amount = data.amount or FEE_TOTAL

        temp.status = RegistrationStatus.COMPLETED
        temp.payment_id = data.payment_id
        temp.transaction_id = data.transaction_id
        temp.payment_method = data.payment_method
        temp.payment_date = payment_date
        temp.payment_amount = amount

        pool = pool_for_gender(temp.gender)
        register_number = await generate_unique(
            db, Account.register_number, lambda: register_number_candidate(pool, now), "register number"
        )
        account = self._build_account(temp, pool, register_number, payment_date, amount, now)
        temp_id = str(temp.id)

        repo.add(account)
        await db.delete(temp)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise AlreadyRegisteredError(email)
        await db.refresh(account)

        logger.log_registration_event(
            "completed", email,
            account_id=str(account.id),
            pool=pool.value,
            register_number=register_number,
        )

        payment = {
            "paymentId": data.payment_id,
            "transactionId": data.transaction_id,
            "paymentMethod": data.payment_method,
            "paymentDate": payment_date.isoformat(),
        }
        invoice = await self._generate_invoice(db, account, payment, temp_id)
        return PromotionResult(account=account, invoice=invoice)

    def _build_account(
        self,
        temp: TempRegistration,
        pool: AccountPool,
        register_number: str,
        payment_date: datetime,
        amount: int,
        now: datetime,
    ) -> Account:
        first_name, last_name = split_name(temp.name)
        parent = temp.parent_info or {}
        guardian = temp.guardian_info or {}

        return Account(
            pool=pool,
            role=Role.STUDENT,
            first_name=first_name,
            last_name=last_name,
            email=temp.email,
            hashed_password=temp.hashed_password,  # already hashed at submit
            phone=parent.get("contact"),
            date_of_birth=temp.date_of_birth,
            profile_picture=temp.profile_image_path,
            register_number=register_number,
            course=temp.course,
            year=temp.year,
            gender=temp.gender,
            category=temp.category,
            mess_preference=temp.mess_preference,
            parent_contact={
                "name": parent.get("name"),
                "occupation": parent.get("occupation"),
                "phone": parent.get("contact"),
                "address": parent.get("address"),
                "pincode": parent.get("pin"),
            },
            emergency_contact={
                "name": guardian.get("name"),
                "occupation": guardian.get("occupation"),
                "phone": guardian.get("contact"),
                "address": guardian.get("address"),
                "pincode": guardian.get("pin"),
                "relationship": "Guardian",
            },
            payment_details={
                "tempRegistrationId": str(temp.id),
                "paymentId": temp.payment_id,
                "transactionId": temp.transaction_id,
                "paymentMethod": temp.payment_method,
                "paymentDate": payment_date.isoformat(),
                "amount": amount,
                "status": "completed",
            },
            registration_data={
                "originalSubmissionDate": temp.submitted_at.isoformat(),
                "paymentCompletedAt": now.isoformat(),
                "status": "completed_with_payment",
            },
            is_verified=True,
            is_active=True,
            created_at=now,
        )

    async def _generate_invoice(
        self,
        db: AsyncSession,
        account: Account,
        payment: Dict[str, Any],
        temp_id: str,
    ) -> Optional[Invoice]:
        """Invoice failures are logged and reported as None"""
        try:
            return await self.invoices.generate(db, account, payment, temp_id)
        except Exception as exc:
            await db.rollback()
            await db.refresh(account)
            failure = IntegrationFailure(f"Invoice generation failed: {exc}", step="invoice")
            logger.log_error_with_context(
                failure,
                context="registration.complete_payment",
                account_id=str(account.id),
                cause=type(exc).__name__,
            )
            return None

    # ==================== SWEEP ====================

    async def sweep_expired(self, db: AsyncSession, now: Optional[datetime] = None) -> int:
        """Physically delete expired temp registrations; returns the count"""
        result = await db.execute(
            delete(TempRegistration).where(TempRegistration.expires_at < (now or utcnow()))
        )
        await db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info(
                f"Swept {removed} expired registration(s)",
                extra={"event_type": "registration", "registration_event": "expired_swept", "count": removed}
            )
        return removed


registration_service = RegistrationService()
