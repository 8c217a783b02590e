"""
Account repository - one logical interface over the three credential pools.

Pools are a tag on the accounts table; callers never filter on it by hand
for lookups that span pools.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from typing import Iterable, List, Optional

from app.core.types import normalize_email
from app.models.account import Account, AccountPool, POOL_LOOKUP_ORDER, STUDENT_POOLS


class AccountRepository:
    """Read/write access to accounts, pool-aware"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, account_id: str) -> Optional[Account]:
        return await self.db.get(Account, str(account_id))

    async def get_in_pool(self, pool: AccountPool, account_id: str) -> Optional[Account]:
        """Account by id, only if it lives in `pool`"""
        result = await self.db.execute(
            select(Account).where(Account.id == str(account_id), Account.pool == pool)
        )
        return result.scalar_one_or_none()

    async def find_in_pool(self, pool: AccountPool, email: str) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(Account.pool == pool, Account.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_by_email_across_pools(
        self,
        email: str,
        pools: Iterable[AccountPool] = POOL_LOOKUP_ORDER
    ) -> Optional[Account]:
        """
        Check pools in order (staff, boys, girls); the first pool holding
        the email decides provenance.
        """
        for pool in pools:
            account = await self.find_in_pool(pool, email)
            if account is not None:
                return account
        return None

    async def email_taken_in_student_pools(self, email: str) -> Optional[Account]:
        """The promoted account for an email, if any"""
        return await self.find_by_email_across_pools(email, STUDENT_POOLS)

    async def find_student_by_identifier(self, identifier: str) -> Optional[Account]:
        """Student account by register number, id or email (boys pool first)"""
        email = normalize_email(identifier)
        for pool in STUDENT_POOLS:
            result = await self.db.execute(
                select(Account).where(
                    Account.pool == pool,
                    or_(
                        Account.register_number == identifier,
                        Account.id == identifier,
                        Account.email == email,
                    )
                ).limit(1)
            )
            account = result.scalar_one_or_none()
            if account is not None:
                return account
        return None

    async def exists(self, column, value) -> bool:
        """True when any account already uses `value` in a unique column"""
        if value is None:
            return False
        result = await self.db.execute(select(Account.id).where(column == value).limit(1))
        return result.first() is not None

    async def list_pool(self, pool: AccountPool, newest_first: bool = True) -> List[Account]:
        order = Account.created_at.desc() if newest_first else Account.created_at.asc()
        result = await self.db.execute(select(Account).where(Account.pool == pool).order_by(order))
        return list(result.scalars().all())

    async def count_pool(self, pool: AccountPool) -> int:
        result = await self.db.execute(select(func.count(Account.id)).where(Account.pool == pool))
        return result.scalar_one()

    def add(self, account: Account) -> Account:
        self.db.add(account)
        return account
