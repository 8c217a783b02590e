"""
Human-readable identifiers: register numbers, employee ids, invoice numbers.

Each is a fixed prefix, a date part and a random numeric suffix. Candidates
are checked against their unique column and regenerated a bounded number of
times before giving up.
"""

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import InternalError
from app.core.logging_config import logger
from app.core.security import generate_numeric_suffix
from app.core.types import utcnow
from app.models.account import AccountPool, REGISTER_PREFIX_BY_POOL


def register_number_candidate(pool: AccountPool, now: Optional[datetime] = None) -> str:
    """BH/GH + yy + 4 random digits, e.g. GH250042"""
    now = now or utcnow()
    return f"{REGISTER_PREFIX_BY_POOL[pool]}{now:%y}{generate_numeric_suffix(4)}"


def employee_id_candidate(now: Optional[datetime] = None) -> str:
    """EMP + yy + 3 random digits"""
    now = now or utcnow()
    return f"EMP{now:%y}{generate_numeric_suffix(3)}"


def invoice_number_candidate(now: Optional[datetime] = None) -> str:
    """UCET-INV- + yy + mm + 4 random digits"""
    now = now or utcnow()
    return f"{settings.INVOICE_NUMBER_PREFIX}{now:%y%m}{generate_numeric_suffix(4)}"


async def generate_unique(
    db: AsyncSession,
    column,
    candidate_factory: Callable[[], str],
    label: str,
    max_attempts: Optional[int] = None,
) -> str:
    """Return the first candidate not already present in `column`"""
    attempts = max_attempts or settings.ID_GENERATION_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        candidate = candidate_factory()
        result = await db.execute(select(column).where(column == candidate).limit(1))
        if result.first() is None:
            return candidate
        logger.warning(f"{label} collision on {candidate} (attempt {attempt}/{attempts})")

    raise InternalError(f"Could not generate a unique {label}")
