"""Custom SQLAlchemy column types shared by the hostel models"""
from datetime import datetime, timezone
from typing import Optional
import uuid

from sqlalchemy import TypeDecorator, String


def generate_uuid():
    """Generate a UUID string"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp. SQLite drops tzinfo, so every column stores naive UTC."""
    return datetime.utcnow()


class GUID(TypeDecorator):
    """Platform-independent GUID type that stores UUIDs as VARCHAR(36)"""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value


class LowercaseString(TypeDecorator):
    """String that is trimmed and lower-cased on the way in (emails)"""
    impl = String(255)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value).strip().lower()
        return value


def normalize_email(email: str) -> str:
    """Emails are compared case-insensitively everywhere"""
    return (email or "").strip().lower()


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Client-supplied timestamps may carry an offset; store them as naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
