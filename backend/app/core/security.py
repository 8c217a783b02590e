from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, ExpiredSignatureError, jwt
from starlette.concurrency import run_in_threadpool
import bcrypt
import secrets

from app.core.config import settings
from app.core.exceptions import InvalidSessionError, TokenExpiredError


def _hash_sync(password: str) -> str:
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def _verify_sync(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


async def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    return await run_in_threadpool(_hash_sync, password)


async def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against a stored bcrypt hash"""
    if not hashed_password:
        return False
    return await run_in_threadpool(_verify_sync, plain_password, hashed_password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create signed session claims (JWT access token)"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate session claims"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidSessionError()

    if payload.get("type") != "access":
        raise InvalidSessionError("Invalid token type")

    return payload


def generate_numeric_suffix(digits: int) -> str:
    """Random zero-padded numeric suffix used by register/invoice/employee numbers"""
    return str(secrets.randbelow(10 ** digits)).zfill(digits)
