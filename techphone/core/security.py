"""
Password hashing and access tokens for the storefront's own login.

Tokens carry the profile id as ``sub`` and the role it had at login as
``role``; the role is informational only, deps re-read the profile on every
request so a ban or demotion takes effect immediately.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from techphone.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY

pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not plain or not hashed:
        return False
    return pwd_ctx.verify(plain, hashed)


def password_needs_rehash(hashed: str) -> bool:
    """True when the stored hash uses outdated bcrypt settings."""
    return pwd_ctx.needs_update(hashed)


def create_access_token(user_id: str, role: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    if role:
        claims["role"] = role
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Raises JWTError on a bad signature, an expired token or a missing subject."""
    claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    if not claims.get("sub"):
        raise JWTError("Token has no subject")
    return claims
