"""Password hashing and the signed-in cookie token."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from achievehub.config import settings

# New hashes use argon2; bcrypt hashes still verify and get upgraded on sign-in
pwd_context = CryptContext(schemes=["argon2", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> tuple[bool, Optional[str]]:
    """
    Check a password against a stored hash.
    Returns (valid, new_hash); new_hash is set when the stored hash should be replaced.
    """
    if not password_hash:
        # Unknown accounts still pay for a hash so timing does not reveal them
        pwd_context.dummy_verify()
        return False, None
    return pwd_context.verify_and_update(password, password_hash)


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {"sub": str(user_id), "iat": now, "exp": expires}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def user_id_from_token(token: Optional[str]) -> Optional[int]:
    """The user id carried by a cookie token, or None if it is missing, tampered with or expired."""
    if not token:
        return None
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    sub = str(claims.get("sub") or "")
    return int(sub) if sub.isdigit() else None
