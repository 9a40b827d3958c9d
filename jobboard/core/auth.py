"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (access + password reset tokens)
- Role normalization
- FastAPI dependencies for protected routes
"""

import hashlib
import hmac
import logging
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from jobboard.core.config import get_settings
from jobboard.db.postgres import execute_raw_sql

settings = get_settings()
logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

ROLE_ALIASES = {
    "job_seeker": "job_seeker",
    "job-seeker": "job_seeker",
    "jobseeker": "job_seeker",
    "employee": "job_seeker",
    "candidate": "job_seeker",
    "employer": "employer",
}

PASSWORD_RESET_PURPOSE = "password_reset"


def normalize_role(role: Optional[str]) -> Optional[str]:
    """Map legacy role spellings onto 'job_seeker' / 'employer'. Unknown roles give None."""
    if not role:
        return None
    return ROLE_ALIASES.get(role.strip().lower())


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def password_fingerprint(password_hash: str) -> str:
    """Keyed digest of the stored hash; changes whenever the password does."""
    return hmac.new(
        settings.jwt_secret_key.encode(), password_hash.encode(), hashlib.sha256
    ).hexdigest()[:32]


def create_password_reset_token(user_id: int, password_hash: str) -> str:
    """Reset tokens carry the current password fingerprint, so one reset spends them."""
    return create_access_token(
        {"sub": str(user_id), "purpose": PASSWORD_RESET_PURPOSE, "pwd": password_fingerprint(password_hash)},
        expires_delta=timedelta(minutes=settings.password_reset_expire_minutes)
    )


def decode_password_reset_token(token: str) -> Optional[int]:
    """Return the user id of a valid reset token, None otherwise."""
    payload = decode_token(token)
    if not payload or payload.get("purpose") != PASSWORD_RESET_PURPOSE:
        return None
    try:
        return int(payload["sub"])
    except (KeyError, ValueError):
        return None


def reset_token_is_current(token: str, password_hash: str) -> bool:
    """False once the password has changed since the token was issued."""
    payload = decode_token(token) or {}
    issued_for = payload.get("pwd")
    if not issued_for:
        return False
    return hmac.compare_digest(issued_for, password_fingerprint(password_hash))


def is_internal_token(token: Optional[str]) -> bool:
    """Constant-time check of a bearer token against INTERNAL_API_TOKEN."""
    if not token or not settings.internal_api_token:
        return False
    return hmac.compare_digest(token.encode(), settings.internal_api_token.encode())


def load_user(user_id: int) -> Optional[dict]:
    rows = execute_raw_sql(
        "SELECT user_id, email, role, full_name, is_active FROM users WHERE user_id = :id",
        {"id": user_id}
    )
    return rows[0] if rows else None


def user_from_token(token: str) -> dict:
    """Resolve a bearer token to an active user dict or raise 401/403."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if not payload or payload.get("purpose"):
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = load_user(int(user_id))
    if not user:
        raise credentials_exception

    if not user["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return {
        "user_id": user["user_id"],
        "email": user["email"],
        "role": normalize_role(user["role"]) or user["role"],
        "full_name": user["full_name"],
    }


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    return user_from_token(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
) -> Optional[dict]:
    """Dependency - current user when a token is sent, None for anonymous callers."""
    if credentials is None:
        return None
    return user_from_token(credentials.credentials)


def require_job_seeker(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require job_seeker role."""
    if user["role"] != "job_seeker":
        raise HTTPException(status_code=403, detail="Job seekers only")
    return user


def require_employer(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require employer role and attach company_id (None until a company exists)."""
    if user["role"] != "employer":
        raise HTTPException(status_code=403, detail="Employers only")

    rows = execute_raw_sql(
        "SELECT company_id FROM companies WHERE owner_id = :id",
        {"id": user["user_id"]}
    )
    user["company_id"] = rows[0]["company_id"] if rows else None
    return user
