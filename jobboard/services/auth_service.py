"""
Auth Service - registration, login, password reset, account deletion.
"""
import logging

from sqlalchemy import text

from jobboard.core.auth import (
    create_access_token, create_password_reset_token, decode_password_reset_token,
    hash_password, reset_token_is_current, verify_password,
)
from jobboard.core.config import get_settings
from jobboard.core.errors import AppError, ConflictError, NotFoundError
from jobboard.db.postgres import execute_raw_sql, fetch_one, get_db_session
from jobboard.schemas.schemas import RegisterRequest
from jobboard.services import notification_service

settings = get_settings()
logger = logging.getLogger(__name__)

PASSWORD_RESET_MESSAGE = "If an account exists for that email, we've sent instructions to reset your password."


class InvalidCredentialsError(AppError):
    status_code = 401


class AccountDeactivatedError(AppError):
    status_code = 403


def register(request: RegisterRequest) -> int:
    """Create the user (and company for employers who named one). Returns user_id."""
    with get_db_session() as db:
        existing = db.execute(
            text("SELECT user_id FROM users WHERE email = :email"),
            {"email": request.email.lower()}
        ).fetchone()
        if existing:
            raise ConflictError("Email already registered")

        user_id = db.execute(
            text("""
                INSERT INTO users (email, password_hash, role, full_name)
                VALUES (:email, :password_hash, :role, :full_name)
                RETURNING user_id
            """),
            {
                "email": request.email.lower(),
                "password_hash": hash_password(request.password),
                "role": request.role.value,
                "full_name": request.full_name.strip(),
            }
        ).fetchone()[0]

        if request.role.value == "employer" and request.company_name and request.company_name.strip():
            db.execute(
                text("INSERT INTO companies (owner_id, name) VALUES (:owner_id, :name)"),
                {"owner_id": user_id, "name": request.company_name.strip()}
            )

    logger.info("Registered user %s as %s", user_id, request.role.value)
    return user_id


def login(email: str, password: str) -> dict:
    user = fetch_one(
        "SELECT user_id, password_hash, role, is_active FROM users WHERE email = :email",
        {"email": email.lower()}
    )
    if not user or not verify_password(password, user["password_hash"]):
        raise InvalidCredentialsError("Invalid email or password")

    if not user["is_active"]:
        raise AccountDeactivatedError("Account deactivated")

    token = create_access_token(data={"sub": str(user["user_id"]), "email": email.lower(), "role": user["role"]})
    return {"access_token": token, "user_id": user["user_id"], "role": user["role"]}


def get_user(user_id: int) -> dict:
    user = fetch_one(
        "SELECT user_id, email, role, full_name, is_active, created_at FROM users WHERE user_id = :id",
        {"id": user_id}
    )
    if not user:
        raise NotFoundError("User not found")
    return user


def request_password_reset(email: str) -> str:
    """
    Mail a reset link when the account exists.
    Always returns the same message so callers cannot probe for accounts.
    """
    user = fetch_one(
        "SELECT user_id, full_name, password_hash FROM users WHERE email = :email AND is_active = TRUE",
        {"email": email.lower()}
    )
    if user:
        token = create_password_reset_token(user["user_id"], user["password_hash"])
        link = f"{settings.site_url.rstrip('/')}/reset-password?token={token}"
        result = notification_service.send_email(
            to=email,
            subject="Reset your password",
            html=(
                f"<p>Hi {user['full_name'] or 'there'},</p>"
                f"<p>Use the link below to choose a new password. "
                f"It expires in {settings.password_reset_expire_minutes} minutes.</p>"
                f'<p><a href="{link}">Reset password</a></p>'
            ),
        )
        if not result["delivered"]:
            logger.warning("Password reset email not delivered to user %s: %s", user["user_id"], result["reason"])
    return PASSWORD_RESET_MESSAGE


def reset_password(token: str, new_password: str) -> None:
    user_id = decode_password_reset_token(token)
    if user_id is None:
        raise AppError("Invalid or expired reset link")

    with get_db_session() as db:
        current = db.execute(
            text("SELECT password_hash FROM users WHERE user_id = :id AND is_active = TRUE FOR UPDATE"),
            {"id": user_id}
        ).fetchone()
        if not current or not reset_token_is_current(token, current[0]):
            raise AppError("Invalid or expired reset link")

        db.execute(
            text("UPDATE users SET password_hash = :hash, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
            {"hash": hash_password(new_password), "id": user_id}
        )


def delete_account(user_id: int) -> None:
    """Foreign keys cascade to every owned row."""
    rows = execute_raw_sql("DELETE FROM users WHERE user_id = :id RETURNING user_id", {"id": user_id})
    if not rows:
        raise NotFoundError("User not found")
    logger.info("Deleted account %s", user_id)
