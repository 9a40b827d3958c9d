from unittest.mock import MagicMock, patch

import pytest

from jobboard.core.auth import create_password_reset_token, hash_password, verify_password
from jobboard.core.errors import AppError, ConflictError
from jobboard.schemas.schemas import RegisterRequest
from jobboard.services import auth_service


def _session(db):
    session = MagicMock()
    session.__enter__.return_value = db
    return session


def _users_table(password_hash):
    """A one-row users table that remembers password updates."""
    state = {"password_hash": password_hash}

    def execute(statement, params):
        result = MagicMock()
        if str(statement).startswith("SELECT"):
            result.fetchone.return_value = (state["password_hash"],)
        else:
            state["password_hash"] = params["hash"]
        return result

    db = MagicMock()
    db.execute.side_effect = execute
    return state, _session(db)


# ============================================================
# REGISTER / LOGIN
# ============================================================

def test_register_duplicate_email():
    db = MagicMock()
    db.execute.return_value.fetchone.return_value = (3,)
    request = RegisterRequest(email="Ada@Example.com", password="longenough", full_name="Ada", role="job_seeker")

    with patch("jobboard.services.auth_service.get_db_session", return_value=_session(db)):
        with pytest.raises(ConflictError, match="Email already registered"):
            auth_service.register(request)

    assert db.execute.call_count == 1
    assert db.execute.call_args[0][1] == {"email": "ada@example.com"}


def test_employer_registration_creates_company():
    no_user, created = MagicMock(), MagicMock()
    no_user.fetchone.return_value = None
    created.fetchone.return_value = (21,)
    db = MagicMock()
    db.execute.side_effect = [no_user, created, MagicMock()]
    request = RegisterRequest(email="eve@example.com", password="longenough", full_name="Eve",
                              role="employer", company_name="  Demo Labs ")

    with patch("jobboard.services.auth_service.get_db_session", return_value=_session(db)):
        user_id = auth_service.register(request)

    assert user_id == 21
    assert db.execute.call_args_list[1][0][1]["role"] == "employer"
    assert db.execute.call_args_list[2][0][1] == {"owner_id": 21, "name": "Demo Labs"}


def test_login_rejects_bad_credentials():
    user = {"user_id": 11, "password_hash": hash_password("right-password"), "role": "job_seeker", "is_active": True}

    with patch("jobboard.services.auth_service.fetch_one", return_value=user):
        with pytest.raises(auth_service.InvalidCredentialsError) as exc:
            auth_service.login("ada@example.com", "wrong-password")
    assert exc.value.status_code == 401

    with patch("jobboard.services.auth_service.fetch_one", return_value=None):
        with pytest.raises(auth_service.InvalidCredentialsError):
            auth_service.login("nobody@example.com", "right-password")


def test_login_deactivated_account():
    user = {"user_id": 11, "password_hash": hash_password("right-password"), "role": "job_seeker", "is_active": False}

    with patch("jobboard.services.auth_service.fetch_one", return_value=user):
        with pytest.raises(auth_service.AccountDeactivatedError) as exc:
            auth_service.login("ada@example.com", "right-password")

    assert exc.value.status_code == 403


def test_login_returns_token():
    user = {"user_id": 11, "password_hash": hash_password("right-password"), "role": "job_seeker", "is_active": True}

    with patch("jobboard.services.auth_service.fetch_one", return_value=user):
        result = auth_service.login("Ada@Example.com", "right-password")

    assert result["user_id"] == 11
    assert result["role"] == "job_seeker"
    assert result["access_token"]


# ============================================================
# PASSWORD RESET
# ============================================================

def test_reset_request_for_unknown_email_sends_nothing():
    with patch("jobboard.services.auth_service.fetch_one", return_value=None), \
            patch("jobboard.services.notification_service.send_email") as send:
        message = auth_service.request_password_reset("nobody@example.com")

    assert message == auth_service.PASSWORD_RESET_MESSAGE
    send.assert_not_called()


def test_reset_request_mails_a_link():
    user = {"user_id": 11, "full_name": "Ada", "password_hash": hash_password("original-password")}

    with patch("jobboard.services.auth_service.fetch_one", return_value=user), \
            patch("jobboard.services.notification_service.send_email",
                  return_value={"delivered": True, "reason": None}) as send:
        message = auth_service.request_password_reset("ada@example.com")

    assert message == auth_service.PASSWORD_RESET_MESSAGE
    assert send.call_args.kwargs["to"] == "ada@example.com"
    assert "/reset-password?token=" in send.call_args.kwargs["html"]


def test_reset_link_works_only_once():
    original = hash_password("original-password")
    state, session = _users_table(original)
    token = create_password_reset_token(11, original)

    with patch("jobboard.services.auth_service.get_db_session", return_value=session):
        auth_service.reset_password(token, "first-new-password")
        with pytest.raises(AppError, match="Invalid or expired reset link"):
            auth_service.reset_password(token, "attacker-password")

    assert verify_password("first-new-password", state["password_hash"])


def test_reset_rejects_tokens_without_a_fingerprint():
    state, session = _users_table(hash_password("original-password"))
    token = auth_service.create_access_token({"sub": "11", "purpose": "password_reset"})

    with patch("jobboard.services.auth_service.get_db_session", return_value=session):
        with pytest.raises(AppError):
            auth_service.reset_password(token, "new-password")

    assert verify_password("original-password", state["password_hash"])


def test_reset_rejects_garbage_token():
    with patch("jobboard.services.auth_service.get_db_session") as session:
        with pytest.raises(AppError, match="Invalid or expired reset link"):
            auth_service.reset_password("not.a.token", "new-password")

    session.assert_not_called()
