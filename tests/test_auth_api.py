"""Endpoint tests for registration, login, sessions, verification and reset."""

from datetime import datetime, timedelta, timezone

import pytest

from config import get_settings
from models.log import Log
from models.token import RefreshToken
from models.users import User
from utils.hashing import verify_password
from utils.token_store import RefreshTokenStore
from utils.tokenJWT import TokenCodec

API = "/api/v1"
FORGOT_MSG = "Please check your email to reset your password!"


@pytest.fixture
def codec():
    return TokenCodec(get_settings())


def _only_cookie(client, name, value):
    """Drop the client's jar and send a single cookie explicitly."""
    client.cookies.clear()
    return {"Cookie": f"{name}={value}"}


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

class TestRegister:
    def test_register_sends_verification_email(self, client, db_session, outbox):
        resp = client.post(f"{API}/auth/register",
                           json={"name": "Jane Doe", "email": "Jane@Example.com", "password": "secret123"})

        assert resp.status_code == 201
        assert resp.json() == {"msg": "Success! Please check your email to verify your account"}
        assert len(outbox.sent) == 1
        assert outbox.sent[0]["to"] == "jane@example.com"
        assert "/user/verify-email?token=" in outbox.sent[0]["html"]

        user = db_session.query(User).filter(User.email == "jane@example.com").one()
        assert user.is_verified is False
        assert user.password_hash != "secret123"
        assert outbox.last_token() == user.verification_token

    def test_first_account_is_admin_rest_are_users(self, make_user):
        assert make_user(name="First User", email="first@example.com")["role"] == "admin"
        assert make_user(name="Second User", email="second@example.com")["role"] == "user"
        assert make_user(name="Third User", email="third@example.com")["role"] == "user"

    def test_duplicate_email(self, client, make_user):
        make_user(email="jane@example.com")
        resp = client.post(f"{API}/auth/register",
                           json={"name": "Other Jane", "email": "jane@example.com", "password": "secret123"})
        assert resp.status_code == 400
        assert resp.json()["msg"] == "Duplicate value entered for email field, please choose another value"

    def test_register_is_logged(self, client, db_session):
        client.post(f"{API}/auth/register",
                    json={"name": "Jane Doe", "email": "jane@example.com", "password": "secret123"})
        assert db_session.query(Log).filter(Log.action == "REGISTER").count() == 1


# ---------------------------------------------------------------------------
# Login / sessions
# ---------------------------------------------------------------------------

class TestLogin:
    @pytest.mark.parametrize("payload", [{}, {"email": "jane@example.com"}, {"password": "secret123"}])
    def test_missing_fields(self, client, payload):
        resp = client.post(f"{API}/auth/login", json=payload)
        assert resp.status_code == 400
        assert resp.json()["msg"] == "Please provide email and password!"

    def test_wrong_password(self, make_user, login):
        make_user()
        resp = login("jane@example.com", "not-the-password")
        assert resp.status_code == 401
        assert resp.json()["msg"] == "Please provide a correct email and password!"

    def test_unknown_email_gets_same_answer(self, login):
        resp = login("nobody@example.com")
        assert resp.status_code == 401
        assert resp.json()["msg"] == "Please provide a correct email and password!"

    def test_unverified_account_cannot_log_in(self, make_user, login):
        make_user(verify=False)
        resp = login("jane@example.com")
        assert resp.status_code == 401
        assert resp.json()["msg"] == "Account is not verified, please verify your account!"

    def test_success_sets_http_only_cookies(self, make_user, login, codec):
        identity = make_user()
        resp = login("jane@example.com")

        assert resp.status_code == 200
        assert resp.json() == {"user": identity}
        set_cookies = resp.headers.get_list("set-cookie")
        for name in ("accessToken", "refreshToken"):
            header = next(c for c in set_cookies if c.startswith(f"{name}="))
            assert "httponly" in header.lower()

        access = codec.verify(resp.cookies["accessToken"])
        refresh = codec.verify(resp.cookies["refreshToken"])
        assert access["userObj"] == identity
        assert refresh["userObj"] == identity
        assert refresh["refreshToken"]

    def test_email_is_case_insensitive(self, make_user, login):
        make_user()
        assert login("  JANE@example.COM ").status_code == 200

    def test_second_login_reuses_refresh_record(self, make_user, login, codec, db_session):
        make_user()
        first = codec.verify(login("jane@example.com").cookies["refreshToken"])["refreshToken"]
        second = codec.verify(login("jane@example.com").cookies["refreshToken"])["refreshToken"]

        assert first == second
        assert db_session.query(RefreshToken).count() == 1

    def test_revoked_record_blocks_login(self, make_user, login, db_session):
        identity = make_user()
        login("jane@example.com")
        RefreshTokenStore(db_session).invalidate(identity["userID"])

        resp = login("jane@example.com")
        assert resp.status_code == 401
        assert resp.json()["msg"] == "Invalid Credentials!"

    def test_login_outcomes_are_logged(self, make_user, login, db_session):
        make_user()
        login("jane@example.com", "wrong-password")
        login("jane@example.com")

        statuses = [row.status for row in db_session.query(Log).filter(Log.action == "LOGIN").order_by(Log.id)]
        assert statuses == ["FAIL", "SUCCESS"]


class TestAuthenticatedRequests:
    def test_no_cookies(self, client):
        resp = client.get(f"{API}/users/showMe")
        assert resp.status_code == 401
        assert resp.json()["msg"] == "Authentication invalid"

    def test_access_cookie_alone_is_enough(self, client, make_user, login):
        identity = make_user()
        access = login("jane@example.com").cookies["accessToken"]

        resp = client.get(f"{API}/users/showMe", headers=_only_cookie(client, "accessToken", access))
        assert resp.status_code == 200
        assert resp.json() == {"user": identity}

    def test_refresh_cookie_alone_reissues_both_cookies(self, client, make_user, login, codec):
        identity = make_user()
        refresh = login("jane@example.com").cookies["refreshToken"]

        resp = client.get(f"{API}/users/showMe", headers=_only_cookie(client, "refreshToken", refresh))
        assert resp.status_code == 200
        assert resp.json() == {"user": identity}
        assert codec.verify(resp.cookies["accessToken"])["userObj"] == identity
        assert "refreshToken" in resp.cookies

    def test_expired_access_token_falls_back_to_refresh(self, client, make_user, login, codec):
        identity = make_user()
        refresh = login("jane@example.com").cookies["refreshToken"]
        expired = codec.sign({"userObj": identity}, timedelta(seconds=-30))

        client.cookies.clear()
        resp = client.get(f"{API}/users/showMe",
                          headers={"Cookie": f"accessToken={expired}; refreshToken={refresh}"})
        assert resp.status_code == 200

    def test_refresh_with_unknown_value_is_rejected(self, client, make_user, login, codec):
        identity = make_user()
        login("jane@example.com")
        forged = codec.sign({"userObj": identity, "refreshToken": "not-the-stored-value"}, timedelta(days=1))

        resp = client.get(f"{API}/users/showMe", headers=_only_cookie(client, "refreshToken", forged))
        assert resp.status_code == 401

    def test_refresh_of_invalidated_record_is_rejected(self, client, make_user, login, db_session):
        identity = make_user()
        refresh = login("jane@example.com").cookies["refreshToken"]
        RefreshTokenStore(db_session).invalidate(identity["userID"])

        resp = client.get(f"{API}/users/showMe", headers=_only_cookie(client, "refreshToken", refresh))
        assert resp.status_code == 401

    def test_garbage_cookies_are_rejected(self, client):
        client.cookies.clear()
        resp = client.get(f"{API}/users/showMe",
                          headers={"Cookie": "accessToken=garbage; refreshToken=garbage"})
        assert resp.status_code == 401


class TestLogout:
    def test_logout_clears_cookies_and_record(self, client, make_user, login, db_session):
        make_user()
        login("jane@example.com")

        resp = client.delete(f"{API}/auth/logout")
        assert resp.status_code == 200
        assert resp.json() == {"msg": "User logged out!"}
        for header in resp.headers.get_list("set-cookie"):
            assert "=logout" in header
        assert db_session.query(RefreshToken).count() == 0

    def test_refresh_cookie_is_dead_after_logout(self, client, make_user, login):
        make_user()
        refresh = login("jane@example.com").cookies["refreshToken"]
        client.delete(f"{API}/auth/logout")

        resp = client.get(f"{API}/users/showMe", headers=_only_cookie(client, "refreshToken", refresh))
        assert resp.status_code == 401

    def test_login_after_logout_gets_a_new_refresh_value(self, make_user, login, client, codec):
        make_user()
        before = codec.verify(login("jane@example.com").cookies["refreshToken"])["refreshToken"]
        client.delete(f"{API}/auth/logout")
        after = codec.verify(login("jane@example.com").cookies["refreshToken"])["refreshToken"]
        assert before != after

    def test_logout_with_only_refresh_cookie_returns_no_live_session(self, client, make_user, login, db_session):
        make_user()
        refresh = login("jane@example.com").cookies["refreshToken"]

        resp = client.delete(f"{API}/auth/logout", headers=_only_cookie(client, "refreshToken", refresh))
        assert resp.status_code == 200

        set_cookies = resp.headers.get_list("set-cookie")
        assert len(set_cookies) == 2
        for header in set_cookies:
            assert header.split(";")[0] in ("accessToken=logout", "refreshToken=logout")
        assert "accessToken" not in client.cookies
        assert "refreshToken" not in client.cookies
        assert db_session.query(RefreshToken).count() == 0

    def test_logout_requires_authentication(self, client):
        assert client.delete(f"{API}/auth/logout").status_code == 401


# ---------------------------------------------------------------------------
# Verify email
# ---------------------------------------------------------------------------

class TestVerifyEmail:
    def _register(self, client):
        resp = client.post(f"{API}/auth/test-register",
                           json={"name": "Jane Doe", "email": "jane@example.com", "password": "secret123"})
        return resp.json()["verification_token"]

    def test_verify(self, client, db_session):
        token = self._register(client)
        resp = client.get(f"{API}/auth/verify-email",
                          params={"verificationToken": token, "email": "jane@example.com"})

        assert resp.status_code == 200
        assert resp.json() == {"msg": "Email verified!"}
        user = db_session.query(User).one()
        assert user.is_verified is True
        assert user.verification_token == ""

    def test_wrong_token(self, client):
        self._register(client)
        resp = client.get(f"{API}/auth/verify-email",
                          params={"verificationToken": "wrong", "email": "jane@example.com"})
        assert resp.status_code == 401
        assert resp.json()["msg"] == "Verification failed!"

    def test_unknown_email(self, client):
        token = self._register(client)
        resp = client.get(f"{API}/auth/verify-email",
                          params={"verificationToken": token, "email": "nobody@example.com"})
        assert resp.status_code == 401

    def test_token_cannot_be_reused(self, client):
        token = self._register(client)
        params = {"verificationToken": token, "email": "jane@example.com"}
        assert client.get(f"{API}/auth/verify-email", params=params).status_code == 200
        assert client.get(f"{API}/auth/verify-email", params=params).status_code == 401


# ---------------------------------------------------------------------------
# Forgot / reset password
# ---------------------------------------------------------------------------

class TestPasswordReset:
    def test_forgot_password_requires_email(self, client):
        resp = client.post(f"{API}/auth/forgot-password", json={})
        assert resp.status_code == 400
        assert resp.json()["msg"] == "Please provide a valid email!"

    def test_unknown_email_gets_same_answer_and_no_mail(self, client, outbox):
        resp = client.post(f"{API}/auth/forgot-password", json={"email": "nobody@example.com"})
        assert resp.status_code == 200
        assert resp.json() == {"msg": FORGOT_MSG}
        assert outbox.sent == []

    def test_full_reset_flow(self, client, make_user, login, outbox, db_session):
        make_user()
        resp = client.post(f"{API}/auth/forgot-password", json={"email": "jane@example.com"})
        assert resp.json() == {"msg": FORGOT_MSG}
        assert outbox.sent[-1]["subject"] == "Reset Password"
        token = outbox.last_token()

        user = db_session.query(User).one()
        assert user.password_token != token

        resp = client.post(f"{API}/auth/reset-password",
                           json={"token": token, "email": "jane@example.com", "password": "brand-new-pass"})
        assert resp.status_code == 200
        assert resp.json() == {"msg": "Password successfully reset!"}

        assert login("jane@example.com", "secret123").status_code == 401
        assert login("jane@example.com", "brand-new-pass").status_code == 200

    def test_expired_token_is_silently_ignored(self, client, make_user, login, db_session):
        make_user()
        token = client.post(f"{API}/auth/test-forgot-password",
                            json={"email": "jane@example.com"}).json()["password_token"]

        user = db_session.query(User).one()
        user.password_token_expiration_date = datetime.now(timezone.utc) - timedelta(minutes=1)
        db_session.commit()

        resp = client.post(f"{API}/auth/reset-password",
                           json={"token": token, "email": "jane@example.com", "password": "brand-new-pass"})
        assert resp.status_code == 200
        assert resp.json() == {"msg": "Password successfully reset!"}
        assert login("jane@example.com", "secret123").status_code == 200

    def test_wrong_token_is_silently_ignored(self, client, make_user, db_session):
        make_user()
        client.post(f"{API}/auth/forgot-password", json={"email": "jane@example.com"})

        resp = client.post(f"{API}/auth/reset-password",
                           json={"token": "wrong", "email": "jane@example.com", "password": "brand-new-pass"})
        assert resp.status_code == 200
        db_session.expire_all()
        assert verify_password("secret123", db_session.query(User).one().password_hash)

    def test_missing_token_is_forbidden(self, client):
        resp = client.post(f"{API}/auth/reset-password",
                           json={"email": "jane@example.com", "password": "brand-new-pass"})
        assert resp.status_code == 403
        assert resp.json()["msg"] == "Unauthenticated!"

    def test_missing_token_wins_over_missing_values(self, client):
        resp = client.post(f"{API}/auth/reset-password", json={})
        assert resp.status_code == 403

    def test_missing_token_wins_over_short_password(self, client):
        resp = client.post(f"{API}/auth/reset-password", json={"email": "jane@example.com", "password": "abc"})
        assert resp.status_code == 403
        assert resp.json()["msg"] == "Unauthenticated!"

    def test_short_password_is_rejected_after_token_check(self, client, make_user, login):
        make_user()
        token = client.post(f"{API}/auth/test-forgot-password",
                            json={"email": "jane@example.com"}).json()["password_token"]

        resp = client.post(f"{API}/auth/reset-password",
                           json={"token": token, "email": "jane@example.com", "password": "abc"})
        assert resp.status_code == 400
        assert resp.json()["msg"] == "Password must be at least 6 characters long"
        assert login("jane@example.com", "secret123").status_code == 200

    @pytest.mark.parametrize("payload", [
        {"token": "abc", "password": "brand-new-pass"},
        {"token": "abc", "email": "jane@example.com"},
    ])
    def test_missing_email_or_password(self, client, payload):
        resp = client.post(f"{API}/auth/reset-password", json=payload)
        assert resp.status_code == 400
        assert resp.json()["msg"] == "Please provide all values!"

    def test_test_forgot_password_for_unknown_email(self, client):
        resp = client.post(f"{API}/auth/test-forgot-password", json={"email": "nobody@example.com"})
        assert resp.status_code == 200
        assert resp.json() == {"msg": FORGOT_MSG, "password_token": None}
