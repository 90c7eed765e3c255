# File: tests/test_auth.py

"""
API tests for the auth routes.

These use FastAPI's TestClient. To run:
    pytest -q
"""

from sqlalchemy.exc import SQLAlchemyError

from conftest import ALICE, verify_email
from accounts_api.services.credential_store import CredentialStore


def test_health_endpoint(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ---------- OTP ----------

def test_send_otp_mails_a_code_and_sets_cookie(client, mailer):
    resp = client.post("/api/v1/auth/otp/send", json={"email": "a@x.com"})
    assert resp.status_code == 200
    assert resp.json()["data"]["mailResponse"]["delivered"] is True
    assert len(mailer.last_code("a@x.com")) == 6
    assert "OTP" in client.cookies
    # the code itself never travels in the cookie
    assert mailer.last_code("a@x.com") not in client.cookies["OTP"]


def test_send_otp_requires_email(client):
    resp = client.post("/api/v1/auth/otp/send", json={"email": "  "})
    assert resp.status_code == 401


def test_verify_otp_wrong_code(client, mailer):
    client.post("/api/v1/auth/otp/send", json={"email": "a@x.com"})
    code = mailer.last_code("a@x.com")
    wrong = "000000" if code != "000000" else "111111"

    resp = client.post("/api/v1/auth/otp/verify", json={"email": "a@x.com", "otp": wrong})
    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert "isEmailVerified" not in client.cookies


def test_verify_otp_without_pending_challenge(client):
    resp = client.post("/api/v1/auth/otp/verify", json={"email": "a@x.com", "otp": "123456"})
    assert resp.status_code == 401


def test_verify_otp_sets_marker_and_clears_otp(client, mailer):
    verify_email(client, mailer, "a@x.com")
    assert "isEmailVerified" in client.cookies
    assert "OTP" not in client.cookies


# ---------- REGISTER ----------

def test_register_after_verification(client, mailer, store):
    verify_email(client, mailer, ALICE["email"])

    resp = client.post("/api/v1/auth/register", json=ALICE)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    assert body["message"] == "Successfully created the User"
    assert body["user"]["userName"] == "alice"
    assert body["user"]["email"] == "a@x.com"
    assert body["user"]["mobileNumber"] == "123"
    for field in ("password", "passwordHash", "refreshToken"):
        assert field not in body["user"]
    assert body["mailResponse"]["delivered"] is True
    assert mailer.sent[-1]["subject"].endswith("Welcome to Urban Eats!")

    # verification marker is single-use
    assert "isEmailVerified" not in client.cookies
    assert store.find_by_email("a@x.com") is not None


def test_register_without_verification_creates_nothing(client, store):
    resp = client.post("/api/v1/auth/register", json=ALICE)
    assert resp.status_code == 401
    assert "verify your email" in resp.json()["message"]
    assert store.find_by_email(ALICE["email"]) is None


def test_register_with_marker_for_other_email(client, mailer, store):
    verify_email(client, mailer, "someone@else.com")

    resp = client.post("/api/v1/auth/register", json=ALICE)
    assert resp.status_code == 401
    assert store.find_by_email(ALICE["email"]) is None


def test_register_with_forged_marker(client, store):
    client.cookies.set("isEmailVerified", "eyJlbWFpbCI6ImFAeC5jb20ifQ.forged.sig")
    resp = client.post("/api/v1/auth/register", json=ALICE)
    assert resp.status_code == 401
    assert store.find_by_email(ALICE["email"]) is None


def test_register_rejects_blank_fields(client, mailer, store):
    verify_email(client, mailer, ALICE["email"])

    resp = client.post("/api/v1/auth/register", json={**ALICE, "userName": "   "})
    assert resp.status_code == 401
    assert resp.json()["message"] == "All fields are required"
    assert store.find_by_email(ALICE["email"]) is None


def test_register_rejects_missing_fields(client, mailer):
    verify_email(client, mailer, ALICE["email"])
    resp = client.post("/api/v1/auth/register", json={"email": ALICE["email"]})
    assert resp.status_code == 401


def test_register_marker_cannot_be_reused(client, mailer, registered_user):
    resp = client.post("/api/v1/auth/register", json={**ALICE, "userName": "alice2"})
    assert resp.status_code == 401


def test_register_duplicate_user_name_conflicts(client, mailer, registered_user):
    verify_email(client, mailer, "other@x.com")
    resp = client.post(
        "/api/v1/auth/register",
        json={**ALICE, "email": "other@x.com", "userName": "ALICE"},
    )
    assert resp.status_code == 409


def test_register_echoes_email_as_stored(client, mailer, store):
    email = "Bob@Example.COM"
    verify_email(client, mailer, email)

    resp = client.post("/api/v1/auth/register", json={**ALICE, "userName": "bob", "email": email})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == email
    assert store.find_by_email(email) is not None

    shown = resp.json()["user"]["email"]
    login = client.post("/api/v1/auth/login", json={"email": shown, "password": ALICE["password"]})
    assert login.status_code == 200
    assert login.json()["data"]["user"]["email"] == email

    profile = client.get("/api/v1/users/bob").json()["data"]
    assert profile["email"] == email


def test_register_succeeds_when_welcome_mail_fails(client, mailer, store):
    verify_email(client, mailer, ALICE["email"])
    mailer.fail = True

    resp = client.post("/api/v1/auth/register", json=ALICE)
    assert resp.status_code == 200
    assert resp.json()["mailResponse"]["delivered"] is False
    assert store.find_by_email(ALICE["email"]) is not None


# ---------- LOGIN ----------

def test_login_with_correct_credentials(client, registered_user, store):
    resp = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})
    assert resp.status_code == 200

    data = resp.json()["data"]
    assert data["accessToken"]
    assert data["refreshToken"]
    assert "refreshToken" not in data["user"]
    assert "passwordHash" not in data["user"]

    assert resp.cookies.get("accessToken") == data["accessToken"]
    assert resp.cookies.get("refreshToken") == data["refreshToken"]
    assert "email" in resp.cookies

    assert store.find_by_email("a@x.com").refresh_token == data["refreshToken"]


def test_login_cookies_are_http_only_and_secure(client, registered_user):
    resp = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})
    set_cookies = resp.headers.get_list("set-cookie")
    access = next(c for c in set_cookies if c.startswith("accessToken="))
    assert "HttpOnly" in access
    assert "Secure" in access


def test_login_overwrites_refresh_token(client, registered_user, db_session):
    first = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})
    second = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})

    first_token = first.json()["data"]["refreshToken"]
    second_token = second.json()["data"]["refreshToken"]
    assert first_token != second_token

    stored = CredentialStore(db_session).find_by_email("a@x.com").refresh_token
    assert stored == second_token


def test_login_wrong_password(client, registered_user, store):
    resp = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Password is not Correct"
    assert "accessToken" not in resp.cookies
    assert store.find_by_email("a@x.com").refresh_token is None


def test_login_unknown_user(client):
    resp = client.post("/api/v1/auth/login", json={"email": "ghost@x.com", "password": "x"})
    assert resp.status_code == 400


def test_login_blank_fields(client):
    resp = client.post("/api/v1/auth/login", json={"email": "", "password": "x"})
    assert resp.status_code == 401


def test_login_malformed_body_uses_error_envelope(client):
    resp = client.post("/api/v1/auth/login", json={"email": 5, "password": "x"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["statusCode"] == 400
    assert body["success"] is False
    assert body["message"] == "Invalid request body"
    assert body["errors"]["fields"][0]["loc"] == ["body", "email"]


def test_login_token_persistence_failure(client, registered_user, monkeypatch):
    def broken(self, user, token):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(CredentialStore, "set_refresh_token", broken)

    resp = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["message"] == "Something went wrong while generating tokens"
    assert "disk full" not in resp.text
    assert "accessToken" not in resp.cookies


# ---------- REFRESH ----------

def test_refresh_access_token_from_cookie(client, registered_user):
    client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})

    resp = client.post("/api/v1/auth/refresh-token")
    assert resp.status_code == 200
    assert resp.json()["data"]["accessToken"]


def test_refresh_with_superseded_token(client, registered_user):
    first = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})
    old_refresh = first.json()["data"]["refreshToken"]
    client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})

    resp = client.post("/api/v1/auth/refresh-token", json={"refreshToken": old_refresh})
    assert resp.status_code == 401


# ---------- FORGOT PASSWORD ----------

def test_forgot_password_mismatch(client, registered_user, store):
    before = store.find_by_email("a@x.com").password_hash

    resp = client.post(
        "/api/v1/auth/forgot-password",
        json={"email": "a@x.com", "newPassword": "A1", "confirmPassword": "A2"},
    )
    assert resp.status_code == 401

    store.db.expire_all()
    assert store.find_by_email("a@x.com").password_hash == before


def test_forgot_password_unknown_email(client):
    resp = client.post(
        "/api/v1/auth/forgot-password",
        json={"email": "ghost@x.com", "newPassword": "A1", "confirmPassword": "A1"},
    )
    assert resp.status_code == 404


def test_forgot_password_blank_fields(client):
    resp = client.post(
        "/api/v1/auth/forgot-password",
        json={"email": "a@x.com", "newPassword": "", "confirmPassword": ""},
    )
    assert resp.status_code == 401


def test_forgot_password_then_login(client, registered_user):
    resp = client.post(
        "/api/v1/auth/forgot-password",
        json={"email": "a@x.com", "newPassWord": "Fresh2", "confirmPassword": "Fresh2"},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Successfully Set the new Password"

    old = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret1"})
    assert old.status_code == 401
    new = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Fresh2"})
    assert new.status_code == 200
