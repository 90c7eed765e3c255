# File: tests/conftest.py

import os

# must be set before accounts_api reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import re
import smtplib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from accounts_api.api.deps import get_mailer, get_photo_storage
from accounts_api.core.config import get_settings
from accounts_api.db.init_db import init_db
from accounts_api.db.session import get_db
from accounts_api.main import app
from accounts_api.services.credential_store import CredentialStore
from accounts_api.services.photo_storage import PhotoStorageError

OTP_RE = re.compile(r"verification code is: (\d{6})")


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, body):
        if self.fail:
            raise smtplib.SMTPException("relay unavailable")
        self.sent.append({"to": to, "subject": subject, "body": body})

    def last_code(self, to):
        for message in reversed(self.sent):
            if message["to"] == to:
                match = OTP_RE.search(message["body"])
                if match:
                    return match.group(1)
        raise AssertionError(f"no OTP mailed to {to}")


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.fail = False

    def upload(self, file_path: Path) -> str:
        self.uploads.append({"path": file_path, "existed": file_path.exists(), "data": file_path.read_bytes()})
        if self.fail:
            raise PhotoStorageError("cloud said no")
        return f"https://res.cloudinary.com/demo/image/upload/{file_path.name}"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def test_settings(tmp_path):
    return get_settings().model_copy(
        update={
            "upload_dir": str(tmp_path / "uploads"),
            "bcrypt_rounds": 4,
            "cookie_secure": True,
        }
    )


@pytest.fixture()
def store(db_session):
    return CredentialStore(db_session, bcrypt_rounds=4)


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def storage():
    return FakeStorage()


@pytest.fixture()
def client(session_factory, test_settings, mailer, storage):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_photo_storage] = lambda: storage

    # https so the secure cookies are sent back
    with TestClient(app, base_url="https://testserver") as c:
        yield c

    app.dependency_overrides.clear()


def verify_email(client, mailer, email):
    resp = client.post("/api/v1/auth/otp/send", json={"email": email})
    assert resp.status_code == 200, resp.text
    code = mailer.last_code(email)
    resp = client.post("/api/v1/auth/otp/verify", json={"email": email, "otp": code})
    assert resp.status_code == 200, resp.text
    return resp


ALICE = {
    "userName": "alice",
    "email": "a@x.com",
    "mobileNumber": "123",
    "password": "Secret1",
}


@pytest.fixture()
def registered_user(client, mailer):
    verify_email(client, mailer, ALICE["email"])
    resp = client.post("/api/v1/auth/register", json=ALICE)
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]
