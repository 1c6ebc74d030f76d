"""
Shared fixtures: in-memory database, fake media host and auth helpers.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobnest import models  # noqa: F401
from jobnest.database import Base, get_db
from jobnest.errors import UploadError
from jobnest.main import app
from jobnest.services.media import get_media_uploader
from jobnest.services.rate_limit import upload_limiter


class FakeUploader:
    """Stands in for the media host and remembers every upload."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.fail = False

    def upload(self, data: bytes, filename: str, content_type: str | None = None, folder: str | None = None) -> str:
        if self.fail:
            raise UploadError("media host unavailable")
        self.calls.append({"filename": filename, "content_type": content_type, "folder": folder, "size": len(data)})
        return f"https://media.test/{folder or 'general_uploads'}/{len(self.calls)}-{filename}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def media():
    return FakeUploader()


def _build_client(session_factory, media, raise_server_exceptions: bool = True):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_uploader] = lambda: media
    upload_limiter.reset()
    return TestClient(app, raise_server_exceptions=raise_server_exceptions)


@pytest.fixture
def client(session_factory, media):
    yield _build_client(session_factory, media)
    app.dependency_overrides.clear()
    upload_limiter.reset()


@pytest.fixture
def lenient_client(session_factory, media):
    """Client that returns 500 responses instead of re-raising server errors."""
    yield _build_client(session_factory, media, raise_server_exceptions=False)
    app.dependency_overrides.clear()
    upload_limiter.reset()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, password: str = "secret123", role: str = "user") -> dict:
    response = client.post("/api/users/register", json={"email": email, "password": password, "role": role})
    assert response.status_code == 201, response.text
    body = response.json()
    return {"token": body["token"], "user": body["user"], "headers": auth_headers(body["token"])}


def create_company(client: TestClient, owner: dict, name: str = "Acme Corp", **fields) -> dict:
    response = client.post("/api/companies", json={"name": name, **fields}, headers=owner["headers"])
    assert response.status_code == 201, response.text
    return response.json()["company"]


def create_job(client: TestClient, owner: dict, company_id: int, **fields) -> dict:
    payload = {
        "company_id": company_id,
        "title": "Backend Engineer",
        "description": "Build and run APIs",
        "location": "Berlin",
    }
    payload.update(fields)
    response = client.post("/api/jobs", json=payload, headers=owner["headers"])
    assert response.status_code == 201, response.text
    return response.json()["job"]


def apply(client: TestClient, applicant: dict, job_id: int, content: bytes = b"%PDF-1.4 resume"):
    return client.post(
        "/api/applications",
        data={"job_id": str(job_id)},
        files={"cv": ("cv.pdf", content, "application/pdf")},
        headers=applicant["headers"],
    )


@pytest.fixture
def company_owner(client):
    owner = register(client, "owner@acme.test", role="company")
    owner["company"] = create_company(client, owner)
    return owner


@pytest.fixture
def job(client, company_owner):
    return create_job(client, company_owner, company_owner["company"]["id"])


@pytest.fixture
def seeker(client):
    return register(client, "seeker@example.test")
