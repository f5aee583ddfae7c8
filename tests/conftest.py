"""
Shared fixtures: in-memory SQLite database, a TestClient wired to it,
one user per role, and a stubbed SSLCommerz HTTP endpoint.
"""
import os
import tempfile

# Configure before the application modules read their settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_AUTO_INIT"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["APP_URL"] = "http://testserver"
os.environ["SSL_VALIDATE_PAYMENTS"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="recruitment-uploads-")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_session
from dependencies import create_access_token, hash_password
from main import app
from models import Agent, Base, Candidate, User, UserRole
from permissions import Principal
from services import sslcommerz

TEST_PASSWORD = "secret123"


class _FakeJSONResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


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
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _get_test_session():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_session] = _get_test_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def users(db):
    """One active user per role, plus a second agent."""
    password = hash_password(TEST_PASSWORD)
    created = {}
    for key, role in [
        ("super_admin", UserRole.SUPER_ADMIN),
        ("admin", UserRole.ADMIN),
        ("accountant", UserRole.ACCOUNTANT),
        ("data_entry", UserRole.DATA_ENTRY),
        ("agent", UserRole.AGENT),
        ("other_agent", UserRole.AGENT),
    ]:
        user = User(name=key.replace("_", " ").title(), email=f"{key}@example.com", password=password, role=role)
        db.add(user)
        db.flush()
        if role == UserRole.AGENT:
            db.add(Agent(user_id=user.id, phone="01711000000"))
        created[key] = user
    db.commit()
    return created


@pytest.fixture
def auth():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _headers


@pytest.fixture
def principal():
    def _principal(user):
        return Principal(id=user.id, role=user.role, name=user.name, email=user.email)
    return _principal


@pytest.fixture
def make_candidate(db):
    counter = {"n": 0}

    def _make(agent=None, package_amount="100000.00", **fields):
        counter["n"] += 1
        amount = Decimal(package_amount)
        candidate = Candidate(
            name=fields.pop("name", f"Candidate {counter['n']}"),
            passport_number=fields.pop("passport_number", f"P{counter['n']:08d}"),
            agent_id=agent.id if agent is not None else None,
            package_amount=amount,
            total_paid=Decimal("0.00"),
            due_amount=amount,
            **fields,
        )
        db.add(candidate)
        db.commit()
        return candidate

    return _make


@pytest.fixture
def gateway(monkeypatch):
    """
    Stub for the SSLCommerz session API.

    Set gateway.response to the JSON body (or an exception instance) to return;
    every call is recorded in gateway.calls as (url, form data, timeout).
    """
    class _Gateway:
        response = {"status": "SUCCESS", "GatewayPageURL": "https://sandbox.sslcommerz.com/pay/abc"}
        validation = {"status": "VALID"}
        calls = []

    stub = _Gateway()
    stub.calls = []

    def fake_post(url, data=None, timeout=None, **kwargs):
        stub.calls.append((url, data, timeout))
        if isinstance(stub.response, sslcommerz.requests.RequestException):
            raise stub.response
        return _FakeJSONResponse(stub.response)

    def fake_get(url, params=None, timeout=None, **kwargs):
        stub.calls.append((url, params, timeout))
        return _FakeJSONResponse(stub.validation)

    monkeypatch.setattr(sslcommerz.requests, "post", fake_post)
    monkeypatch.setattr(sslcommerz.requests, "get", fake_get)
    return stub
