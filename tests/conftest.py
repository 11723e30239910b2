"""Shared test fixtures.

Provides an in-memory SQLite engine, a ``session`` for service-level tests,
a FastAPI ``client`` wired to the same database, and user/organization
factories with bearer-token helpers.
"""

import os
import tempfile
from collections.abc import Callable, Generator

# Settings are read at import time; configure them before anything imports certivo
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STATIC_DIR", tempfile.mkdtemp(prefix="certivo-static-"))
os.environ.setdefault(
    "LOG_FILE", os.path.join(tempfile.gettempdir(), "certivo-tests.log"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from certivo.db.schema import Organization, OrganizationType, User, UserRole


@pytest.fixture()
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(session: Session) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient that shares the test ``session``."""
    from certivo.db.core import get_session
    from certivo.main import app

    def override_get_session():
        return session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(session: Session) -> Callable[..., User]:
    def _make_user(
        email: str = "holder@example.com",
        name: str = "Holder",
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> User:
        user = User(email=email, name=name, role=role, is_active=is_active)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def admin(make_user) -> User:
    return make_user(email="admin@certivo.local", name="Admin", role=UserRole.ADMIN)


@pytest.fixture()
def organization(session: Session) -> Organization:
    org = Organization(id=7, name="Acme University", type=OrganizationType.COLLEGE)
    session.add(org)
    session.commit()
    session.refresh(org)
    return org


@pytest.fixture()
def auth_headers(session: Session) -> Callable[[User], dict]:
    from certivo.services.auth import AuthService

    def _headers(user: User) -> dict:
        token = AuthService(session).generate_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers
