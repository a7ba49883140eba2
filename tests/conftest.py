from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from src.luxgold.api.http.app_data import ApplicationDependencies
from src.luxgold.api.http.middleware.limiter import RateLimiterRegistry
from src.luxgold.core.services.auth import AdminSessionService, hash_password
from src.luxgold.core.services.database.db_manage import register_tables
from src.luxgold.core.services.database.db_session import DbSessionService
from src.luxgold.core.services.prices.price_service import PriceService
from src.luxgold.entities.core.user import User, UserRepository
from src.luxgold.runtime.config.config_data import AuthConfig, PricesConfig, RateLimiterConfig

SESSION_SECRET = "test-session-secret-with-enough-length"


@pytest.fixture
def engine() -> Generator[Engine]:
    """Fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    register_tables()
    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db_service(engine: Engine) -> DbSessionService:
    return DbSessionService(engine=engine)


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()


@pytest.fixture
def app_dependencies(db_service: DbSessionService) -> ApplicationDependencies:
    return ApplicationDependencies(
        database_service=db_service,
        price_service=PriceService(PricesConfig(enabled=False, cache_ttl_seconds=0)),
        rate_limiters=RateLimiterRegistry(RateLimiterConfig()),
        session_service=AdminSessionService(AuthConfig(), secret=SESSION_SECRET),
    )


@pytest.fixture
def client(app_dependencies: ApplicationDependencies) -> Generator[TestClient]:
    """Test client without the lifespan, wired to the in-memory database."""
    from src.luxgold.api.http.app import app

    previous = getattr(app.state, "app_dependencies", None)
    app.state.app_dependencies = app_dependencies
    try:
        yield TestClient(app)
    finally:
        app.state.app_dependencies = previous


@pytest.fixture
def csrf_client(client: TestClient) -> TestClient:
    """Client holding a CSRF cookie and sending the matching header."""
    response = client.get("/api/csrf")
    client.headers["X-CSRF-Token"] = response.json()["token"]
    return client


ADMIN_PASSWORD = "correct horse battery"


@pytest.fixture
def create_user(engine: Engine) -> Callable[..., User]:
    """Factory storing a user with a cheap bcrypt hash."""

    def _create(email: str, role: str = "ADMIN", password: str = ADMIN_PASSWORD) -> User:
        with Session(engine, expire_on_commit=False) as session:
            user = UserRepository(session).create(
                User(email=email, name=email.split("@")[0], role=role),
                hash_password(password, rounds=4),
            )
            session.commit()
        return user

    return _create


def sign_in(client: TestClient, email: str, password: str = ADMIN_PASSWORD) -> TestClient:
    """Fetch a CSRF token and sign in; the session cookie lands in the jar."""
    if "X-CSRF-Token" not in client.headers:
        client.headers["X-CSRF-Token"] = client.get("/api/csrf").json()["token"]
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def admin_client(csrf_client: TestClient, create_user) -> TestClient:
    """Client signed in as an ADMIN, with a valid CSRF token."""
    create_user("admin@luxgold.test")
    return sign_in(csrf_client, "admin@luxgold.test")
