"""Shared test fixtures and configuration."""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inec_poll.main import app
from inec_poll.db.base import Base
from inec_poll.db.session import enable_sqlite_foreign_keys
from inec_poll.api.deps import get_db
from inec_poll.core.cache import global_cache
from inec_poll.core.rate_limit import RateLimiter
from inec_poll.core.security import create_access_token
from inec_poll.core.utils import utcnow


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

USER_A = "11111111-1111-4111-8111-111111111111"
USER_B = "22222222-2222-4222-8222-222222222222"

# High enough that no ordinary test trips it
UNLIMITED = {action: 1_000_000 for action in ("create_poll", "vote", "update_poll", "delete_poll", "general")}


@pytest.fixture(autouse=True)
def fresh_rate_limiter(request):
    """Give every test its own limiter; only rate_limit tests get the real ceilings."""
    if "rate_limit" in request.keywords:
        app.state.rate_limiter = RateLimiter()
    else:
        app.state.rate_limiter = RateLimiter(limits=UNLIMITED)
    yield app.state.rate_limiter
    app.state.rate_limiter.reset()


@pytest.fixture(autouse=True)
def clear_read_cache():
    """Cached reads must not leak between tests that use different databases."""
    global_cache.clear()
    yield
    global_cache.clear()


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with a test database."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id: str, email: str = None) -> dict:
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def user_a_headers():
    return auth_headers(USER_A, "a@example.com")


@pytest.fixture
def user_b_headers():
    return auth_headers(USER_B, "b@example.com")


@pytest.fixture
def expired_headers():
    token = create_access_token({"sub": USER_A}, expires_delta=timedelta(seconds=-10))
    return {"Authorization": f"Bearer {token}"}


def poll_payload(**overrides) -> dict:
    """A valid create-poll body; keyword arguments replace fields."""
    payload = {
        "title": "2027 Presidential Election",
        "description": "Who will you vote for?",
        "election_type": "Presidential",
        "state": "Lagos",
        "lga": None,
        "end_date": (utcnow() + timedelta(days=7)).isoformat(),
        "options": [
            {"candidate_name": "Candidate A", "party_name": "Party A"},
            {"candidate_name": "Candidate B", "party_name": "Party B"},
        ],
    }
    payload.update(overrides)
    return payload
