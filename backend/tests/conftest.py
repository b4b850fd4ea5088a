"""
Pytest configuration and fixtures
"""

import pytest
import os
from typing import Callable, Optional
from uuid import uuid4
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-min-32-chars-for-testing-only"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["METRICS_TOKEN"] = "test-metrics-token"
os.environ["LOG_LEVEL"] = "DEBUG"

from offerflow.infrastructure.database import Base, build_engine, get_db
import offerflow.models  # noqa: F401
from offerflow.main import app
from offerflow.core.users.models import User, UserRole
from offerflow.core.startups.models import Startup
from offerflow.services.lifecycle import OfferLifecycleEngine

from auth_utils import auth_headers


# In-memory SQLite shared across threads via StaticPool
test_engine = build_engine("sqlite://")

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Create a fresh database session for each test.
    Recreates all tables before and drops them after each test.
    """
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session: Session):
    """
    Create FastAPI test client with the database dependency overridden.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def lifecycle(db_session: Session) -> OfferLifecycleEngine:
    """Lifecycle engine bound to the test session"""
    return OfferLifecycleEngine(db_session)


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory: make_user(role, advisor_code=None, entered=None, assigned=None)"""
    def _make(
        role: UserRole = UserRole.INVESTOR,
        advisor_code: Optional[str] = None,
        entered: Optional[str] = None,
        assigned: Optional[str] = None,
    ) -> User:
        user = User(
            id=uuid4(),
            email=f"{role.value}-{uuid4().hex[:8]}@example.com",
            name=role.value.title(),
            role=role,
            advisor_code=advisor_code,
            investment_advisor_code_entered=entered,
            investment_advisor_code=assigned,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_startup(db_session: Session, make_user) -> Callable[..., Startup]:
    """Factory: make_startup(advisor_code=None, owner=None)"""
    def _make(advisor_code: Optional[str] = None, owner: Optional[User] = None, sector: Optional[str] = None) -> Startup:
        owner = owner or make_user(UserRole.STARTUP)
        startup = Startup(
            id=uuid4(),
            name=f"Startup {uuid4().hex[:6]}",
            sector=sector,
            owner_user_id=owner.id,
            investment_advisor_code=advisor_code,
        )
        db_session.add(startup)
        db_session.commit()
        db_session.refresh(startup)
        return startup
    return _make


@pytest.fixture
def investor(make_user) -> User:
    """Investor without an advisor"""
    return make_user(UserRole.INVESTOR)


@pytest.fixture
def advisor_1(make_user) -> User:
    return make_user(UserRole.INVESTMENT_ADVISOR, advisor_code="ADV-1")


@pytest.fixture
def advisor_2(make_user) -> User:
    return make_user(UserRole.INVESTMENT_ADVISOR, advisor_code="ADV-2")


@pytest.fixture
def advised_investor(make_user, advisor_1) -> User:
    """Investor who entered advisor code ADV-1 at registration"""
    return make_user(UserRole.INVESTOR, entered="ADV-1")


@pytest.fixture
def startup(make_startup):
    """Startup without an advisor"""
    return make_startup()


@pytest.fixture
def advised_startup(make_startup, advisor_2):
    """Startup advised by ADV-2"""
    return make_startup(advisor_code="ADV-2")


@pytest.fixture
def headers_for() -> Callable[..., dict]:
    """headers_for(user) -> Authorization header dict"""
    def _headers(user: User, roles=None) -> dict:
        return auth_headers(str(user.id), email=user.email, roles=roles)
    return _headers
