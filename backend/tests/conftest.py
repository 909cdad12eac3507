"""
Pytest configuration and fixtures for unit and integration tests.
"""

import os
from datetime import datetime, timezone
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import Base

# Import models to register with Base.metadata
from app.models import user  # noqa: F401
from app.models.user import User
from app.utils.password import hash_password


# Use test database URL from env, or default to SQLite in-memory
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")

DEFAULT_PASSWORD = "Secret1"


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        # SQLite in-memory for fast tests
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        # Postgres for more realistic integration tests
        engine = create_engine(TEST_DATABASE_URL, echo=False)

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Drop all tables after test
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create a test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def override_get_db(test_db):
    """Override get_db dependency for FastAPI."""

    def _get_db():
        try:
            yield test_db
        finally:
            pass  # Don't close, we'll handle it in fixture

    return _get_db


@pytest.fixture
def make_user(test_db):
    """Factory inserting users directly into the test database."""

    def _make_user(
        login,
        password=DEFAULT_PASSWORD,
        name="Bob",
        gender=1,
        birthday=None,
        admin=False,
        revoked=False,
        created_on=None,
    ):
        user = User(
            login=login,
            password=hash_password(password),
            name=name,
            gender=gender,
            birthday=birthday,
            admin=admin,
            created_on=created_on or datetime.now(timezone.utc),
            created_by="tests",
        )
        if revoked:
            user.revoked_on = datetime.now(timezone.utc)
            user.revoked_by = "tests"
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user):
    """An active administrator."""
    return make_user("admin", name="Admin", gender=2, admin=True)
