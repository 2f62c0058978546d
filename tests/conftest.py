"""Pytest configuration and fixtures for the dues backend."""

import datetime
import os
import tempfile

# Must be set before the app (and its engine) is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "dues-test-logs"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.dues import Due
from routers.auth import create_access_token
from seed import seed_data
from services.authorization import DEPARTMENT_OPERATOR, SUPER_ADMIN, Principal


# =============================================================================
# Database fixtures
# =============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared across threads."""
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
def db(engine):
    """Seeded session (departments, students, faculty)."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    seed_data(session)
    yield session
    session.close()


@pytest.fixture
def client(db):
    """TestClient whose requests share the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# Principals and tokens
# =============================================================================

def operator(department: str) -> Principal:
    return Principal(role=DEPARTMENT_OPERATOR, department=department)


def auth_headers(department: str, role: str = DEPARTMENT_OPERATOR) -> dict:
    token = create_access_token({"sub": f"{department.lower()}-operator", "role": role, "department": department})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def library_headers():
    return auth_headers("LIBRARY")


@pytest.fixture
def accounts_headers():
    return auth_headers("ACCOUNTS")


@pytest.fixture
def academics_headers():
    return auth_headers("ACADEMICS")


@pytest.fixture
def hr_headers():
    return auth_headers("HR")


@pytest.fixture
def admin_headers():
    return auth_headers("ADMIN", role=SUPER_ADMIN)


# =============================================================================
# Due factory
# =============================================================================

def make_due(db=None, **overrides) -> Due:
    """Build (and persist, when a session is given) a pending payable due."""
    fields = {
        "person_id": "21CS001",
        "person_name": "Ananya Rao",
        "person_type": "Student",
        "department": "LIBRARY",
        "description": "Overdue books",
        "amount": 500.0,
        "due_date": datetime.date(2025, 12, 31),
        "category": "payable",
        "due_type": "library-fine",
        "link": "",
        "status": "pending",
        "payment_status": "due",
        "clear_date": None,
        "date_added": datetime.date(2025, 1, 10),
    }
    fields.update(overrides)
    due = Due(**fields)
    if db is not None:
        db.add(due)
        db.commit()
        db.refresh(due)
    return due
