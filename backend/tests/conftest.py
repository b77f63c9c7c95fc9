"""Pytest fixtures for the clearance portal.

Provides reusable test fixtures for:
- SQLite database (file-backed so threads can share it) created per test
- Local blob store in a temporary directory
- Provisioned student and administrator accounts
- Clearance sessions and services
- Authenticated test clients with JWT tokens

Usage:
    def test_dashboard(student_client, student):
        response = student_client.get(f"/api/v1/clearance/{student.matric}")
        assert response.status_code == 200
"""

import sys
import os
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key-32-chars-long")
os.environ.setdefault(
    "JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security"
)
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from auth.gate import ClearanceSession
from auth.jwt import create_access_token
from auth.password import hash_password
from auth.roles import UserRole
from clearance.dependencies import get_blob_store
from clearance.readiness import ReadinessAggregator
from clearance.service import ClearanceService
from config import get_settings
from database import get_db as database_get_db
from infrastructure.storage.local_storage_adapter import LocalStorageAdapter
from models.base import Base
from models.certificate_ready import CertificateReady
from models.student import Student


STUDENT_PASSWORD = "clearance2024"
ADMIN_PASSWORD = "registry2024"

STUDENT_MATRIC = "eng/2020/001"
OTHER_MATRIC = "eng/2020/002"
ADMIN_MATRIC = "admin01"


def make_pdf(size_bytes: int = 2 * 1024 * 1024) -> bytes:
    """PDF-looking payload of the given size."""
    header = b"%PDF-1.4\n"
    return header + b"0" * (size_bytes - len(header))


def auth_headers(matric: str, role: str, email=None) -> dict:
    token = create_access_token(matric=matric, role=role, email=email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="session")
def student_password_hash() -> str:
    """Argon2 is deliberately slow, so hash once per run."""
    return hash_password(STUDENT_PASSWORD)


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture(scope="function")
def test_engine(tmp_path):
    """Create a fresh SQLite database for each test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'clearance.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def blob_store(tmp_path) -> LocalStorageAdapter:
    return LocalStorageAdapter(str(tmp_path / "blobs"))


@pytest.fixture(scope="function")
def student(db_session: Session, student_password_hash: str) -> Student:
    """A provisioned student who has confirmed payment."""
    student = Student(
        matric=STUDENT_MATRIC,
        email="ada@uni.edu",
        role="STUDENT",
        password_hash=student_password_hash,
        paid=True,
    )
    db_session.add(student)
    db_session.commit()
    db_session.refresh(student)
    return student


@pytest.fixture(scope="function")
def other_student(db_session: Session, student_password_hash: str) -> Student:
    student = Student(
        matric=OTHER_MATRIC,
        email="grace@uni.edu",
        role="STUDENT",
        password_hash=student_password_hash,
        paid=False,
    )
    db_session.add(student)
    db_session.commit()
    db_session.refresh(student)
    return student


@pytest.fixture(scope="function")
def admin(db_session: Session, admin_password_hash: str) -> Student:
    """An administrator account (no clearance records of its own)."""
    account = Student(
        matric=ADMIN_MATRIC,
        email="registry@uni.edu",
        role="ADMIN",
        password_hash=admin_password_hash,
        paid=False,
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture(scope="function")
def certificate_ready(db_session: Session, student: Student) -> CertificateReady:
    ready = CertificateReady(matric=student.matric)
    db_session.add(ready)
    db_session.commit()
    return ready


@pytest.fixture(scope="function")
def student_session(student: Student) -> ClearanceSession:
    return ClearanceSession(matric=student.matric, role=UserRole.STUDENT, email=student.email)


@pytest.fixture(scope="function")
def other_session(other_student: Student) -> ClearanceSession:
    return ClearanceSession(matric=other_student.matric, role=UserRole.STUDENT)


@pytest.fixture(scope="function")
def admin_session(admin: Student) -> ClearanceSession:
    return ClearanceSession(matric=admin.matric, role=UserRole.ADMIN, email=admin.email)


@pytest.fixture(scope="function")
def service(db_session: Session, blob_store: LocalStorageAdapter) -> ClearanceService:
    return ClearanceService(db_session, blob_store, get_settings())


@pytest.fixture(scope="function")
def readiness(db_session: Session) -> ReadinessAggregator:
    return ReadinessAggregator(db_session)


@pytest.fixture(scope="function")
def client(db_session: Session, blob_store: LocalStorageAdapter):
    """Create an unauthenticated test client.

    Returns a FastAPI TestClient wired to the test database and blob store.
    Useful for testing public endpoints and auth flow.
    """
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _client_for(account: Student) -> TestClient:
    from main import app

    test_client = TestClient(app)
    test_client.headers.update(auth_headers(account.matric, account.role, account.email))
    return test_client


@pytest.fixture(scope="function")
def student_client(client: TestClient, student: Student) -> TestClient:
    """Create a test client authenticated as the student."""
    return _client_for(student)


@pytest.fixture(scope="function")
def other_student_client(client: TestClient, other_student: Student) -> TestClient:
    """Create a test client authenticated as a different student."""
    return _client_for(other_student)


@pytest.fixture(scope="function")
def admin_client(client: TestClient, admin: Student) -> TestClient:
    """Create a test client authenticated as the administrator."""
    return _client_for(admin)
