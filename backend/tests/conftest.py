"""
Pytest configuration and fixtures for certificate verification tests.

This module provides shared fixtures for database, authentication, test client,
and common test data.
"""

import os
import sys
from datetime import date
from typing import AsyncGenerator, Callable, Dict
from pathlib import Path

# Settings are read at import time; point them at the test database first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_USERNAME"] = ""
os.environ["ADMIN_PASSWORD"] = ""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add parent directory to path to import certverify modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from certverify.main import app
from certverify.database import Base, get_db
from certverify.models.admin import Admin, AdminRole, PERMISSION_FLAGS
from certverify.models.certificate import Certificate, Program, ProgramCategory
from certverify.services.auth_service import token_claims
from certverify.services.certificate_service import make_verification_hash
from certverify.utils.security import hash_password, create_access_token

TEST_PASSWORD = "Passw0rd!"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def async_engine():
    """
    Create async database engine for tests.

    Uses in-memory SQLite with StaticPool to ensure all connections
    share the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(async_engine) -> async_sessionmaker:
    """Session factory bound to the test engine, for tests that need several sessions."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide database session for tests.

    Creates a new session for each test and rolls back after the test.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide HTTP test client.

    Overrides the database session dependency so that requests and the test
    body share one session and see the same data.
    """
    async def override_get_db():
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()


# ============================================================================
# Admin Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def make_admin(db_session: AsyncSession) -> Callable:
    """
    Factory for admin accounts.

    Keyword arguments override any Admin column, e.g.
    `await make_admin("editor", can_delete_certificates=True)`.
    """
    async def _make_admin(
        username: str,
        role: AdminRole = AdminRole.ADMIN,
        password: str = TEST_PASSWORD,
        **fields
    ) -> Admin:
        fields.setdefault("is_active", True)
        admin = Admin(
            username=username,
            email=f"{username}@test.com",
            full_name=username.title(),
            role=role.value,
            password_hash=hash_password(password),
            **fields
        )
        db_session.add(admin)
        await db_session.commit()
        await db_session.refresh(admin)
        return admin

    return _make_admin


@pytest_asyncio.fixture
async def super_admin(make_admin) -> Admin:
    """Super admin holding every permission flag."""
    return await make_admin(
        "root",
        role=AdminRole.SUPER_ADMIN,
        **{flag: True for flag in PERMISSION_FLAGS}
    )


@pytest_asyncio.fixture
async def admin_user(make_admin) -> Admin:
    """Admin with the default flags (no delete, no admin management)."""
    return await make_admin("editor")


@pytest_asyncio.fixture
async def moderator_user(make_admin) -> Admin:
    return await make_admin("moderator", role=AdminRole.MODERATOR)


@pytest_asyncio.fixture
async def viewer_user(make_admin) -> Admin:
    """Viewer with every certificate permission switched off."""
    return await make_admin(
        "viewer",
        role=AdminRole.VIEWER,
        can_create_certificates=False,
        can_edit_certificates=False,
        can_revoke_certificates=False,
        can_view_analytics=False
    )


# ============================================================================
# Authentication Helpers
# ============================================================================

def bearer(admin: Admin) -> Dict[str, str]:
    """Authorization header carrying a fresh access token for admin."""
    return {"Authorization": f"Bearer {create_access_token(token_claims(admin))}"}


@pytest.fixture
def auth_headers() -> Callable[[Admin], Dict[str, str]]:
    return bearer


# ============================================================================
# Certificate Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def make_certificate(db_session: AsyncSession) -> Callable:
    """Factory for certificate records stored directly in the database."""
    async def _make_certificate(
        certificate_id: str = "2501001",
        recipient_name: str = "Ahmed Hassan",
        program: Program = Program.WEB_DEVELOPMENT,
        **fields
    ) -> Certificate:
        email = fields.pop("recipient_email", f"{certificate_id}@test.com")
        certificate = Certificate(
            certificate_id=certificate_id,
            recipient_name=recipient_name,
            recipient_email=email,
            program=program.value,
            program_category=fields.pop("program_category", certificate_id[2:4]),
            award_date=fields.pop("award_date", date(2025, 1, 15)),
            verification_hash=make_verification_hash(certificate_id, email),
            issued_by="STEM CS Club",
            ip_addresses=[],
            **fields
        )
        db_session.add(certificate)
        await db_session.commit()
        await db_session.refresh(certificate)
        return certificate

    return _make_certificate


@pytest_asyncio.fixture
async def sample_certificate(make_certificate) -> Certificate:
    return await make_certificate()


@pytest.fixture
def certificate_payload() -> dict:
    """Valid body for POST /api/admin/certificates."""
    return {
        "certificate_id": "2502001",
        "recipient_name": "Mohamed Ali",
        "recipient_email": "Mohamed.Ali@Example.org",
        "program": Program.FULL_STACK.value,
        "program_category": ProgramCategory.BOOTCAMP.value,
        "award_date": "2025-02-10",
        "notes": "Top of the cohort",
    }


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """
    Configure pytest markers.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "security: mark test as a security test"
    )
