"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings(); tests never touch PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", "")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
import pytest_asyncio

from affiliate.config.database import create_engine, create_session_maker
from affiliate.models import AffiliateProfile, Base
from affiliate.services import AffiliateService
from tests.helpers import FakeOrderLookup, FakeProductLookup, FakeUserLookup


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    db_engine = create_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Async session bound to the test database."""
    session_maker = create_session_maker(engine)
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
def users():
    """Fake user collaborator."""
    return FakeUserLookup()


@pytest.fixture
def orders():
    """Fake order collaborator."""
    return FakeOrderLookup()


@pytest.fixture
def products():
    """Fake product collaborator with one eligible product (id 100)."""
    lookup = FakeProductLookup()
    lookup.add(100)
    return lookup


@pytest.fixture
def service(session, users, orders, products):
    """AffiliateService wired to fake collaborators and the settings table."""
    return AffiliateService(session, users, orders, products)


@pytest_asyncio.fixture
async def enabled_program(service):
    """
    Enable the program: 10% commission, immediate availability.

    Returns:
        Stored AffiliateSetting
    """
    return await service.update_affiliate_setting(
        {"enabled": True, "commission_rate": "10", "confirm_days": 0}
    )


@pytest_asyncio.fixture
async def affiliate(service, users, enabled_program) -> AffiliateProfile:
    """Active profile owned by user 1."""
    users.add(1)
    return await service.open_affiliate(1)
