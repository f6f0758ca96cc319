"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from referral_engine.database import create_session_maker
from referral_engine.models import Base, FeeTier, LinkStatus, User
from referral_engine.services.referral.code_generator import (
    generate_referral_code,
)


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Async session; objects stay loaded after commit."""
    session_maker = create_session_maker(engine)
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(session):
    """
    Factory inserting users directly, bypassing the referral service.

    Returns:
        Async callable (referrer=None, fee_tier=BASE, structure=None,
        link_status=LINKED, **fields) -> User
    """
    async def _make_user(
        referrer: User | None = None,
        fee_tier: str = FeeTier.BASE,
        structure: dict[str, Any] | None = None,
        link_status: str = LinkStatus.LINKED,
        **fields: Any,
    ) -> User:
        user = User(
            referral_code=generate_referral_code(),
            referrer_id=referrer.id if referrer else None,
            referral_depth=referrer.referral_depth + 1 if referrer else 0,
            fee_tier=fee_tier,
            custom_commission_structure=structure,
            link_status=link_status,
            **fields,
        )
        session.add(user)
        await session.commit()
        return user

    return _make_user
