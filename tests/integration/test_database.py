"""
Integration tests for database setup.

Tests cover:
- Schema creation and re-running it
- Session factory bound to a fresh engine
"""

import pytest
from sqlalchemy import inspect

from referral_engine.database import (
    create_engine,
    create_session_maker,
    get_session_maker,
    init_database,
)
from referral_engine.services import ReferralService


@pytest.mark.asyncio
async def test_init_database_creates_tables(tmp_path):
    """All tables exist after init; a second run is a no-op."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'engine.db'}")
    try:
        await init_database(engine)
        await init_database(engine)

        async with engine.connect() as conn:
            tables = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )
    finally:
        await engine.dispose()

    assert set(tables) >= {
        "users",
        "direct_referrals",
        "trades",
        "commissions",
        "claims",
    }


@pytest.mark.asyncio
async def test_session_maker_round_trip(tmp_path):
    """Sessions from the factory persist users across sessions."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'engine.db'}")
    try:
        await init_database(engine)
        session_maker = create_session_maker(engine)

        async with session_maker() as session:
            root = await ReferralService(session).generate_code()
            root_id = root.id

        async with session_maker() as session:
            found = await ReferralService(session).find_user(root_id)
    finally:
        await engine.dispose()

    assert found is not None
    assert found.referral_code == root.referral_code


def test_get_session_maker_cached():
    """The process-wide factory is built once."""
    assert get_session_maker() is get_session_maker()
