"""
Trade repository.

Data access layer for Trade model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.models.trade import Trade
from referral_engine.repositories.base import BaseRepository


class TradeRepository(BaseRepository[Trade]):
    """Trade repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize trade repository."""
        super().__init__(Trade, session)

    async def get_by_user_paginated(
        self, user_id: int, page: int = 1, per_page: int = 20
    ) -> tuple[list[Trade], int]:
        """
        Get trader's trades, newest first.

        Args:
            user_id: Trader user ID
            page: Page number (1-indexed)
            per_page: Items per page

        Returns:
            Tuple of (trades, total_count)
        """
        return await self.find_paginated(
            page=page,
            per_page=per_page,
            order_by=(Trade.created_at.desc(), Trade.id.desc()),
            user_id=user_id,
        )

    async def list_newest_first(
        self, user_id: int | None = None
    ) -> list[Trade]:
        """
        Get all trades, optionally for one trader, newest first.

        Args:
            user_id: Optional trader filter

        Returns:
            List of trades
        """
        stmt = select(Trade)
        if user_id is not None:
            stmt = stmt.where(Trade.user_id == user_id)
        stmt = stmt.order_by(Trade.created_at.desc(), Trade.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_undistributed(self, limit: int = 100) -> list[Trade]:
        """
        Find trades whose commission distribution did not complete.

        Args:
            limit: Max number of results

        Returns:
            Trades with commissions_distributed=False, oldest first
        """
        stmt = (
            select(Trade)
            .where(Trade.commissions_distributed == False)  # noqa: E712
            .order_by(Trade.created_at, Trade.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
