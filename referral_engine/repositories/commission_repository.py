"""
Commission repository.

Data access layer for Commission model.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Row, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.models.commission import Commission
from referral_engine.repositories.base import BaseRepository


class CommissionRepository(BaseRepository[Commission]):
    """Commission repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission repository."""
        super().__init__(Commission, session)

    async def get_by_trade(self, trade_id: int) -> list[Commission]:
        """
        Get commissions created for a trade, by level.

        Args:
            trade_id: Trade ID

        Returns:
            List of commissions
        """
        stmt = (
            select(Commission)
            .where(Commission.trade_id == trade_id)
            .order_by(Commission.level)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_earning_rows(
        self,
        user_id: int,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[Row[Any]]:
        """
        Get the columns needed for earnings aggregation.

        Optimized to avoid fetching full objects. Amounts stay strings;
        summing happens with the money policy, never in SQL floats.

        Args:
            user_id: Beneficiary user ID
            start_date: Inclusive lower bound on created_at
            end_date: Inclusive upper bound on created_at

        Returns:
            Rows of (source_user_id, level, amount, is_claimed)
        """
        stmt = select(
            Commission.source_user_id,
            Commission.level,
            Commission.amount,
            Commission.is_claimed,
        ).where(Commission.user_id == user_id)

        if start_date is not None:
            stmt = stmt.where(Commission.created_at >= start_date)
        if end_date is not None:
            stmt = stmt.where(Commission.created_at <= end_date)

        result = await self.session.execute(stmt.order_by(Commission.id))
        return list(result.all())

    async def get_unclaimed(self, user_id: int) -> list[Row[Any]]:
        """
        Get unclaimed commission IDs and amounts.

        Args:
            user_id: Beneficiary user ID

        Returns:
            Rows of (id, amount)
        """
        stmt = (
            select(Commission.id, Commission.amount)
            .where(
                Commission.user_id == user_id,
                Commission.is_claimed == False,  # noqa: E712
            )
            .order_by(Commission.id)
        )
        result = await self.session.execute(stmt)
        return list(result.all())

    async def get_amounts_by_token(self) -> list[Row[Any]]:
        """
        Get every commission's beneficiary, token and amount.

        Returns:
            Rows of (user_id, token, amount)
        """
        stmt = select(
            Commission.user_id, Commission.token, Commission.amount
        ).order_by(Commission.id)
        result = await self.session.execute(stmt)
        return list(result.all())

    async def mark_claimed(
        self,
        commission_ids: Sequence[int],
        claimed_at: datetime,
        merkle_root: str | None = None,
        merkle_proof: list[str] | None = None,
    ) -> int:
        """
        Mark commissions as claimed.

        Only unclaimed rows are touched, so the transition stays forward-only.

        Args:
            commission_ids: Commission IDs
            claimed_at: Claim completion time
            merkle_root: Optional merkle root
            merkle_proof: Optional merkle proof

        Returns:
            Number of rows updated
        """
        if not commission_ids:
            return 0

        stmt = (
            update(Commission)
            .where(
                Commission.id.in_(list(commission_ids)),
                Commission.is_claimed == False,  # noqa: E712
            )
            .values(
                is_claimed=True,
                claimed_at=claimed_at,
                merkle_root=merkle_root,
                merkle_proof=merkle_proof,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount
