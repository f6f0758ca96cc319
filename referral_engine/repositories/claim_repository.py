"""
Claim repository.

Data access layer for Claim model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.models.claim import Claim
from referral_engine.repositories.base import BaseRepository


class ClaimRepository(BaseRepository[Claim]):
    """Claim repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize claim repository."""
        super().__init__(Claim, session)

    async def get_by_user(self, user_id: int) -> list[Claim]:
        """
        Get user's claims, newest first.

        Args:
            user_id: User ID

        Returns:
            List of claims
        """
        stmt = (
            select(Claim)
            .where(Claim.user_id == user_id)
            .order_by(Claim.created_at.desc(), Claim.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
