"""
Direct referral repository.

Data access layer for DirectReferral model (referrer child lists).
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.models.direct_referral import DirectReferral
from referral_engine.repositories.base import BaseRepository


class DirectReferralRepository(BaseRepository[DirectReferral]):
    """Direct referral repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize direct referral repository."""
        super().__init__(DirectReferral, session)

    async def append(
        self, referrer_id: int, referral_id: int
    ) -> DirectReferral:
        """
        Append a child to the referrer's list.

        Args:
            referrer_id: Parent user ID
            referral_id: Child user ID

        Returns:
            Created link row
        """
        return await self.create(
            referrer_id=referrer_id, referral_id=referral_id
        )

    async def get_child_ids(self, referrer_id: int) -> list[int]:
        """
        Get the referrer's child list in append order.

        Optimized to avoid fetching full objects - only returns user IDs.

        Args:
            referrer_id: Parent user ID

        Returns:
            Child user IDs
        """
        stmt = (
            select(DirectReferral.referral_id)
            .where(DirectReferral.referrer_id == referrer_id)
            .order_by(DirectReferral.id)
        )
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all()]
