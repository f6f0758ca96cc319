"""
User repository.

Data access layer for User model.
"""

from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.models.enums import LinkStatus
from referral_engine.models.user import User
from referral_engine.repositories.base import BaseRepository


# Running totals that may be changed through increment_balances()
BALANCE_FIELDS = frozenset({
    "total_xp_earned",
    "total_commission_earned",
    "total_cashback_earned",
})


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_referral_code(
        self, referral_code: str
    ) -> User | None:
        """
        Get user by referral code.

        Args:
            referral_code: Referral code

        Returns:
            User or None
        """
        return await self.get_by(referral_code=referral_code)

    async def referral_code_exists(self, referral_code: str) -> bool:
        """
        Check whether a referral code is taken.

        Args:
            referral_code: Candidate code

        Returns:
            True if a user already owns the code
        """
        stmt = select(User.id).where(User.referral_code == referral_code)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def get_by_ids(self, user_ids: Sequence[int]) -> dict[int, User]:
        """
        Get several users in one query.

        Args:
            user_ids: User IDs

        Returns:
            Dict mapping user ID to user (missing IDs are absent)
        """
        if not user_ids:
            return {}

        stmt = select(User).where(User.id.in_(list(user_ids)))
        result = await self.session.execute(stmt)
        return {user.id: user for user in result.scalars().all()}

    async def get_children_of(
        self, referrer_ids: Sequence[int]
    ) -> list[User]:
        """
        Get direct referrals of several users via the parent pointer.

        Membership comes from referrer_id, so users whose child-list
        append never happened are still returned.

        Args:
            referrer_ids: Parent user IDs

        Returns:
            Children ordered by join time, then ID
        """
        if not referrer_ids:
            return []

        stmt = (
            select(User)
            .where(User.referrer_id.in_(list(referrer_ids)))
            .order_by(User.created_at, User.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def increment_balances(
        self, user_id: int, **deltas: Decimal
    ) -> bool:
        """
        Atomically add deltas to running totals.

        Issues a single UPDATE ... SET col = col + :delta, so concurrent
        increments never lose an update.

        Args:
            user_id: User ID
            **deltas: Running total name -> amount to add

        Returns:
            True if the user row was updated

        Raises:
            ValueError: If a field is not a running total
        """
        unknown = set(deltas) - BALANCE_FIELDS
        if unknown:
            raise ValueError(f"Not a balance field: {sorted(unknown)}")

        values = {
            name: getattr(User, name) + amount
            for name, amount in deltas.items()
        }
        stmt = update(User).where(User.id == user_id).values(**values)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def find_unlinked(self, limit: int = 100) -> list[User]:
        """
        Find users whose child-list append did not complete.

        Args:
            limit: Max number of results

        Returns:
            Users still in CREATED link state, oldest first
        """
        stmt = (
            select(User)
            .where(User.link_status == LinkStatus.CREATED)
            .order_by(User.created_at, User.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_newest_first(self) -> list[User]:
        """
        Get all users, newest first.

        Returns:
            List of users
        """
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
