"""
Referral chain management module.

Handles upward traversal of the referral tree: ancestor chains and depth.
"""

from dataclasses import asdict, dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.config.business_constants import MAX_REFERRAL_DEPTH
from referral_engine.models.user import User
from referral_engine.repositories.user_repository import UserRepository


@dataclass(frozen=True)
class AncestorEntry:
    """One ancestor of a user, level 1 being the direct referrer."""

    user_id: int
    level: int
    referral_code: str

    def to_dict(self) -> dict:
        """Wire representation."""
        return asdict(self)


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def get_ancestors(
        self, user: User, depth: int = MAX_REFERRAL_DEPTH
    ) -> list[tuple[int, User]]:
        """
        Walk parent pointers upward from a user.

        Stops at the root or after ``depth`` ancestors, whichever comes
        first, so the walk is bounded regardless of stored data.

        Args:
            user: Starting user (not included in the result)
            depth: Maximum number of ancestors

        Returns:
            List of (level, ancestor) starting at level 1
        """
        chain: list[tuple[int, User]] = []
        current = user
        level = 1

        while current.referrer_id is not None and level <= depth:
            referrer = await self.user_repo.get_by_id(current.referrer_id)
            if referrer is None:
                logger.warning(
                    "Dangling referrer pointer",
                    extra={
                        "user_id": current.id,
                        "referrer_id": current.referrer_id,
                    },
                )
                break

            chain.append((level, referrer))
            current = referrer
            level += 1

        return chain

    async def get_ancestor_chain(self, user: User) -> list[AncestorEntry]:
        """
        Get the user's ancestor chain.

        Args:
            user: Starting user

        Returns:
            At most MAX_REFERRAL_DEPTH entries, levels strictly increasing
            from 1
        """
        chain = [
            AncestorEntry(
                user_id=ancestor.id,
                level=level,
                referral_code=ancestor.referral_code,
            )
            for level, ancestor in await self.get_ancestors(user)
        ]

        logger.debug(
            "Referral chain retrieved",
            extra={"user_id": user.id, "chain_length": len(chain)},
        )

        return chain

    async def calculate_depth(self, user: User) -> int:
        """
        Compute a user's depth by walking the ancestor chain.

        The walk stops one step past MAX_REFERRAL_DEPTH: that is enough to
        decide whether registration under the user is allowed. The stored
        referral_depth is cross-checked and a mismatch is logged.

        Args:
            user: User whose depth to compute

        Returns:
            Number of ancestors, capped at MAX_REFERRAL_DEPTH + 1
        """
        walked = len(
            await self.get_ancestors(user, depth=MAX_REFERRAL_DEPTH + 1)
        )

        if walked != user.referral_depth:
            logger.warning(
                "Stored referral depth does not match ancestor chain",
                extra={
                    "user_id": user.id,
                    "stored_depth": user.referral_depth,
                    "walked_depth": walked,
                },
            )

        return walked
