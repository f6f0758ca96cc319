"""
Referral earnings management module.

Rolls commission rows up into per-level claimed/unclaimed summaries and
computes the claimable balance.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.repositories.commission_repository import (
    CommissionRepository,
)
from referral_engine.repositories.user_repository import UserRepository
from referral_engine.utils.money import MONEY, ZERO


@dataclass(frozen=True)
class EarningsBreakdown:
    """Earnings from one source trader at one level."""

    source_user_id: int
    level: int
    total_earned: Decimal
    claimed: Decimal
    unclaimed: Decimal

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "user_id": self.source_user_id,
            "level": self.level,
            "total_earned": MONEY.to_wire(self.total_earned),
            "claimed": MONEY.to_wire(self.claimed),
            "unclaimed": MONEY.to_wire(self.unclaimed),
        }


@dataclass(frozen=True)
class LevelEarnings:
    """Earnings of one level with subtotals."""

    level: int
    earnings: list[EarningsBreakdown]
    level_total: Decimal
    level_claimed: Decimal
    level_unclaimed: Decimal

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "level": self.level,
            "earnings": [entry.to_dict() for entry in self.earnings],
            "level_total": MONEY.to_wire(self.level_total),
            "level_claimed": MONEY.to_wire(self.level_claimed),
            "level_unclaimed": MONEY.to_wire(self.level_unclaimed),
        }


@dataclass(frozen=True)
class EarningsSummary:
    """Earnings across all levels."""

    by_level: list[LevelEarnings] = field(default_factory=list)
    grand_total: Decimal = ZERO
    total_claimed: Decimal = ZERO
    total_unclaimed: Decimal = ZERO

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "by_level": [level.to_dict() for level in self.by_level],
            "grand_total": MONEY.to_wire(self.grand_total),
            "total_claimed": MONEY.to_wire(self.total_claimed),
            "total_unclaimed": MONEY.to_wire(self.total_unclaimed),
        }


@dataclass(frozen=True)
class ClaimableAmount:
    """
    Balance a user may claim.

    Commission comes from unclaimed commission rows; cashback is the
    running total snapshot, it has no claimed/unclaimed ledger.
    """

    commission: Decimal
    cashback: Decimal
    commission_ids: tuple[int, ...] = ()

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "commission": MONEY.to_wire(self.commission),
            "cashback": MONEY.to_wire(self.cashback),
        }


class ReferralEarningsManager:
    """Manages referral earnings operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize earnings manager."""
        self.session = session
        self.commission_repo = CommissionRepository(session)
        self.user_repo = UserRepository(session)

    async def earnings_for(
        self,
        user_id: int,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> EarningsSummary:
        """
        Aggregate a user's commissions.

        Rows are grouped by (source user, level); groups are ordered by
        level ascending, then total earned descending, then source user ID.

        Args:
            user_id: Beneficiary user ID
            start_date: Inclusive lower bound on commission creation time
            end_date: Inclusive upper bound on commission creation time

        Returns:
            EarningsSummary with per-level subtotals and grand totals
        """
        rows = await self.commission_repo.get_earning_rows(
            user_id, start_date=start_date, end_date=end_date
        )

        # (source_user_id, level) -> ([claimed amounts], [unclaimed amounts])
        groups: dict[tuple[int, int], tuple[list, list]] = defaultdict(
            lambda: ([], [])
        )
        for row in rows:
            claimed, unclaimed = groups[(row.source_user_id, row.level)]
            target = claimed if row.is_claimed else unclaimed
            target.append(MONEY.parse(row.amount))

        groups_by_level: dict[int, list[EarningsBreakdown]] = defaultdict(list)
        for (source_user_id, level), (claimed, unclaimed) in groups.items():
            group_claimed = MONEY.sum(claimed)
            group_unclaimed = MONEY.sum(unclaimed)
            groups_by_level[level].append(
                EarningsBreakdown(
                    source_user_id=source_user_id,
                    level=level,
                    total_earned=MONEY.add(group_claimed, group_unclaimed),
                    claimed=group_claimed,
                    unclaimed=group_unclaimed,
                )
            )

        by_level: list[LevelEarnings] = []
        for level in sorted(groups_by_level):
            earnings = sorted(
                groups_by_level[level],
                key=lambda e: (-e.total_earned, e.source_user_id),
            )
            by_level.append(
                LevelEarnings(
                    level=level,
                    earnings=earnings,
                    level_total=MONEY.sum(e.total_earned for e in earnings),
                    level_claimed=MONEY.sum(e.claimed for e in earnings),
                    level_unclaimed=MONEY.sum(e.unclaimed for e in earnings),
                )
            )

        summary = EarningsSummary(
            by_level=by_level,
            grand_total=MONEY.sum(lvl.level_total for lvl in by_level),
            total_claimed=MONEY.sum(lvl.level_claimed for lvl in by_level),
            total_unclaimed=MONEY.sum(lvl.level_unclaimed for lvl in by_level),
        )

        logger.debug(
            "Earnings aggregated",
            extra={
                "user_id": user_id,
                "rows": len(rows),
                "grand_total": MONEY.to_wire(summary.grand_total),
            },
        )

        return summary

    async def claimable_amount(self, user_id: int) -> ClaimableAmount:
        """
        Get the user's claimable commission and cashback.

        Args:
            user_id: User ID

        Returns:
            ClaimableAmount (zeros for an unknown user)
        """
        rows = await self.commission_repo.get_unclaimed(user_id)
        commission = MONEY.sum(MONEY.parse(row.amount) for row in rows)

        user = await self.user_repo.get_by_id(user_id)
        cashback = (
            MONEY.parse(str(user.total_cashback_earned))
            if user is not None and user.total_cashback_earned is not None
            else ZERO
        )

        return ClaimableAmount(
            commission=commission,
            cashback=cashback,
            commission_ids=tuple(row.id for row in rows),
        )
