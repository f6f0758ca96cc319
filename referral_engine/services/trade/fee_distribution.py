"""
Fee distribution module.

Splits a trade fee into trader cashback, platform treasury and referrer
commissions. The arithmetic lives in the pure ``calculate_distribution``;
``FeeDistributionEngine`` only loads the trader's ancestors for it.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.config.business_constants import (
    CASHBACK_RATE,
    FEE_TIERS,
    TREASURY_RATE,
)
from referral_engine.models.user import User
from referral_engine.services.commission.rate_resolver import rate_for_level
from referral_engine.services.commission.structures import (
    CommissionStructure,
    parse_commission_structure,
)
from referral_engine.services.referral.chain_manager import (
    ReferralChainManager,
)
from referral_engine.utils.exceptions import InvalidInputError
from referral_engine.utils.money import MONEY, ZERO


# (level, ancestor user ID, ancestor's custom structure)
AncestorRate = tuple[int, int, CommissionStructure | None]


@dataclass(frozen=True)
class CommissionBreakdown:
    """Commission owed to one ancestor."""

    level: int
    user_id: int
    amount: Decimal
    rate: Decimal

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "level": self.level,
            "user_id": self.user_id,
            "amount": MONEY.to_wire(self.amount),
            "rate": MONEY.to_wire(self.rate),
        }


@dataclass(frozen=True)
class FeeDistribution:
    """Split of one trade fee."""

    trader_id: int
    volume: Decimal
    fee_rate: Decimal
    total_fee: Decimal
    cashback: Decimal
    treasury: Decimal
    chain: str
    token: str
    commissions: list[CommissionBreakdown] = field(default_factory=list)

    @property
    def total_commissions(self) -> Decimal:
        """Sum of commission amounts."""
        return MONEY.sum(c.amount for c in self.commissions)

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "trader_id": self.trader_id,
            "total_fee": MONEY.to_wire(self.total_fee),
            "cashback": MONEY.to_wire(self.cashback),
            "treasury": MONEY.to_wire(self.treasury),
            "commissions": [c.to_dict() for c in self.commissions],
            "total_commissions": MONEY.to_wire(self.total_commissions),
            "chain": self.chain,
            "token": self.token,
        }


def fee_rate_for_tier(fee_tier: str) -> Decimal:
    """
    Get the fee rate of a tier.

    Args:
        fee_tier: BASE or REDUCED

    Returns:
        Fee rate

    Raises:
        InvalidInputError: If the tier is unknown
    """
    try:
        return FEE_TIERS[fee_tier]
    except KeyError as e:
        raise InvalidInputError(f"Unknown fee tier: {fee_tier}") from e


def calculate_distribution(
    trader_id: int,
    fee_tier: str,
    structure: CommissionStructure | None,
    volume: Decimal,
    ancestors: Sequence[AncestorRate],
    chain: str,
    token: str,
) -> FeeDistribution:
    """
    Compute the fee split of a trade.

    Every product is truncated to 18 places; nothing is rescaled, so
    cashback + treasury + commissions never exceeds the fee.

    Args:
        trader_id: Trader user ID
        fee_tier: Trader's fee tier
        structure: Trader's custom structure (only fees_waived matters)
        volume: Trade volume
        ancestors: Trader's ancestors as (level, user_id, structure)
        chain: Settlement chain
        token: Fee token

    Returns:
        FeeDistribution
    """
    fee_rate = fee_rate_for_tier(fee_tier)

    def zero_distribution() -> FeeDistribution:
        return FeeDistribution(
            trader_id=trader_id,
            volume=volume,
            fee_rate=fee_rate,
            total_fee=ZERO,
            cashback=ZERO,
            treasury=ZERO,
            chain=chain,
            token=token,
        )

    if structure is not None and structure.fees_waived:
        return zero_distribution()

    total_fee = MONEY.multiply(volume, fee_rate)
    if total_fee.is_zero():
        return zero_distribution()

    commissions = []
    for level, user_id, ancestor_structure in ancestors:
        rate = rate_for_level(level, ancestor_structure)
        if rate > 0:
            commissions.append(
                CommissionBreakdown(
                    level=level,
                    user_id=user_id,
                    amount=MONEY.multiply(total_fee, rate),
                    rate=rate,
                )
            )

    return FeeDistribution(
        trader_id=trader_id,
        volume=volume,
        fee_rate=fee_rate,
        total_fee=total_fee,
        cashback=MONEY.multiply(total_fee, CASHBACK_RATE),
        treasury=MONEY.multiply(total_fee, TREASURY_RATE),
        chain=chain,
        token=token,
        commissions=commissions,
    )


class FeeDistributionEngine:
    """Computes fee distributions for persisted traders."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize fee distribution engine."""
        self.session = session
        self.chain_manager = ReferralChainManager(session)

    async def distribute(
        self, trader: User, volume: Decimal, chain: str, token: str
    ) -> FeeDistribution:
        """
        Compute the fee split of a trade by ``trader``.

        The ancestor walk is skipped when the trader's fees are waived.

        Args:
            trader: Trading user
            volume: Positive trade volume
            chain: Settlement chain
            token: Fee token

        Returns:
            FeeDistribution
        """
        structure = parse_commission_structure(
            trader.custom_commission_structure
        )

        ancestors: list[AncestorRate] = []
        if structure is None or not structure.fees_waived:
            ancestors = [
                (
                    level,
                    ancestor.id,
                    parse_commission_structure(
                        ancestor.custom_commission_structure
                    ),
                )
                for level, ancestor in await self.chain_manager.get_ancestors(
                    trader
                )
            ]

        distribution = calculate_distribution(
            trader_id=trader.id,
            fee_tier=trader.fee_tier,
            structure=structure,
            volume=volume,
            ancestors=ancestors,
            chain=chain,
            token=token,
        )

        logger.debug(
            "Fee distribution calculated",
            extra={
                "trader_id": trader.id,
                "total_fee": MONEY.to_wire(distribution.total_fee),
                "commissions": len(distribution.commissions),
            },
        )

        return distribution
