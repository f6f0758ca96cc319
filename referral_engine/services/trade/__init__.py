"""
Trade services package.

Contains the fee distribution engine used by the trade ledger.
"""

from referral_engine.services.trade.fee_distribution import (
    CommissionBreakdown,
    FeeDistribution,
    FeeDistributionEngine,
    calculate_distribution,
    fee_rate_for_tier,
)


__all__ = [
    "CommissionBreakdown",
    "FeeDistribution",
    "FeeDistributionEngine",
    "calculate_distribution",
    "fee_rate_for_tier",
]
