"""
Referral services package.

Contains modular services for the referral directory:
- code_generator: Referral code drawing
- chain_manager: Upward traversal (ancestors, depth)
- network_manager: Downline tree building
- earnings_manager: Earnings aggregation and claimable balances
"""

from referral_engine.services.referral.chain_manager import (
    AncestorEntry,
    ReferralChainManager,
)
from referral_engine.services.referral.code_generator import (
    CodeGenerator,
    generate_referral_code,
    is_well_formed_code,
)
from referral_engine.services.referral.earnings_manager import (
    ClaimableAmount,
    EarningsBreakdown,
    EarningsSummary,
    LevelEarnings,
    ReferralEarningsManager,
)
from referral_engine.services.referral.network_manager import (
    NetworkNode,
    NetworkResult,
    ReferralNetworkManager,
    flatten_network,
)


__all__ = [
    # Codes
    "CodeGenerator",
    "generate_referral_code",
    "is_well_formed_code",
    # Managers
    "ReferralChainManager",
    "ReferralNetworkManager",
    "ReferralEarningsManager",
    # Results
    "AncestorEntry",
    "NetworkNode",
    "NetworkResult",
    "flatten_network",
    "EarningsBreakdown",
    "LevelEarnings",
    "EarningsSummary",
    "ClaimableAmount",
]
