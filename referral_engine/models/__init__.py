"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from referral_engine.models.base import Base
from referral_engine.models.claim import Claim
from referral_engine.models.commission import Commission
from referral_engine.models.direct_referral import DirectReferral
from referral_engine.models.enums import (
    Chain,
    ClaimStatus,
    ClaimType,
    CommissionStructureType,
    FeeTier,
    LinkStatus,
    TradeSide,
    TradeStatus,
)
from referral_engine.models.trade import Trade
from referral_engine.models.user import User

__all__ = [
    # Base
    "Base",
    # Enums
    "Chain",
    "ClaimStatus",
    "ClaimType",
    "CommissionStructureType",
    "FeeTier",
    "LinkStatus",
    "TradeSide",
    "TradeStatus",
    # Core Models
    "User",
    "DirectReferral",
    "Trade",
    "Commission",
    "Claim",
]
