"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from referral_engine.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)

# Claims
from referral_engine.services.claim_service import ClaimService

# Referral Services
from referral_engine.services.referral_service import (
    EarningsReport,
    ReferralService,
    UserOverview,
)

# Trades
from referral_engine.services.trade_service import (
    PaginatedResult,
    TradeResult,
    TradeService,
)


__all__ = [
    # Base
    "BaseService",
    "log_operation",
    "transaction",
    # Core Services
    "ReferralService",
    "TradeService",
    "ClaimService",
    # Results
    "EarningsReport",
    "UserOverview",
    "TradeResult",
    "PaginatedResult",
]
