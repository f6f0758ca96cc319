"""
Model enumerations.

String enums stored as plain VARCHAR values.
"""

from enum import StrEnum


class FeeTier(StrEnum):
    """Per-user fee tier."""

    BASE = "BASE"
    REDUCED = "REDUCED"


class Chain(StrEnum):
    """Supported settlement chains."""

    ARBITRUM = "ARBITRUM"
    SOLANA = "SOLANA"


class TradeSide(StrEnum):
    """Trade direction."""

    BUY = "BUY"
    SELL = "SELL"


class TradeStatus(StrEnum):
    """Distribution state of a recorded trade."""

    CREATED = "CREATED"  # Row committed, commissions not yet distributed
    DISTRIBUTED = "DISTRIBUTED"


class LinkStatus(StrEnum):
    """State of a user's entry in its referrer's child list."""

    CREATED = "CREATED"  # Parent pointer set, child list not yet appended
    LINKED = "LINKED"


class ClaimStatus(StrEnum):
    """Claim lifecycle status."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ClaimType(StrEnum):
    """What a claim withdraws."""

    COMMISSION = "COMMISSION"
    CASHBACK = "CASHBACK"


class CommissionStructureType(StrEnum):
    """Discriminator of a custom commission structure."""

    KOL_DIRECT = "KOL_DIRECT"
    KOL_CUSTOM = "KOL_CUSTOM"
    WAIVED = "WAIVED"
