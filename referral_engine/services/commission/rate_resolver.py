"""
Commission rate resolution.

Maps (level, custom structure) to the rate an ancestor earns on a trade fee.
Override order: commissions waived > structure variant > standard tiers.
"""

from decimal import Decimal

from referral_engine.config.business_constants import (
    COMMISSION_RATES,
    KOL_DIRECT_RATE,
)
from referral_engine.services.commission.structures import (
    CommissionStructure,
    KolCustom,
    KolDirect,
    Waived,
)


NO_RATE = Decimal("0")


def standard_rate_for_level(level: int) -> Decimal:
    """Standard tier rate (0.30 / 0.03 / 0.02), 0 for any other level."""
    return COMMISSION_RATES.get(level, NO_RATE)


def rate_for_level(
    level: int, structure: CommissionStructure | None = None
) -> Decimal:
    """
    Resolve the commission rate for an ancestor.

    Args:
        level: Ancestor's level above the trader (1 = direct referrer)
        structure: Ancestor's custom commission structure, if any

    Returns:
        Rate as Decimal (0 means the ancestor earns nothing)
    """
    if structure is not None and structure.commissions_waived:
        return NO_RATE

    match structure:
        case None:
            pass
        case KolDirect():
            return KOL_DIRECT_RATE if level == 1 else NO_RATE
        case KolCustom():
            override = structure.rate_override(level)
            if override is not None:
                return override
        case Waived():
            return NO_RATE

    return standard_rate_for_level(level)
