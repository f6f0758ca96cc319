"""
Commission services package.

Contains the custom structure sum type and the rate resolver.
"""

from referral_engine.services.commission.rate_resolver import (
    rate_for_level,
    standard_rate_for_level,
)
from referral_engine.services.commission.structures import (
    CommissionStructure,
    KolCustom,
    KolDirect,
    Waived,
    dump_commission_structure,
    parse_commission_structure,
)


__all__ = [
    "CommissionStructure",
    "KolDirect",
    "KolCustom",
    "Waived",
    "parse_commission_structure",
    "dump_commission_structure",
    "rate_for_level",
    "standard_rate_for_level",
]
