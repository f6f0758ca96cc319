"""
Custom commission structures.

A user's custom structure is stored as a tagged JSON document keyed by
``type``. It is decoded into one frozen dataclass per variant so rate
resolution can match on the variant exhaustively.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from referral_engine.models.enums import CommissionStructureType
from referral_engine.utils.exceptions import InvalidInputError
from referral_engine.utils.money import MONEY


@dataclass(frozen=True)
class KolDirect:
    """Key opinion leader paid at level 1 only."""

    fees_waived: bool = False
    commissions_waived: bool = False


@dataclass(frozen=True)
class KolCustom:
    """Key opinion leader with per-level rate overrides."""

    level1_rate: Decimal | None = None
    level2_rate: Decimal | None = None
    level3_rate: Decimal | None = None
    fees_waived: bool = False
    commissions_waived: bool = False

    def rate_override(self, level: int) -> Decimal | None:
        """Override for level, or None to fall back to standard tiers."""
        return {
            1: self.level1_rate,
            2: self.level2_rate,
            3: self.level3_rate,
        }.get(level)


@dataclass(frozen=True)
class Waived:
    """Earns no commissions."""

    fees_waived: bool = False
    commissions_waived: bool = False


CommissionStructure = KolDirect | KolCustom | Waived


def _parse_rate(raw: dict[str, Any], key: str) -> Decimal | None:
    value = raw.get(key)
    if value is None or value == "":
        return None

    rate = MONEY.parse(value)
    if rate < 0 or rate > 1:
        raise InvalidInputError(f"{key} must be between 0 and 1")
    return rate


def parse_commission_structure(
    raw: dict[str, Any] | None,
) -> CommissionStructure | None:
    """
    Decode a stored custom structure document.

    Args:
        raw: Document with a ``type`` discriminator, or None

    Returns:
        Structure variant, or None when the user has no custom structure

    Raises:
        InvalidInputError: If the type is unknown or a rate is malformed
    """
    if not raw:
        return None

    try:
        kind = CommissionStructureType(raw.get("type"))
    except ValueError as e:
        raise InvalidInputError(
            f"Unknown commission structure type: {raw.get('type')!r}"
        ) from e

    fees_waived = bool(raw.get("fees_waived", False))
    commissions_waived = bool(raw.get("commissions_waived", False))

    match kind:
        case CommissionStructureType.KOL_DIRECT:
            return KolDirect(
                fees_waived=fees_waived,
                commissions_waived=commissions_waived,
            )
        case CommissionStructureType.KOL_CUSTOM:
            return KolCustom(
                level1_rate=_parse_rate(raw, "level1_rate"),
                level2_rate=_parse_rate(raw, "level2_rate"),
                level3_rate=_parse_rate(raw, "level3_rate"),
                fees_waived=fees_waived,
                commissions_waived=commissions_waived,
            )
        case CommissionStructureType.WAIVED:
            return Waived(
                fees_waived=fees_waived,
                commissions_waived=commissions_waived,
            )


def dump_commission_structure(
    structure: CommissionStructure | None,
) -> dict[str, Any] | None:
    """
    Encode a structure into its stored document.

    Args:
        structure: Structure variant or None

    Returns:
        Tagged document, or None
    """
    if structure is None:
        return None

    document: dict[str, Any] = {
        "fees_waived": structure.fees_waived,
        "commissions_waived": structure.commissions_waived,
    }

    match structure:
        case KolDirect():
            document["type"] = CommissionStructureType.KOL_DIRECT.value
        case KolCustom():
            document["type"] = CommissionStructureType.KOL_CUSTOM.value
            for level in (1, 2, 3):
                rate = structure.rate_override(level)
                if rate is not None:
                    document[f"level{level}_rate"] = MONEY.to_wire(rate)
        case Waived():
            document["type"] = CommissionStructureType.WAIVED.value

    return document
