"""Unit tests for custom commission structure decoding."""

from decimal import Decimal

import pytest

from referral_engine.services.commission import (
    KolCustom,
    KolDirect,
    Waived,
    dump_commission_structure,
    parse_commission_structure,
)
from referral_engine.utils.exceptions import InvalidInputError


class TestParseCommissionStructure:
    """Test decoding stored documents."""

    @pytest.mark.parametrize("raw", [None, {}])
    def test_no_structure(self, raw):
        """Missing documents mean standard tiers."""
        assert parse_commission_structure(raw) is None

    def test_kol_direct(self):
        """KOL_DIRECT decodes with default flags."""
        assert parse_commission_structure({"type": "KOL_DIRECT"}) == KolDirect()

    def test_kol_custom_rates(self):
        """KOL_CUSTOM rates decode as Decimal; missing ones stay None."""
        structure = parse_commission_structure({
            "type": "KOL_CUSTOM",
            "level1_rate": "0.4",
            "level3_rate": "0.05",
        })

        assert structure == KolCustom(
            level1_rate=Decimal("0.4"),
            level2_rate=None,
            level3_rate=Decimal("0.05"),
        )

    def test_waived_flags(self):
        """Waiver flags are read from the document."""
        structure = parse_commission_structure({
            "type": "WAIVED",
            "fees_waived": True,
        })

        assert structure == Waived(fees_waived=True, commissions_waived=False)

    def test_unknown_type(self):
        """Unknown discriminators are rejected."""
        with pytest.raises(InvalidInputError):
            parse_commission_structure({"type": "PLATINUM"})

    @pytest.mark.parametrize("rate", ["1.5", "-0.1", "abc"])
    def test_invalid_rate(self, rate):
        """Rates must be decimals within [0, 1]."""
        with pytest.raises(InvalidInputError):
            parse_commission_structure({
                "type": "KOL_CUSTOM",
                "level1_rate": rate,
            })


class TestDumpCommissionStructure:
    """Test encoding structures."""

    def test_dump_none(self):
        """No structure encodes as None."""
        assert dump_commission_structure(None) is None

    def test_dump_kol_custom(self):
        """Only present overrides are written, as wire strings."""
        document = dump_commission_structure(
            KolCustom(level1_rate=Decimal("0.40"), commissions_waived=True)
        )

        assert document == {
            "type": "KOL_CUSTOM",
            "level1_rate": "0.4",
            "fees_waived": False,
            "commissions_waived": True,
        }

    def test_dump_then_parse(self):
        """A dumped document decodes to the same structure."""
        structure = Waived(fees_waived=True, commissions_waived=True)

        assert parse_commission_structure(
            dump_commission_structure(structure)
        ) == structure
