"""Unit tests for commission rate resolution."""

from decimal import Decimal

import pytest

from referral_engine.services.commission import (
    KolCustom,
    KolDirect,
    Waived,
    rate_for_level,
    standard_rate_for_level,
)


class TestStandardRates:
    """Test standard tier rates."""

    @pytest.mark.parametrize(
        "level,expected",
        [
            (1, Decimal("0.30")),
            (2, Decimal("0.03")),
            (3, Decimal("0.02")),
            (0, Decimal("0")),
            (4, Decimal("0")),
        ],
    )
    def test_standard_rate(self, level, expected):
        """Levels 1-3 pay 30/3/2 percent, others nothing."""
        assert standard_rate_for_level(level) == expected
        assert rate_for_level(level) == expected


class TestCustomStructures:
    """Test rate resolution with custom structures."""

    def test_kol_direct(self):
        """KOL_DIRECT pays 50% at level 1 only."""
        structure = KolDirect()

        assert rate_for_level(1, structure) == Decimal("0.50")
        assert rate_for_level(2, structure) == Decimal("0")
        assert rate_for_level(3, structure) == Decimal("0")

    def test_kol_custom_override(self):
        """KOL_CUSTOM uses its override where present."""
        structure = KolCustom(level1_rate=Decimal("0.4"))

        assert rate_for_level(1, structure) == Decimal("0.4")

    def test_kol_custom_falls_back_to_standard(self):
        """Levels without an override use the standard tiers."""
        structure = KolCustom(level1_rate=Decimal("0.4"))

        assert rate_for_level(2, structure) == Decimal("0.03")
        assert rate_for_level(3, structure) == Decimal("0.02")

    def test_kol_custom_zero_override(self):
        """An explicit zero override is not a fallback."""
        structure = KolCustom(level2_rate=Decimal("0"))

        assert rate_for_level(2, structure) == Decimal("0")

    def test_waived(self):
        """WAIVED earns nothing at any level."""
        for level in (1, 2, 3):
            assert rate_for_level(level, Waived()) == Decimal("0")

    @pytest.mark.parametrize(
        "structure",
        [
            KolDirect(commissions_waived=True),
            KolCustom(level1_rate=Decimal("0.4"), commissions_waived=True),
            Waived(commissions_waived=True),
        ],
    )
    def test_commissions_waived_wins(self, structure):
        """commissions_waived zeroes every variant."""
        assert rate_for_level(1, structure) == Decimal("0")

    def test_fees_waived_does_not_affect_rate(self):
        """fees_waived only concerns the ancestor's own trades."""
        assert rate_for_level(1, KolDirect(fees_waived=True)) == Decimal(
            "0.50"
        )
