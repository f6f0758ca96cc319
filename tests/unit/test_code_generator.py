"""Unit tests for referral code generation."""

from referral_engine.config.business_constants import (
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
)
from referral_engine.services.referral import (
    generate_referral_code,
    is_well_formed_code,
)


class TestGenerateReferralCode:
    """Test code drawing."""

    def test_length_and_alphabet(self):
        """Codes are 8 symbols of the 32-symbol alphabet."""
        code = generate_referral_code()

        assert len(code) == REFERRAL_CODE_LENGTH
        assert set(code) <= set(REFERRAL_CODE_ALPHABET)

    def test_alphabet_excludes_ambiguous_symbols(self):
        """I, O, 0 and 1 never appear."""
        assert len(REFERRAL_CODE_ALPHABET) == 32
        assert not set("IO01") & set(REFERRAL_CODE_ALPHABET)

    def test_sequential_codes_unique(self):
        """10 000 sequential codes contain no duplicate."""
        codes = [generate_referral_code() for _ in range(10_000)]

        assert len(set(codes)) == len(codes)
        assert all(is_well_formed_code(code) for code in codes)

    def test_custom_length(self):
        """Length and alphabet can be overridden."""
        assert generate_referral_code(length=4, alphabet="A") == "AAAA"


class TestIsWellFormedCode:
    """Test code shape checks."""

    def test_well_formed(self):
        """Issued-shape codes pass."""
        assert is_well_formed_code("ABCDEFGH") is True

    def test_malformed(self):
        """Lowercase, wrong length and excluded symbols fail."""
        assert is_well_formed_code("abcdefgh") is False
        assert is_well_formed_code("ABCDEFG") is False
        assert is_well_formed_code("ABCDEFG1") is False
