"""
Referral code generation.

Codes are drawn with a CSPRNG from a 32-symbol alphabet without the
visually ambiguous I, O, 0 and 1.
"""

import secrets
from collections.abc import Callable

from referral_engine.config.business_constants import (
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
)


CodeGenerator = Callable[[], str]


def generate_referral_code(
    length: int = REFERRAL_CODE_LENGTH,
    alphabet: str = REFERRAL_CODE_ALPHABET,
) -> str:
    """
    Draw a random referral code.

    Args:
        length: Number of characters
        alphabet: Symbols to draw from

    Returns:
        Candidate code (uniqueness is checked by the caller)
    """
    return "".join(secrets.choice(alphabet) for _ in range(length))


def is_well_formed_code(
    code: str,
    length: int = REFERRAL_CODE_LENGTH,
    alphabet: str = REFERRAL_CODE_ALPHABET,
) -> bool:
    """Check a code against the issuing length and alphabet."""
    return len(code) == length and all(char in alphabet for char in code)
