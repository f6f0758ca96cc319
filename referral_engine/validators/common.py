"""
Common validators for caller input.

Each validator returns a tuple of (is_valid, parsed_value, error_message).
Services turn a failed validation into InvalidInputError via ensure_valid().
"""

from decimal import Decimal
from typing import Any, TypeVar

from referral_engine.config.business_constants import (
    MAX_AMOUNT_INTEGER_DIGITS,
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    SUPPORTED_CHAINS,
)
from referral_engine.models.enums import ClaimType, FeeTier, TradeSide
from referral_engine.utils.exceptions import InvalidInputError
from referral_engine.utils.money import MONEY


T = TypeVar("T")

ValidationResult = tuple[bool, T | None, str | None]


def validate_user_id(value: Any) -> ValidationResult[int]:
    """
    Validate an opaque user identifier.

    Args:
        value: Integer or decimal-digit string

    Returns:
        Tuple of (is_valid, parsed_user_id, error_message)

    Examples:
        >>> validate_user_id("42")
        (True, 42, None)
        >>> validate_user_id("abc")
        (False, None, 'User ID must be a positive integer')
    """
    if isinstance(value, bool):
        return False, None, "User ID must be a positive integer"

    if isinstance(value, int):
        user_id = value
    elif isinstance(value, str):
        value = value.strip()
        if not value:
            return False, None, "User ID cannot be empty"
        if not value.isdigit():
            return False, None, "User ID must be a positive integer"
        user_id = int(value)
    else:
        return False, None, "User ID must be a positive integer"

    if user_id <= 0:
        return False, None, "User ID must be a positive integer"

    return True, user_id, None


def validate_referral_code(value: Any) -> ValidationResult[str]:
    """
    Validate referral code shape.

    Codes are matched case-insensitively, then checked against the alphabet.

    Args:
        value: Referral code

    Returns:
        Tuple of (is_valid, normalized_code, error_message)
    """
    if not value or not isinstance(value, str):
        return False, None, "Referral code cannot be empty"

    code = value.strip().upper()

    if len(code) != REFERRAL_CODE_LENGTH:
        return (
            False,
            None,
            f"Referral code must be {REFERRAL_CODE_LENGTH} characters",
        )

    if any(char not in REFERRAL_CODE_ALPHABET for char in code):
        return False, None, "Referral code contains invalid characters"

    return True, code, None


def validate_positive_amount(value: Any) -> ValidationResult[Decimal]:
    """
    Validate a strictly positive monetary amount.

    Args:
        value: Decimal string, integer or Decimal

    Returns:
        Tuple of (is_valid, parsed_amount, error_message)

    Examples:
        >>> validate_positive_amount("100.50")
        (True, Decimal('100.500000000000000000'), None)
        >>> validate_positive_amount("0")
        (False, None, 'Amount must be greater than 0')
        >>> validate_positive_amount("1e20")
        (False, None, 'Amount must be less than 10^20')
    """
    try:
        amount = MONEY.parse(value)
    except InvalidInputError as e:
        return False, None, e.message

    if amount <= 0:
        return False, None, "Amount must be greater than 0"

    if amount.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        return (
            False,
            None,
            f"Amount must be less than 10^{MAX_AMOUNT_INTEGER_DIGITS}",
        )

    return True, amount, None


def _validate_choice(
    value: Any, choices: tuple[str, ...], label: str
) -> ValidationResult[str]:
    if not value or not isinstance(value, str):
        return False, None, f"{label} cannot be empty"

    normalized = value.strip().upper()
    if normalized not in choices:
        return (
            False,
            None,
            f"{label} must be one of: {', '.join(choices)}",
        )

    return True, normalized, None


def validate_chain(value: Any) -> ValidationResult[str]:
    """Validate settlement chain (ARBITRUM, SOLANA)."""
    return _validate_choice(value, SUPPORTED_CHAINS, "Chain")


def validate_side(value: Any) -> ValidationResult[str]:
    """Validate trade side (BUY, SELL)."""
    return _validate_choice(
        value, tuple(side.value for side in TradeSide), "Side"
    )


def validate_claim_type(value: Any) -> ValidationResult[str]:
    """Validate claim type (COMMISSION, CASHBACK)."""
    return _validate_choice(
        value, tuple(kind.value for kind in ClaimType), "Claim type"
    )


def validate_fee_tier(value: Any) -> ValidationResult[str]:
    """Validate fee tier (BASE, REDUCED)."""
    return _validate_choice(
        value, tuple(tier.value for tier in FeeTier), "Fee tier"
    )


def validate_token(value: Any) -> ValidationResult[str]:
    """Validate fee token symbol."""
    if not value or not isinstance(value, str) or not value.strip():
        return False, None, "Token cannot be empty"

    token = value.strip().upper()
    if len(token) > 32:
        return False, None, "Token symbol is too long"

    return True, token, None


def ensure_valid(result: ValidationResult[T]) -> T:
    """
    Unwrap a validation result.

    Args:
        result: Tuple returned by a validator

    Returns:
        Parsed value

    Raises:
        InvalidInputError: If validation failed
    """
    is_valid, value, error = result
    if not is_valid:
        raise InvalidInputError(error or "Invalid input")
    return value  # type: ignore[return-value]
