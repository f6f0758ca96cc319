"""
Validators package.

Provides common validation functions for caller input.
"""

from referral_engine.validators.common import (
    ensure_valid,
    validate_chain,
    validate_claim_type,
    validate_fee_tier,
    validate_positive_amount,
    validate_referral_code,
    validate_side,
    validate_token,
    validate_user_id,
)


__all__ = [
    "ensure_valid",
    "validate_user_id",
    "validate_referral_code",
    "validate_positive_amount",
    "validate_chain",
    "validate_side",
    "validate_claim_type",
    "validate_fee_tier",
    "validate_token",
]
