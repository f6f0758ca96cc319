"""
Business constants.

Single source of truth for referral, fee and commission parameters.
All rates are Decimal; floats never enter the money path.
"""

from decimal import Decimal


# ========================================================================
# REFERRAL NETWORK
# ========================================================================

MAX_REFERRAL_DEPTH = 3  # Ancestors above any user, and levels paid
REFERRAL_CODE_LENGTH = 8
# 32 symbols, no visually ambiguous I, O, 0, 1
REFERRAL_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERRAL_CODE_MAX_ATTEMPTS = 10

# ========================================================================
# COMMISSIONS
# ========================================================================

COMMISSION_RATES = {
    1: Decimal("0.30"),  # 30% direct referrer
    2: Decimal("0.03"),  # 3% second level
    3: Decimal("0.02"),  # 2% third level
}

KOL_DIRECT_RATE = Decimal("0.50")  # KOL_DIRECT pays level 1 only

# ========================================================================
# FEE DISTRIBUTION
# ========================================================================

CASHBACK_RATE = Decimal("0.10")  # Returned to trader
TREASURY_RATE = Decimal("0.55")  # Retained by platform
TOTAL_COMMISSION_RATE = Decimal("0.35")  # Nominal, not enforced

FEE_TIERS = {
    "BASE": Decimal("0.01"),  # 1%
    "REDUCED": Decimal("0.005"),  # 0.5%
}

# ========================================================================
# CHAINS & CLAIMS
# ========================================================================

SUPPORTED_CHAINS = ("ARBITRUM", "SOLANA")
CLAIM_TOKEN = "USDC"

# Integer digits of a NUMERIC(38, 18) running total
MAX_AMOUNT_INTEGER_DIGITS = 20
