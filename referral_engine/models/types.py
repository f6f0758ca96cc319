"""
Standard type definitions for database models.

Provides consistent types for monetary fields across all models.
"""

from sqlalchemy import DECIMAL, String

# Running balances updated by atomic increment
# Precision: 38 digits total, 18 after decimal point
# Suitable for: XP, commission and cashback totals
MoneyType = DECIMAL(38, 18)

# Immutable amounts kept in their wire representation
# Suitable for: trade volumes, fees, commission amounts and rates
DecimalStringType = String(80)
