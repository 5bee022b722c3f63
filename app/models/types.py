"""
Standard type definitions for database models.

Provides consistent types for monetary and rate fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts, balances, rewards
# Precision: 18 digits total, 8 after decimal point
# Suitable for: USD and VCN rewards, cumulative totals
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Applied payout rate in percent points
# Precision: 18 digits total, 8 after decimal point
# Suitable for: effective tier rates (e.g., 10.50000000 = 10.5%)
RatePercentType = DECIMAL(18, 8)
