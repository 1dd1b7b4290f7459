"""
Money amount checks shared by the funds services.

Balances, totals and spent amounts are stored as DECIMAL(18, 2). Amounts
with more precision would be rounded by the database, so they are rejected
before any state changes.
"""

from decimal import Decimal, InvalidOperation

CENT = Decimal('0.01')
MAX_AMOUNT = Decimal('1e16')


def is_valid_amount(amount) -> bool:
    """True for a positive amount with at most two decimal places that fits the columns."""
    if isinstance(amount, bool) or not isinstance(amount, (int, Decimal)):
        return False
    amount = Decimal(amount)
    if not amount.is_finite() or amount <= 0 or amount >= MAX_AMOUNT:
        return False
    try:
        return amount == amount.quantize(CENT)
    except InvalidOperation:
        return False
