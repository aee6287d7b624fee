"""
Privacy fee calculation.

Pure functions, zero I/O.  The fee is the percentage surcharge charged for
private queuing, fixed at intake time and never recomputed.

    fee   = round(amount * premium_percent / 100, 2)    (ROUND_HALF_UP)
    total = round(amount + fee, 2)

Callers validate the amount before calling in here; an unparseable amount
is a client error raised by the intake validators, not by this module.
"""

from __future__ import annotations

from decimal import Decimal

from darkpool_kernel.db.types import money_context, round_money

DEFAULT_PREMIUM_PERCENT = 5


def calculate_privacy_fee(amount: Decimal, premium_percent: int) -> Decimal:
    """Fee owed on ``amount`` at ``premium_percent``, rounded to currency precision."""
    with money_context():
        return round_money(amount * Decimal(premium_percent) / Decimal(100))


def calculate_total_cost(amount: Decimal, fee: Decimal) -> Decimal:
    with money_context():
        return round_money(amount + fee)
