"""
Module: darkpool_kernel.db.types
Responsibility: Column types and helpers for currency-precision values.
    Centralizes rounding so that fees, totals and the rollup average all
    quantize the same way.  Sums of amounts are never rounded.
Architecture position: Kernel > DB.  MUST NOT import from models/, domain/,
    selectors/, or outer packages.

Invariants enforced:
    - No floats anywhere in the pool.  Monetary amounts are Decimal in
      Python and exact decimal strings in the database.
    - round_money() is the only sanctioned rounding function.
    - Fee, total and aggregate arithmetic runs under money_context(), never
      the 28-digit default context, so wide amounts are neither rounded
      nor rejected by quantize.
"""

from datetime import timezone
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, localcontext

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator

# Currency precision for amounts, fees and totals (USDC cents)
MONEY_DECIMAL_PLACES = 2
# Precision kept for the running average batch size
AVERAGE_DECIMAL_PLACES = 6
DEFAULT_ROUNDING = ROUND_HALF_UP
# Working precision for money arithmetic.  Accepted amounts carry at most
# 38 significant digits; the headroom absorbs fee products and daily sums.
MONEY_PRECISION = 60


class DecimalString(TypeDecorator):
    """
    Decimal stored as its exact string form.

    Guarantees:
        - process_bind_param: Decimal (or numeric str/int) -> canonical str.
        - process_result_value: str -> Decimal with the stored exponent, so
          Decimal("10.00") round-trips as "10.00".
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, float):
            raise TypeError("float is not accepted for decimal columns")
        return str(Decimal(str(value)))

    def process_result_value(self, value, dialect):
        if value is not None:
            return Decimal(value)
        return None


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always loads as UTC.

    SQLite drops tzinfo on storage; values read back naive are treated as
    UTC so comparisons against clock-derived datetimes stay valid.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the only sanctioned rounding function; all other code delegates
    here so totals and rollups quantize identically.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "0"
    with money_context():
        return value.quantize(Decimal(quantize_str), rounding=rounding)


def money_context():
    """Decimal context for fee, total and aggregate arithmetic."""
    return localcontext(prec=MONEY_PRECISION)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Exact sum of monetary values."""
    with money_context():
        return sum(values, Decimal("0"))


def format_money(value: Decimal) -> str:
    """Render a monetary value as a fixed 2-place string (e.g. "10.50")."""
    return format_decimal(round_money(value))


def format_decimal(value: Decimal) -> str:
    """Plain positional notation, never exponent form ("1E+3" -> "1000")."""
    return format(value, "f")
