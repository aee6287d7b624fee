"""
Pure arithmetic for the daily rollup.

The running average reproduces the rule the pool has always reported:

    new_avg = (old_avg * old_count + batch_size) / (old_count + batch_size)

``batch_size`` is used both as the numerator contribution and as the
denominator increment, so the figure is biased towards 1 as volume grows
rather than being a true mean of batch sizes.  Kept as-is so the reported
series stays continuous; see DESIGN.md.
"""

from __future__ import annotations

from decimal import Decimal

from darkpool_kernel.db.types import AVERAGE_DECIMAL_PLACES, round_money


def fold_running_average(
    old_average: Decimal,
    old_count: int,
    batch_size: int,
) -> Decimal:
    """Average batch size after folding in one batch of ``batch_size``."""
    denominator = old_count + batch_size
    if denominator <= 0:
        return old_average
    numerator = old_average * Decimal(old_count) + Decimal(batch_size)
    return round_money(
        numerator / Decimal(denominator),
        decimal_places=AVERAGE_DECIMAL_PLACES,
    )
