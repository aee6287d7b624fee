"""Tests for darkpool_batch.domain.rollup -- running average arithmetic."""

from decimal import Decimal

import pytest

from darkpool_batch.domain.rollup import fold_running_average


class TestFoldRunningAverage:

    def test_three_then_two(self):
        # (3 * 3 + 2) / (3 + 2)
        assert fold_running_average(Decimal("3"), 3, 2) == Decimal("2.200000")

    def test_repeating_fraction_quantized_to_six_places(self):
        # (2 * 2 + 1) / (2 + 1) = 1.6666...
        assert fold_running_average(Decimal("2"), 2, 1) == Decimal("1.666667")

    def test_zero_prior_count(self):
        assert fold_running_average(Decimal("0"), 0, 4) == Decimal("1.000000")

    def test_zero_denominator_keeps_average(self):
        assert fold_running_average(Decimal("2.5"), 0, 0) == Decimal("2.5")

    @pytest.mark.parametrize("size", [1, 5, 10])
    def test_trends_towards_one(self, size):
        avg, count = Decimal(size), size
        for _ in range(50):
            avg = fold_running_average(avg, count, size)
            count += size
        assert Decimal("1") <= avg < Decimal("1.2")
