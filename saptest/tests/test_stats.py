"""
Tests for Statistics.

Tests:
- Clamping on construction and arithmetic
- Swap / invert / percent reduction
- Equality with tuples
"""

from ..engine_core.stats import MAX_STAT, Statistics


class TestClamping:
    """Values always stay within [0, ceiling]."""

    def test_construction_clamps(self):
        assert Statistics(60, -5) == (MAX_STAT, 0)

    def test_add_saturates_at_ceiling(self):
        stats = Statistics(49, 49).add(Statistics(5, 5))
        assert stats == (50, 50)

    def test_subtract_saturates_at_zero(self):
        stats = Statistics(2, 3).subtract(Statistics(5, 10))
        assert stats == (0, 0)

    def test_custom_ceiling(self):
        stats = Statistics(5, 5, ceiling=100).add(Statistics(80, 0))
        assert stats.attack == 85

    def test_operations_chain(self):
        stats = Statistics(2, 1).add(Statistics(1, 1)).subtract(Statistics(0, 1))
        assert stats == (3, 1)


class TestTransformations:
    """Set, swap, invert and percent reduction."""

    def test_set(self):
        stats = Statistics(1, 1).set(Statistics(7, 3))
        assert stats == (7, 3)

    def test_swap_exchanges_values(self):
        a, b = Statistics(1, 2), Statistics(3, 4)
        a.swap(b)
        assert a == (3, 4)
        assert b == (1, 2)

    def test_invert(self):
        assert Statistics(2, 0).invert() == (0, 2)

    def test_reduce_percent_rounds_loss_down(self):
        stats = Statistics(3, 6).reduce_percent(Statistics(0, 33, ceiling=100))
        assert stats == (3, 5)

    def test_copy_is_independent(self):
        stats = Statistics(2, 2)
        clone = stats.copy()
        clone.add(Statistics(1, 1))
        assert stats == (2, 2)

    def test_iter_and_dict(self):
        stats = Statistics(4, 5)
        assert tuple(stats) == (4, 5)
        assert stats.to_dict() == {"attack": 4, "health": 5}
