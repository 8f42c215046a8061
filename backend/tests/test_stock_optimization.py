"""
test_stock_optimization.py — Unit tests for the stock-bar optimizer.

Tests cover:
  - optimize_stock_usage: single piece length, lowest wastage percent wins
  - pack_stock: pure trial packing, largest pieces first
  - optimize_combined_stock_usage: greedy per-bar packing across stock sizes
  - Degenerate one-bar-per-piece fallback for pieces longer than every bar
  - Conservation, determinism and monotonicity over generated inputs

Default catalogue: 16ft=4877mm, 15ft=4572mm, 12ft=3658mm.
"""

import random
import pytest

from cutlist.models.window_schema import StockOption
from cutlist.services.stock_optimization import (
    STRATEGY_COMBINED,
    STRATEGY_ONE_BAR_PER_PIECE,
    STRATEGY_SINGLE,
    EmptyStockCatalogueError,
    PieceRequirement,
    PieceTag,
    optimize_combined_stock_usage,
    optimize_stock_usage,
    pack_one_bar_per_piece,
    pack_stock,
)


# ===========================================================================
# Class 1: Piece tags
# ===========================================================================

class TestPieceTag:

    def test_integral_length_label(self):
        assert PieceTag("width", 1000.0).label == "width-1000"

    def test_fractional_length_label(self):
        assert PieceTag("g-height", 1366.65).label == "g-height-1366.65"

    def test_requirement_exposes_length_and_type(self):
        req = PieceRequirement.of("interlock", 1500, 3)
        assert req.length == 1500
        assert req.type == "interlock-1500"
        assert req.count == 3


# ===========================================================================
# Class 2: Single piece length
# ===========================================================================

class TestSingleLength:
    """optimize_stock_usage picks the stock size with the lowest wastage %."""

    def test_ten_pieces_of_1000(self, default_stock):
        """
        16ft: 4/bar → 3 bars, 14631 − 10000 = 4631 (31.65%)
        15ft: 4/bar → 3 bars, 13716 − 10000 = 3716 (27.09%)  ← wins
        12ft: 3/bar → 4 bars, 14632 − 10000 = 4632 (31.66%)
        """
        result = optimize_stock_usage(1000, 10, default_stock)
        assert result.stock_name == "15ft"
        assert result.stocks_needed == 3
        assert result.pieces_per_stock == 4
        assert result.total_wastage == pytest.approx(3716)
        assert result.wastage_percent == pytest.approx(3716 / 13716 * 100)
        assert result.total_stock_length == pytest.approx(13716)
        assert result.strategy == STRATEGY_SINGLE
        assert result.required_length == 1000

    def test_cutting_plans_fill_bars_in_order(self, default_stock):
        result = optimize_stock_usage(1000, 10, default_stock)
        assert [len(p.pieces) for p in result.cutting_plans] == [4, 4, 2]
        assert [p.wastage for p in result.cutting_plans] == pytest.approx([572, 572, 2572])
        assert [p.stock_index for p in result.cutting_plans] == [1, 2, 3]

    def test_uses_default_catalogue_when_none_given(self):
        assert optimize_stock_usage(1000, 10).stock_name == "15ft"

    def test_tie_keeps_first_option(self):
        options = [StockOption(length=4000, name="A"), StockOption(length=4000, name="B")]
        assert optimize_stock_usage(1000, 6, options).stock_name == "A"

    def test_piece_longer_than_every_bar_falls_back(self, default_stock):
        """5000mm fits no stock size: one 16ft bar per piece, wastage −123 each."""
        result = optimize_stock_usage(5000, 2, default_stock)
        assert result.strategy == STRATEGY_ONE_BAR_PER_PIECE
        assert result.stock_name == "16ft"
        assert result.stocks_needed == 2
        assert result.total_wastage == pytest.approx(-246)
        assert result.required_length == 5000
        assert all(p.wastage == pytest.approx(-123) for p in result.cutting_plans)

    def test_empty_catalogue_raises(self):
        with pytest.raises(EmptyStockCatalogueError):
            optimize_stock_usage(1000, 2, [])

    def test_empty_catalogue_error_is_value_error(self):
        with pytest.raises(ValueError):
            optimize_stock_usage(1000, 2, [])

    def test_non_positive_length_raises(self, default_stock):
        with pytest.raises(ValueError, match="positive"):
            optimize_stock_usage(0, 2, default_stock)


# ===========================================================================
# Class 3: Trial packing
# ===========================================================================

class TestPackStock:

    def test_largest_pieces_first(self):
        stock = StockOption(length=4572, name="15ft")
        pool = [PieceRequirement.of("width", 1000, 4), PieceRequirement.of("height", 1500, 4)]
        bar = pack_stock(stock, pool)
        assert [t.length for t in bar.pieces] == [1500, 1500, 1500]
        assert bar.taken == (0, 3)
        assert bar.wastage == pytest.approx(72)
        assert bar.remaining == 5

    def test_pool_is_untouched(self):
        stock = StockOption(length=4877, name="16ft")
        pool = [PieceRequirement.of("width", 1000, 4)]
        pack_stock(stock, pool)
        assert pool[0].count == 4

    def test_nothing_fits(self):
        bar = pack_stock(StockOption(length=3658, name="12ft"), [PieceRequirement.of("x", 4000, 1)])
        assert bar.pieces == ()
        assert bar.taken == (0,)
        assert bar.wastage == 3658


# ===========================================================================
# Class 4: Combined packing
# ===========================================================================

class TestCombined:

    def test_mixed_lengths(self, default_stock):
        """
        Bar 1: 15ft ← 3×1500          (waste 72)
        Bar 2: 15ft ← 1500 + 3×1000   (waste 72)
        Bar 3: 12ft ← 1000            (waste 2658)
        """
        reqs = [PieceRequirement.of("width", 1000, 4), PieceRequirement.of("height", 1500, 4)]
        result = optimize_combined_stock_usage(reqs, default_stock)

        assert result.strategy == STRATEGY_COMBINED
        assert result.all_stock_counts == {"15ft": 2, "12ft": 1}
        assert result.stock_name == "15ft"
        assert result.stock_length == 4572
        assert result.stocks_needed == 3
        assert result.total_pieces == 8
        assert result.pieces_per_stock == 2.67
        assert result.total_stock_length == pytest.approx(12802)
        assert result.total_wastage == pytest.approx(2802)
        assert result.piece_breakdown == {"height-1500": 4, "width-1000": 4}

    def test_mixed_lengths_cutting_plans(self, default_stock):
        reqs = [PieceRequirement.of("width", 1000, 4), PieceRequirement.of("height", 1500, 4)]
        plans = optimize_combined_stock_usage(reqs, default_stock).cutting_plans
        assert [p.stock_name for p in plans] == ["15ft", "15ft", "12ft"]
        assert plans[1].piece_types == ["height-1500", "width-1000", "width-1000", "width-1000"]
        assert [p.wastage for p in plans] == pytest.approx([72, 72, 2658])

    def test_perfect_fit_has_zero_wastage(self, default_stock):
        """3000 + 1877 = 4877: exactly one 16ft bar."""
        reqs = [PieceRequirement.of("a", 3000, 1), PieceRequirement.of("b", 1877, 1)]
        result = optimize_combined_stock_usage(reqs, default_stock)
        assert result.stocks_needed == 1
        assert result.stock_name == "16ft"
        assert result.cutting_plans[0].wastage == 0
        assert result.wastage_percent == 0

    def test_tie_keeps_first_option(self):
        options = [StockOption(length=4000, name="A"), StockOption(length=4000, name="B")]
        result = optimize_combined_stock_usage([PieceRequirement.of("w", 1000, 4)], options)
        assert result.all_stock_counts == {"A": 1}

    def test_unpackable_pieces_fall_back_after_packable_ones(self, default_stock):
        """
        1000 packs into a 12ft bar (waste 2658); the two 6000 pieces fit
        nothing and get one 16ft bar each (waste −1123 each).
        """
        reqs = [PieceRequirement.of("long", 6000, 2), PieceRequirement.of("short", 1000, 1)]
        result = optimize_combined_stock_usage(reqs, default_stock)

        assert result.all_stock_counts == {"12ft": 1, "16ft": 2}
        assert result.stock_name == "16ft"
        assert result.total_wastage == pytest.approx(412)
        assert result.total_stock_length == pytest.approx(13412)
        assert [p.stock_index for p in result.cutting_plans] == [1, 2, 3]
        assert result.piece_breakdown == {"short-1000": 1, "long-6000": 2}

    def test_zero_count_requirements_are_ignored(self, default_stock):
        result = optimize_combined_stock_usage([PieceRequirement.of("w", 1000, 0)], default_stock)
        assert result.stocks_needed == 0
        assert result.cutting_plans == []
        assert result.pieces_per_stock == 0
        assert result.wastage_percent == 0

    def test_empty_catalogue_raises(self):
        with pytest.raises(EmptyStockCatalogueError):
            optimize_combined_stock_usage([PieceRequirement.of("w", 1000, 1)], [])

    def test_negative_length_raises(self, default_stock):
        with pytest.raises(ValueError):
            optimize_combined_stock_usage([PieceRequirement.of("w", -5, 1)], default_stock)

    def test_one_bar_per_piece_direct(self):
        stock = StockOption(length=3658, name="12ft")
        result = pack_one_bar_per_piece([PieceRequirement.of("x", 4000, 2)], stock, start_index=5)
        assert [p.stock_index for p in result.cutting_plans] == [5, 6]
        assert result.all_stock_counts == {"12ft": 2}
        assert result.total_wastage == pytest.approx(-684)


# ===========================================================================
# Class 5: Properties over generated inputs
# ===========================================================================

def _random_requirements(seed):
    rng = random.Random(seed)
    return [
        PieceRequirement.of(f"p{i}", round(rng.uniform(300, 4800), 3), rng.randint(1, 12))
        for i in range(rng.randint(1, 6))
    ]


class TestProperties:

    @pytest.mark.parametrize("seed", range(20))
    def test_every_piece_accounted_once(self, default_stock, seed):
        reqs = _random_requirements(seed)
        result = optimize_combined_stock_usage(reqs, default_stock)

        expected = {}
        for r in reqs:
            expected[r.type] = expected.get(r.type, 0) + r.count
        assert result.piece_breakdown == expected
        assert sum(len(p.pieces) for p in result.cutting_plans) == sum(expected.values())

    @pytest.mark.parametrize("seed", range(20))
    def test_wastage_plus_required_equals_stock(self, default_stock, seed):
        reqs = _random_requirements(seed)
        result = optimize_combined_stock_usage(reqs, default_stock)
        required = sum(r.length * r.count for r in reqs)
        assert result.total_wastage + required == pytest.approx(result.total_stock_length)
        assert 0 <= result.wastage_percent < 100

    @pytest.mark.parametrize("length", [350.0, 933.325, 1500.0, 2500.0, 4877.0])
    def test_single_length_conservation(self, default_stock, length):
        result = optimize_stock_usage(length, 17, default_stock)
        assert result.total_wastage + 17 * length == pytest.approx(result.total_stock_length)
        assert 0 <= result.wastage_percent < 100

    @pytest.mark.parametrize("seed", range(5))
    def test_deterministic(self, default_stock, seed):
        reqs = _random_requirements(seed)
        first = optimize_combined_stock_usage(reqs, default_stock).to_dict()
        second = optimize_combined_stock_usage(reqs, default_stock).to_dict()
        assert first == second

    @pytest.mark.parametrize("length", [1433.325, 2400.0, 3000.0])
    def test_more_pieces_never_fewer_bars(self, default_stock, length):
        previous = 0
        for n in range(1, 40):
            stocks = optimize_stock_usage(length, n, default_stock).stocks_needed
            assert stocks >= previous
            previous = stocks


# ===========================================================================
# Class 6: Catalogue checks
# ===========================================================================

def _unchecked(length, name="bad"):
    """A StockOption that skips model validation, as a direct caller could build."""
    return StockOption.model_construct(length=length, name=name, length_feet=0)


class TestCatalogueChecks:

    @pytest.mark.parametrize("length", [-3658, 0, 0.0])
    def test_model_rejects_non_positive_length(self, length):
        with pytest.raises(ValueError):
            StockOption(length=length, name="bad")

    @pytest.mark.parametrize("length", [float("nan"), float("inf")])
    def test_model_rejects_non_finite_length(self, length):
        with pytest.raises(ValueError):
            StockOption(length=length, name="bad")

    @pytest.mark.parametrize("length", [-3658.0, 0.0, float("nan"), float("inf")])
    def test_single_length_rejects_bad_stock(self, length):
        with pytest.raises(ValueError, match="Stock length"):
            optimize_stock_usage(933.325, 4, [_unchecked(length)])

    @pytest.mark.parametrize("length", [-3658.0, 0.0, float("nan"), float("inf")])
    def test_combined_rejects_bad_stock(self, length):
        with pytest.raises(ValueError, match="Stock length"):
            optimize_combined_stock_usage([PieceRequirement.of("w", 1000, 2)], [_unchecked(length)])

    def test_bad_entry_anywhere_in_catalogue(self, default_stock):
        with pytest.raises(ValueError, match="Stock length"):
            optimize_stock_usage(1000, 4, default_stock + [_unchecked(-1.0)])

    def test_duplicate_names_rejected(self):
        options = [StockOption(length=4877, name="bar"), StockOption(length=3658, name="bar")]
        with pytest.raises(ValueError, match="Duplicate stock name"):
            optimize_combined_stock_usage([PieceRequirement.of("w", 1000, 2)], options)
        with pytest.raises(ValueError, match="Duplicate stock name"):
            optimize_stock_usage(1000, 2, options)

    @pytest.mark.parametrize("length", [float("nan"), float("inf")])
    def test_non_finite_piece_rejected(self, default_stock, length):
        with pytest.raises(ValueError, match="positive"):
            optimize_combined_stock_usage([PieceRequirement.of("w", length, 1)], default_stock)
        with pytest.raises(ValueError, match="positive"):
            optimize_stock_usage(length, 1, default_stock)


# ===========================================================================
# Class 7: Single-length result shape
# ===========================================================================

class TestSingleLengthShape:
    """Normal and fallback single-length results carry the same fields."""

    def test_normal_path_populates_breakdowns(self, default_stock):
        result = optimize_stock_usage(1000, 10, default_stock, subtype="interlock")
        assert result.piece_breakdown == {"interlock-1000": 10}
        assert result.all_stock_counts == {"15ft": 3}
        assert result.cutting_plans[0].piece_types == ["interlock-1000"] * 4
        assert result.cutting_plans[2].piece_types == ["interlock-1000"] * 2

    def test_fallback_path_uses_same_labels(self, default_stock):
        result = optimize_stock_usage(5000, 2, default_stock, subtype="interlock")
        assert result.piece_breakdown == {"interlock-5000": 2}
        assert result.all_stock_counts == {"16ft": 2}
        assert result.cutting_plans[0].piece_types == ["interlock-5000"]

    def test_default_label(self, default_stock):
        assert optimize_stock_usage(1000, 1, default_stock).piece_breakdown == {"piece-1000": 1}

    @pytest.mark.parametrize("required, count", [(1000, 10), (5000, 2)])
    def test_same_keys_both_paths(self, default_stock, required, count):
        data = optimize_stock_usage(required, count, default_stock).to_dict()
        assert data["piece_breakdown"]
        assert data["all_stock_counts"]
        assert all(plan["piece_types"] for plan in data["cutting_plans"])
