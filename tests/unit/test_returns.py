"""
Тесты для Returns — growth rate, Modified Dietz, TWR, rebasing, CAGR

Проверяемые инварианты:
1. Undefined результат → None (не 0 и не исключение)
2. None в цепочке TWR пропагирует
3. Rebasing — transform уже посчитанной серии
4. Периоды с нулевым cash flow участвуют в цепочке
"""

from decimal import Decimal

import pytest

from snaptrack.core.math.returns import (
    CashFlow,
    cagr,
    cumulative_twr,
    cumulative_twr_series,
    growth_rate,
    modified_dietz,
    rebase_cumulative,
)

D = Decimal


def q(value: Decimal, places: str = "0.0001") -> Decimal:
    return value.quantize(D(places))


# =============================================================================
# ТЕСТЫ: Growth Rate
# =============================================================================


class TestGrowthRate:
    def test_positive_growth(self):
        assert growth_rate(D(100000), D(110000)) == D("0.1")

    def test_negative_growth(self):
        assert growth_rate(D(100000), D(90000)) == D("-0.1")

    def test_to_zero(self):
        assert growth_rate(D(100), D(0)) == D(-1)

    @pytest.mark.parametrize("begin", [D(0), D(-100)])
    def test_non_positive_begin_undefined(self, begin):
        assert growth_rate(begin, D(110)) is None


# =============================================================================
# ТЕСТЫ: Modified Dietz
# =============================================================================


class TestModifiedDietz:
    def test_reference_scenario(self):
        """BMV 100k, EMV 115k, +10k на day 30 из 90 → ≈ 4.69%."""
        result = modified_dietz(D(100000), D(115000), [CashFlow(D(10000), 30)], 90)
        assert q(result) == D("0.0469")

    def test_plain_tuples_accepted(self):
        result = modified_dietz(D(100000), D(115000), [(D(10000), 30)], 90)
        assert q(result) == D("0.0469")

    def test_no_cash_flows_equals_growth(self):
        assert modified_dietz(D(100), D(110), [], 30) == growth_rate(D(100), D(110))

    def test_flow_at_start_full_weight(self):
        # (120 - 100 - 10) / (100 + 10) = 10/110
        result = modified_dietz(D(100), D(120), [CashFlow(D(10), 0)], 30)
        assert result == D(10) / D(110)

    def test_flow_at_end_zero_weight(self):
        # (120 - 100 - 10) / 100
        assert modified_dietz(D(100), D(120), [CashFlow(D(10), 30)], 30) == D("0.1")

    def test_withdrawal(self):
        # (95 - 100 + 10) / (100 - 10 * 0.5)
        result = modified_dietz(D(100), D(95), [CashFlow(D(-10), 15)], 30)
        assert result == D(5) / D(95)

    def test_non_positive_begin_undefined(self):
        assert modified_dietz(D(0), D(100), [CashFlow(D(100), 0)], 30) is None

    @pytest.mark.parametrize("total_days", [0, -1])
    def test_empty_period_undefined(self, total_days):
        assert modified_dietz(D(100), D(110), [], total_days) is None

    def test_non_positive_denominator_undefined(self):
        # 100 + (-200 * 1) = -100
        assert modified_dietz(D(100), D(50), [CashFlow(D(-200), 0)], 30) is None


# =============================================================================
# ТЕСТЫ: Cumulative TWR
# =============================================================================


class TestCumulativeTWR:
    def test_empty_chain_is_zero(self):
        assert cumulative_twr([]) == D(0)

    def test_chaining(self):
        assert cumulative_twr([D("0.1"), D("0.1")]) == D("0.21")
        assert cumulative_twr([D("0.1"), D("-0.1")]) == D("-0.01")

    def test_zero_return_period_participates(self):
        assert cumulative_twr([D("0.1"), D(0), D("0.1")]) == D("0.21")

    def test_undefined_period_propagates(self):
        assert cumulative_twr([D("0.1"), None, D("0.1")]) is None

    def test_series(self):
        series = cumulative_twr_series([D("0.1"), D("0.1"), D("0.1")])
        assert series == [D(0), D("0.1"), D("0.21"), D("0.331")]

    def test_series_last_point_equals_cumulative(self):
        returns = [D("0.05"), D("-0.02"), D("0.03")]
        assert cumulative_twr_series(returns)[-1] == cumulative_twr(returns)

    def test_series_undefined_from_first_gap(self):
        series = cumulative_twr_series([D("0.1"), None, D("0.1")])
        assert series == [D(0), D("0.1"), None, None]


# =============================================================================
# ТЕСТЫ: Rebasing
# =============================================================================


class TestRebaseCumulative:
    def test_reference_scenario(self):
        series = [D(0), D("0.10"), D("0.21"), D("0.331")]
        rebased = rebase_cumulative(series, 1)
        assert rebased == [D(0), D("0.10"), D("0.21")]

    def test_rebase_from_zero_is_identity(self):
        series = [D(0), D("0.10"), D("0.21")]
        assert rebase_cumulative(series, 0) == series

    def test_rebase_differs_from_rechain_of_window(self):
        # Rebased значение не зависит от того, где начался период внутри окна
        series = [D(0), D("0.5"), D("0.65")]
        assert rebase_cumulative(series, 1)[-1] == D("0.1")

    def test_undefined_points(self):
        series = [D(0), None, D("0.21")]
        assert rebase_cumulative(series, 1) == [None, None]
        assert rebase_cumulative([D(0), D("0.1"), None], 1) == [D(0), None]

    def test_total_loss_base_undefined(self):
        assert rebase_cumulative([D(0), D(-1), D(-1)], 1) == [None, None]

    @pytest.mark.parametrize("start_index", [-1, 3])
    def test_out_of_range(self, start_index):
        with pytest.raises(IndexError):
            rebase_cumulative([D(0), D("0.1"), D("0.2")], start_index)


# =============================================================================
# ТЕСТЫ: CAGR
# =============================================================================


class TestCAGR:
    def test_reference_scenario(self):
        result = cagr(D(100000), D(121000), 2.0)
        assert abs(result - D("0.10")) < D("1e-20")

    def test_one_year_equals_growth(self):
        result = cagr(D(100), D(110), 1.0)
        assert abs(result - D("0.1")) < D("1e-20")

    def test_sub_year_period_extrapolated(self):
        result = cagr(D(100), D(110), 0.5)
        assert abs(result - D("0.21")) < D("1e-20")

    @pytest.mark.parametrize(
        "begin, end, years",
        [
            (D(0), D(100), 1.0),
            (D(-10), D(100), 1.0),
            (D(100), D(0), 1.0),
            (D(100), D(-10), 1.0),
            (D(100), D(110), 0.0),
            (D(100), D(110), -1.0),
        ],
    )
    def test_undefined(self, begin, end, years):
        assert cagr(begin, end, years) is None

    @pytest.mark.parametrize("years", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_years_undefined(self, years):
        assert cagr(D(100), D(121), years) is None

    def test_growth_beyond_context_range_undefined(self):
        """1e100 за 0.0001 года → степень 10000, выходит за Emax."""
        assert cagr(D(1), D("1e100"), 0.0001) is None
