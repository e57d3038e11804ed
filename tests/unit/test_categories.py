"""
Тесты для Category breakdown и allocation math
"""

import datetime
from decimal import Decimal

import pytest

from snaptrack.core.domain import Asset, Snapshot, SnapshotAssetValue
from snaptrack.core.math.allocation import (
    category_allocation,
    goal_achievement_rate,
    goal_distance,
    is_goal_reached,
)
from snaptrack.metrics.categories import (
    UNCATEGORIZED_LABEL,
    category_allocations,
    category_value_history,
    category_values,
)
from snaptrack.resolver import resolve_all

D = Decimal


def value(snapshot, name, platform, amount, category=None) -> SnapshotAssetValue:
    return SnapshotAssetValue(
        snapshot_id=snapshot.id,
        asset=Asset(name=name, platform=platform, category=category),
        market_value=D(amount),
    )


@pytest.fixture
def views():
    """
    Jan: Stocks 6,000 (Broker), Cash 2,000 (Bank), Gold 2,000 без категории (Vault)
    Feb: только Broker (stocks 8,000) — Bank и Vault переносятся
    """
    jan, feb = Snapshot(date="2024-01-01"), Snapshot(date="2024-02-01")
    values = [
        value(jan, "VTI", "Broker", 6000, "Stocks"),
        value(jan, "Savings", "Bank", 2000, "Cash"),
        value(jan, "Gold", "Vault", 2000),
        value(feb, "VTI", "Broker", 8000, " stocks "),
    ]
    resolved = resolve_all([jan, feb], values)
    return resolved[jan.id], resolved[feb.id]


# =============================================================================
# ТЕСТЫ: Allocation math
# =============================================================================


class TestCategoryAllocation:
    def test_percentage(self):
        assert category_allocation(D(250), D(1000)) == D(25)

    def test_zero_total(self):
        assert category_allocation(D(250), D(0)) == D(0)

    def test_negative_total_uses_formula(self):
        assert category_allocation(D(-50), D(-100)) == D(50)


class TestGoalProgress:
    def test_achievement_rate(self):
        assert goal_achievement_rate(D(250000), D(1000000)) == D(25)
        assert goal_achievement_rate(D(1200000), D(1000000)) == D(120)

    @pytest.mark.parametrize("goal", [None, D(0), D(-1)])
    def test_no_goal(self, goal):
        assert goal_achievement_rate(D(1000), goal) == D(0)

    def test_distance(self):
        assert goal_distance(D(800), D(1000)) == D(200)
        assert goal_distance(D(1200), D(1000)) == D(-200)
        assert goal_distance(D(1200), None) == D(0)

    def test_reached(self):
        assert is_goal_reached(D(1000), D(1000))
        assert not is_goal_reached(D(999), D(1000))
        assert not is_goal_reached(D(999), None)


# =============================================================================
# ТЕСТЫ: Category breakdown
# =============================================================================


class TestCategoryValues:
    def test_includes_carried_forward(self, views):
        _, feb = views
        assert category_values(feb) == {"stocks": D(8000), "Cash": D(2000), "": D(2000)}

    def test_names_grouped_case_insensitively(self):
        snapshot = Snapshot(date="2024-01-01")
        values = [
            value(snapshot, "VTI", "Broker", 100, "Stocks"),
            value(snapshot, "VXUS", "Broker", 50, "STOCKS"),
        ]
        view = resolve_all([snapshot], values)[snapshot.id]
        assert category_values(view) == {"Stocks": D(150)}

    def test_sum_equals_total(self, views):
        for view in views:
            assert sum(category_values(view).values(), D(0)) == view.total_value


class TestCategoryAllocations:
    def test_sorted_by_value(self, views):
        jan, _ = views
        allocations = category_allocations(jan)

        assert allocations[0].category_name == "Stocks"
        assert allocations[0].percentage == D(60)
        assert {a.category_name for a in allocations} == {"Stocks", "Cash", UNCATEGORIZED_LABEL}

    def test_empty_for_non_positive_total(self):
        snapshot = Snapshot(date="2024-01-01")
        view = resolve_all([snapshot], [value(snapshot, "Loan", "Bank", -100, "Debt")])[snapshot.id]
        assert category_allocations(view) == []

    def test_value_history(self, views):
        history = category_value_history(reversed(views))

        assert [p.date for p in history["Cash"]] == [datetime.date(2024, 1, 1), datetime.date(2024, 2, 1)]
        assert [p.value for p in history[UNCATEGORIZED_LABEL]] == [D(2000), D(2000)]
        assert [p.value for p in history["Stocks"]] == [D(6000), D(8000)]
        assert "stocks" not in history
