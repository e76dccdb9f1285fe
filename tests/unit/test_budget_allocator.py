"""Tests for budget allocation, categorization and alerts."""

from datetime import date

import pytest
from pydantic import ValidationError

from backend.app.budget.allocator import (
    BudgetInputError,
    adjusted_percentages,
    budget_alerts,
    calculate_budget_allocation,
    categorize_expense,
    check_budget_fit,
    get_all_categories,
    get_category_info,
    summarize_expenses,
)
from backend.app.models.common import ExpenseCategory
from backend.app.models.trip import SavedItem
from backend.app.utils.money import round_half_up


def test_default_percentages_sum_to_100() -> None:
    categories = get_all_categories()

    assert sum(info.default_percentage for info in categories.values()) == 100
    assert categories[ExpenseCategory.accommodation].default_percentage == 35


def test_adventure_shifts_accommodation_to_activities() -> None:
    percentages = adjusted_percentages(["adventure"])

    assert percentages[ExpenseCategory.accommodation] == 30
    assert percentages[ExpenseCategory.activities] == 20
    assert sum(percentages.values()) == 100


def test_each_adjustment_applies_once() -> None:
    """Test adventure and wildlife together shift only 5 points."""
    percentages = adjusted_percentages(["adventure", "wildlife"])

    assert percentages[ExpenseCategory.activities] == 20


def test_percentages_are_floored_at_zero() -> None:
    percentages = adjusted_percentages(["food", "culture", "adventure"])

    assert percentages[ExpenseCategory.misc] == 0
    assert percentages[ExpenseCategory.food] == 30
    assert all(pct >= 0 for pct in percentages.values())


def test_allocation_with_committed_restaurant() -> None:
    """Test committed food spend comes out of the food share only."""
    allocation = calculate_budget_allocation(
        total_budget=100000,
        duration=5,
        group_size=2,
        interests=["adventure"],
        saved_items=[SavedItem(name="Curry House", type="restaurant", cost=2000)],
    )

    food = allocation.categories[ExpenseCategory.food]
    activities = allocation.categories[ExpenseCategory.activities]
    accommodation = allocation.categories[ExpenseCategory.accommodation]

    # 25% of 100000 minus 2000 x 2 people
    assert food.total == 21000
    assert food.allocated == 4000
    assert food.per_day == 4200
    assert food.per_day_per_person == 2100
    assert activities.default_percentage == 20
    assert activities.total == 20000
    # Remaining categories share what is left after committed spend
    assert accommodation.default_percentage == 30
    assert accommodation.total == 28800

    assert allocation.committed_expenses == 4000
    assert allocation.remaining_budget == 96000
    assert allocation.utilization_percentage == 4
    assert allocation.per_person == 50000
    assert allocation.per_day == 20000
    assert allocation.per_day_per_person == 10000


def test_daily_breakdown_is_seeded_from_per_day_budgets() -> None:
    allocation = calculate_budget_allocation(
        total_budget=100000, duration=3, group_size=1, start_date=date(2026, 1, 30)
    )

    assert [d.day for d in allocation.daily_breakdown] == [1, 2, 3]
    assert [d.date for d in allocation.daily_breakdown] == [
        "2026-01-30",
        "2026-01-31",
        "2026-02-01",
    ]

    first = allocation.daily_breakdown[0]
    food = first.categories[ExpenseCategory.food]
    assert food.budget == allocation.categories[ExpenseCategory.food].per_day
    assert food.spent == 0
    assert food.remaining == food.budget
    assert first.total == sum(c.per_day for c in allocation.categories.values())


def test_daily_breakdown_undated_without_start() -> None:
    allocation = calculate_budget_allocation(total_budget=5000, duration=2, group_size=1)

    assert all(day.date is None for day in allocation.daily_breakdown)


def test_over_budget_goes_negative_and_past_100_percent() -> None:
    allocation = calculate_budget_allocation(
        total_budget=10000,
        duration=1,
        group_size=1,
        saved_items=[SavedItem(name="Private safari", cost=15000)],
    )

    assert allocation.utilization_percentage == 150
    assert allocation.remaining_budget == -5000
    assert allocation.categories[ExpenseCategory.activities].total == 0
    assert allocation.categories[ExpenseCategory.accommodation].total < 0


def test_zero_budget_has_zero_utilization() -> None:
    allocation = calculate_budget_allocation(
        total_budget=0,
        duration=2,
        group_size=1,
        saved_items=[SavedItem(name="Sigiriya", entry_fee=50)],
    )

    assert allocation.utilization_percentage == 0


@pytest.mark.parametrize("duration,group_size", [(0, 1), (3, 0)])
def test_invalid_inputs_rejected(duration: int, group_size: int) -> None:
    with pytest.raises(BudgetInputError):
        calculate_budget_allocation(total_budget=1000, duration=duration, group_size=group_size)


@pytest.mark.parametrize(
    "item,expected",
    [
        (SavedItem(name="Anything", type="restaurant"), ExpenseCategory.food),
        (SavedItem(name="Anything", category="food"), ExpenseCategory.food),
        (SavedItem(name="Kandy Hills Hotel"), ExpenseCategory.accommodation),
        (SavedItem(name="Anything", category="accommodation"), ExpenseCategory.accommodation),
        (SavedItem(name="Airport Transfer"), ExpenseCategory.transportation),
        (SavedItem(name="Kottu Corner"), ExpenseCategory.food),
        (SavedItem(name="Sigiriya Rock Fortress"), ExpenseCategory.activities),
    ],
)
def test_categorize_expense(item: SavedItem, expected: ExpenseCategory) -> None:
    assert categorize_expense(item) == expected


def test_unknown_category_info_maps_to_misc() -> None:
    assert get_category_info("spa").label == "Miscellaneous"
    assert get_category_info("food").label == "Food & Dining"


def test_budget_fit_over_category() -> None:
    allocation = calculate_budget_allocation(total_budget=100000, duration=5, group_size=2)

    fit = check_budget_fit(
        item=SavedItem(name="Whale watching", cost=20000),
        current_allocation=allocation,
        category="activities",
    )

    assert fit.fits is False
    assert fit.remaining_budget == 15000
    assert fit.over_budget_by == 5000
    assert fit.warning == "This item exceeds your Activities & Entry Fees budget by LKR 5,000"
    assert fit.suggestion is not None


def test_budget_fit_is_advisory() -> None:
    """Test checking a fit leaves the allocation untouched."""
    allocation = calculate_budget_allocation(total_budget=100000, duration=5, group_size=2)

    fit = check_budget_fit(
        item=SavedItem(name="Museum", cost=1000),
        current_allocation=allocation,
        category="activities",
    )

    assert fit.fits is True
    assert fit.remaining_budget == 15000
    assert allocation.categories[ExpenseCategory.activities].remaining == 15000


def test_budget_fit_unknown_category_always_fits() -> None:
    allocation = calculate_budget_allocation(total_budget=1000, duration=1, group_size=1)

    fit = check_budget_fit(
        item=SavedItem(name="Massage", cost=99999),
        current_allocation=allocation,
        category="spa",
    )

    assert fit.fits is True
    assert fit.remaining_budget is None


def test_summarize_expenses() -> None:
    summary = summarize_expenses(
        10000,
        [
            SavedItem(name="Curry House", type="restaurant", cost=2000),
            SavedItem(name="Sigiriya", entry_fee=50),
        ],
    )

    assert summary.total_spent == 2050
    assert summary.remaining == 7950
    assert summary.percentage_used == 21  # 20.5 rounds up
    assert summary.by_category[ExpenseCategory.food].spent == 2000
    assert summary.by_category[ExpenseCategory.activities].items == ["Sigiriya"]


def test_overall_alert_thresholds() -> None:
    warning = budget_alerts(10000, {ExpenseCategory.food: 8500})
    danger = budget_alerts(10000, {ExpenseCategory.food: 12000})

    assert len(warning) == 1
    assert warning[0].type == "warning"
    assert warning[0].message == "Approaching budget limit (85% used)"
    assert danger[0].type == "danger"
    assert danger[0].message == "Over budget by LKR 2,000!"
    assert budget_alerts(10000, {ExpenseCategory.food: 100}) == []


def test_category_alerts_use_allocation() -> None:
    allocation = calculate_budget_allocation(total_budget=10000, duration=1, group_size=1)

    alerts = budget_alerts(10000, {ExpenseCategory.food: 2500}, allocation)

    assert len(alerts) == 1
    assert alerts[0].type == "danger"
    assert alerts[0].category == "food"
    assert alerts[0].percentage == 100


def test_alerts_for_zero_budget_are_empty() -> None:
    assert budget_alerts(0, {ExpenseCategory.food: 500}) == []


@pytest.mark.parametrize("value,expected", [(2.5, 3), (3.5, 4), (-2.5, -2), (0.49, 0), (20.5, 21)])
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected


def test_fractional_costs_are_summed_then_rounded() -> None:
    items = [SavedItem(name="Boat ride", cost=1250.5), SavedItem(name="Spice garden", cost=0.25)]

    allocation = calculate_budget_allocation(
        total_budget=10000, duration=1, group_size=2, saved_items=items
    )

    assert allocation.committed_expenses == 2502  # 2 * 1250.75 = 2501.5
    assert summarize_expenses(10000, items).total_spent == 1251


def test_negative_costs_are_rejected() -> None:
    with pytest.raises(ValidationError):
        SavedItem(name="Refund", cost=-50000)
    with pytest.raises(ValidationError):
        SavedItem(name="Refund", entryFee=-1)
    with pytest.raises(ValidationError):
        SavedItem(name="Refund", estimatedCost=-10)
