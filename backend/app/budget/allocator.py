"""Budget allocation across expense categories for Sri Lanka travel.

All money values are whole currency units (LKR by default). Allocations are
derived on demand from the trip and its saved items and never stored.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta

from backend.app.models.budget import (
    BudgetAlert,
    BudgetAllocation,
    BudgetFit,
    CategoryAllocation,
    CategoryInfo,
    CategorySpend,
    DayBudget,
    DayCategoryBudget,
    ExpenseSummary,
)
from backend.app.models.common import ExpenseCategory
from backend.app.models.trip import SavedItem
from backend.app.utils.money import round_half_up


class BudgetInputError(ValueError):
    """Trip parameters cannot produce an allocation."""


# Typical split for a Sri Lanka trip; default percentages sum to 100.
EXPENSE_CATEGORIES: dict[ExpenseCategory, CategoryInfo] = {
    ExpenseCategory.accommodation: CategoryInfo(
        label="Accommodation", icon="🏨", default_percentage=35, per_day_min=3000, per_day_max=50000
    ),
    ExpenseCategory.food: CategoryInfo(
        label="Food & Dining", icon="🍛", default_percentage=25, per_day_min=1500, per_day_max=10000
    ),
    ExpenseCategory.transportation: CategoryInfo(
        label="Transportation", icon="🚗", default_percentage=20, per_day_min=1000, per_day_max=15000
    ),
    ExpenseCategory.activities: CategoryInfo(
        label="Activities & Entry Fees",
        icon="🎫",
        default_percentage=15,
        per_day_min=500,
        per_day_max=10000,
    ),
    ExpenseCategory.misc: CategoryInfo(
        label="Miscellaneous", icon="💰", default_percentage=5, per_day_min=500, per_day_max=5000
    ),
}

# (trigger interests, points, from category, to category)
INTEREST_ADJUSTMENTS: list[tuple[frozenset[str], int, ExpenseCategory, ExpenseCategory]] = [
    (
        frozenset({"adventure", "wildlife"}),
        5,
        ExpenseCategory.accommodation,
        ExpenseCategory.activities,
    ),
    (frozenset({"food", "culture"}), 5, ExpenseCategory.misc, ExpenseCategory.food),
]

ACCOMMODATION_KEYWORDS = ("hotel", "resort", "stay", "homestay", "hostel", "lodge", "inn", "villa")
TRANSPORTATION_KEYWORDS = ("taxi", "transfer", "train", "bus", "transport", "tuk-tuk")
FOOD_KEYWORDS = (
    "restaurant",
    "ice cream",
    "cafe",
    "café",
    "coffee",
    "bakery",
    "bistro",
    "dining",
    "eatery",
    "tiffin",
    "food court",
    "juice",
    "dessert",
    "kottu",
    "rice & curry",
)

WARNING_THRESHOLD = 80
DANGER_THRESHOLD = 100


def adjusted_percentages(interests: Iterable[str]) -> dict[ExpenseCategory, int]:
    """Category percentages after interest-based shifts, each floored at 0."""
    interest_set = set(interests)
    percentages = {key: info.default_percentage for key, info in EXPENSE_CATEGORIES.items()}

    for triggers, points, source, target in INTEREST_ADJUSTMENTS:
        if interest_set & triggers:
            percentages[target] += points
            percentages[source] -= points

    return {key: max(0, pct) for key, pct in percentages.items()}


def committed_expenses(
    saved_items: Sequence[SavedItem], group_size: int
) -> tuple[int, int]:
    """Sum already-saved spend as (activities, food), scaled by group size."""
    activity_cost: float = 0
    food_cost: float = 0
    for item in saved_items:
        cost = item.tracked_cost * group_size
        if item.type == "restaurant":
            food_cost += cost
        else:
            activity_cost += cost
    return round_half_up(activity_cost), round_half_up(food_cost)


def calculate_budget_allocation(
    *,
    total_budget: int,
    duration: int,
    group_size: int,
    interests: Iterable[str] = (),
    saved_items: Sequence[SavedItem] = (),
    destination: str | None = None,
    start_date: date | None = None,
) -> BudgetAllocation:
    """Split a trip budget across expense categories and days.

    Activities and food draw on their full percentage of the total budget
    minus what is already committed to them (floored at 0). The other
    categories share what is left after all committed spend is deducted, so
    their totals go negative when the trip is over budget.

    Args:
        total_budget: Total trip budget for the whole group
        duration: Trip length in days
        group_size: Number of travellers
        interests: Interest tags that shift percentages
        saved_items: Items already added to the trip
        destination: Trip destination (informational)
        start_date: First day of the trip, used to date the daily breakdown

    Returns:
        BudgetAllocation snapshot

    Raises:
        BudgetInputError: If duration or group size is below 1
    """
    if duration < 1:
        raise BudgetInputError("duration must be at least 1 day")
    if group_size < 1:
        raise BudgetInputError("group_size must be at least 1")

    activity_cost, food_cost = committed_expenses(saved_items, group_size)
    committed = activity_cost + food_cost
    remaining_budget = total_budget - committed
    percentages = adjusted_percentages(interests)

    categories: dict[ExpenseCategory, CategoryAllocation] = {}
    for key, info in EXPENSE_CATEGORIES.items():
        pct = percentages[key]
        if key == ExpenseCategory.activities:
            category_budget = max(0.0, total_budget * pct / 100 - activity_cost)
            allocated = activity_cost
        elif key == ExpenseCategory.food:
            category_budget = max(0.0, total_budget * pct / 100 - food_cost)
            allocated = food_cost
        else:
            category_budget = remaining_budget * pct / 100
            allocated = 0

        daily_budget = category_budget / duration
        categories[key] = CategoryAllocation(
            **info.model_dump(exclude={"default_percentage"}),
            default_percentage=pct,
            total=round_half_up(category_budget),
            per_day=round_half_up(daily_budget),
            per_day_per_person=round_half_up(daily_budget / group_size),
            allocated=allocated,
            remaining=round_half_up(category_budget),
        )

    daily_breakdown = [
        DayBudget(
            day=day,
            date=(start_date + timedelta(days=day - 1)).isoformat() if start_date else None,
            categories={
                key: DayCategoryBudget(budget=cat.per_day, spent=0, remaining=cat.per_day)
                for key, cat in categories.items()
            },
            total=sum(cat.per_day for cat in categories.values()),
        )
        for day in range(1, duration + 1)
    ]

    per_person = total_budget / group_size
    utilization = round_half_up(committed / total_budget * 100) if total_budget > 0 else 0

    return BudgetAllocation(
        total_budget=total_budget,
        duration=duration,
        group_size=group_size,
        per_person=round_half_up(per_person),
        per_day=round_half_up(total_budget / duration),
        per_day_per_person=round_half_up(per_person / duration),
        percentages=percentages,
        categories=categories,
        daily_breakdown=daily_breakdown,
        committed_expenses=committed,
        remaining_budget=remaining_budget,
        utilization_percentage=utilization,
    )


def _name_matches(name: str, keywords: Iterable[str]) -> bool:
    return any(keyword in name for keyword in keywords)


def categorize_expense(item: SavedItem) -> ExpenseCategory:
    """Classify an item into a budget category.

    Explicit type/category fields win, then name keywords. Anything
    unmatched counts as an activity.
    """
    if item.type == "restaurant" or item.category == "food":
        return ExpenseCategory.food

    name = item.name.lower()

    if item.category == "accommodation" or _name_matches(name, ACCOMMODATION_KEYWORDS):
        return ExpenseCategory.accommodation

    if item.category == "transportation" or _name_matches(name, TRANSPORTATION_KEYWORDS):
        return ExpenseCategory.transportation

    if _name_matches(name, FOOD_KEYWORDS):
        return ExpenseCategory.food

    return ExpenseCategory.activities


def get_category_info(key: str) -> CategoryInfo:
    """Static info for a category key; unknown keys map to misc."""
    try:
        return EXPENSE_CATEGORIES[ExpenseCategory(key)]
    except ValueError:
        return EXPENSE_CATEGORIES[ExpenseCategory.misc]


def get_all_categories() -> dict[ExpenseCategory, CategoryInfo]:
    """All expense categories keyed by category."""
    return dict(EXPENSE_CATEGORIES)


def check_budget_fit(
    *,
    item: SavedItem,
    current_allocation: BudgetAllocation,
    category: str,
    currency: str = "LKR",
) -> BudgetFit:
    """Check whether an item fits the remaining budget of a category.

    Does not touch the allocation; callers that accept the item recompute it.
    """
    item_cost = round_half_up(item.tracked_cost)

    try:
        category_data = current_allocation.categories.get(ExpenseCategory(category))
    except ValueError:
        category_data = None

    if category_data is None:
        return BudgetFit(fits=True, item_cost=item_cost)

    remaining = category_data.remaining
    fits = item_cost <= remaining
    if fits:
        return BudgetFit(fits=True, item_cost=item_cost, remaining_budget=remaining)

    over_by = item_cost - remaining
    return BudgetFit(
        fits=False,
        item_cost=item_cost,
        remaining_budget=remaining,
        over_budget_by=over_by,
        warning=f"This item exceeds your {category_data.label} budget by {currency} {over_by:,}",
        suggestion="Consider adjusting your budget allocation or choosing a more affordable option.",
    )


def summarize_expenses(total_budget: int, saved_items: Sequence[SavedItem]) -> ExpenseSummary:
    """Tracked spend per category for a trip's saved items."""
    spent: dict[ExpenseCategory, float] = {key: 0 for key in EXPENSE_CATEGORIES}
    names: dict[ExpenseCategory, list[str]] = {key: [] for key in EXPENSE_CATEGORIES}
    for item in saved_items:
        key = categorize_expense(item)
        spent[key] += item.tracked_cost
        names[key].append(item.name)

    by_category = {
        key: CategorySpend(spent=round_half_up(spent[key]), items=names[key])
        for key in EXPENSE_CATEGORIES
    }

    total_spent = sum(spend.spent for spend in by_category.values())
    percentage_used = (
        round_half_up(total_spent / total_budget * 100) if total_budget > 0 else 0
    )

    return ExpenseSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        remaining=total_budget - total_spent,
        percentage_used=percentage_used,
        by_category=by_category,
    )


def budget_alerts(
    total_budget: int,
    spent_by_category: Mapping[ExpenseCategory, int],
    allocation: BudgetAllocation | None = None,
    currency: str = "LKR",
) -> list[BudgetAlert]:
    """Warnings for overall and per-category spend.

    ``warning`` from 80% of a budget, ``danger`` from 100%. Alerts are
    informational; nothing is blocked.
    """
    alerts: list[BudgetAlert] = []
    if total_budget <= 0:
        return alerts

    total_spent = sum(spent_by_category.values())
    overall = round_half_up(total_spent / total_budget * 100)

    if overall >= DANGER_THRESHOLD:
        alerts.append(
            BudgetAlert(
                type="danger",
                category="overall",
                message=f"Over budget by {currency} {total_spent - total_budget:,}!",
                percentage=overall,
            )
        )
    elif overall >= WARNING_THRESHOLD:
        alerts.append(
            BudgetAlert(
                type="warning",
                category="overall",
                message=f"Approaching budget limit ({overall}% used)",
                percentage=overall,
            )
        )

    if allocation is None:
        return alerts

    for key, spent in spent_by_category.items():
        category = allocation.categories.get(key)
        if category is None or category.total <= 0:
            continue

        pct = round_half_up(spent / category.total * 100)
        if pct >= DANGER_THRESHOLD:
            alerts.append(
                BudgetAlert(
                    type="danger",
                    category=key.value,
                    message=(
                        f"{category.label} over budget by {currency} {spent - category.total:,}"
                    ),
                    percentage=pct,
                )
            )
        elif pct >= WARNING_THRESHOLD:
            alerts.append(
                BudgetAlert(
                    type="warning",
                    category=key.value,
                    message=f"{category.label} at {pct}%",
                    percentage=pct,
                )
            )

    return alerts
