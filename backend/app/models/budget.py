"""Budget models - derived allocation snapshots, never persisted."""

from typing import Literal

from pydantic import Field

from backend.app.models.common import CamelModel, ExpenseCategory


class CategoryInfo(CamelModel):
    """Static description of an expense category."""

    label: str
    icon: str
    default_percentage: int
    per_day_min: int
    per_day_max: int


class CategoryAllocation(CategoryInfo):
    """Budget assigned to one category.

    ``default_percentage`` here is the percentage after interest adjustments.
    """

    total: int
    per_day: int
    per_day_per_person: int
    allocated: int
    remaining: int


class DayCategoryBudget(CamelModel):
    """One category's share of a single day."""

    budget: int
    spent: int = 0
    remaining: int


class DayBudget(CamelModel):
    """Seeded spend tracker for a single day."""

    day: int
    date: str | None = None
    categories: dict[ExpenseCategory, DayCategoryBudget]
    total: int


class BudgetAllocation(CamelModel):
    """Snapshot of how a trip budget is split across categories."""

    total_budget: int
    duration: int
    group_size: int
    per_person: int
    per_day: int
    per_day_per_person: int
    percentages: dict[ExpenseCategory, int]
    categories: dict[ExpenseCategory, CategoryAllocation]
    daily_breakdown: list[DayBudget]
    committed_expenses: int
    remaining_budget: int
    utilization_percentage: int


class BudgetFit(CamelModel):
    """Whether a candidate item fits a category's remaining budget."""

    fits: bool
    item_cost: int = 0
    remaining_budget: int | None = None
    over_budget_by: int = 0
    warning: str | None = None
    suggestion: str | None = None


class BudgetAlert(CamelModel):
    """Warning raised when spend approaches or exceeds a budget."""

    type: Literal["warning", "danger"]
    category: str  # "overall" or an ExpenseCategory value
    message: str
    percentage: int


class CategorySpend(CamelModel):
    """Spend tracked against one category."""

    spent: int = 0
    items: list[str] = Field(default_factory=list)


class ExpenseSummary(CamelModel):
    """Totals of tracked spend for a trip."""

    total_budget: int
    total_spent: int
    remaining: int
    percentage_used: int
    by_category: dict[ExpenseCategory, CategorySpend]


class PriceRange(CamelModel):
    """Inclusive price range in local currency."""

    min: int
    max: int


class PriceInfo(CamelModel):
    """Exact price or estimated range for an item."""

    exact: int | None = None
    range: PriceRange | None = None
    is_estimate: bool
    is_free: bool


class PriceDisplay(CamelModel):
    """Display-ready price text plus the underlying price info."""

    text: str
    is_estimate: bool
    is_free: bool
    price_info: PriceInfo
