"""Pricing and budget endpoints - stateless calculations over request data."""

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from backend.app.budget.allocator import (
    BudgetInputError,
    calculate_budget_allocation,
    categorize_expense,
    check_budget_fit,
    get_all_categories,
)
from backend.app.config import get_settings
from backend.app.models.budget import BudgetAllocation, BudgetFit, CategoryInfo, PriceDisplay
from backend.app.models.common import CamelModel, ExpenseCategory
from backend.app.models.trip import SavedItem
from backend.app.pricing.table import get_price_display

router = APIRouter(tags=["budget"])


class AllocationRequest(CamelModel):
    """Request body for POST /budget/allocation."""

    total_budget: int = Field(..., ge=0)
    duration: int
    group_size: int
    interests: list[str] = Field(default_factory=list)
    saved_items: list[SavedItem] = Field(default_factory=list)
    destination: str | None = None


class CategorizeResponse(CamelModel):
    """Response for POST /budget/categorize."""

    category: ExpenseCategory
    info: CategoryInfo


class FitRequest(CamelModel):
    """Request body for POST /budget/fit."""

    item: SavedItem
    current_allocation: BudgetAllocation
    category: str


@router.post("/pricing/price", response_model=PriceDisplay)
async def price_item(item: SavedItem) -> PriceDisplay:
    """Exact or estimated price of an item, with display text."""
    return get_price_display(item, currency=get_settings().currency)


@router.get("/budget/categories", response_model=dict[ExpenseCategory, CategoryInfo])
async def list_categories() -> dict[ExpenseCategory, CategoryInfo]:
    """Static info for every expense category."""
    return get_all_categories()


@router.post("/budget/allocation", response_model=BudgetAllocation)
async def allocate(request: AllocationRequest) -> BudgetAllocation:
    """Split a budget across categories and days.

    Raises:
        HTTPException: 422 if duration or group size is below 1
    """
    try:
        return calculate_budget_allocation(
            total_budget=request.total_budget,
            duration=request.duration,
            group_size=request.group_size,
            interests=request.interests,
            saved_items=request.saved_items,
            destination=request.destination,
        )
    except BudgetInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e)) from e


@router.post("/budget/categorize", response_model=CategorizeResponse)
async def categorize(item: SavedItem) -> CategorizeResponse:
    """Budget category an item's cost is tracked under."""
    category = categorize_expense(item)
    return CategorizeResponse(category=category, info=get_all_categories()[category])


@router.post("/budget/fit", response_model=BudgetFit)
async def fit(request: FitRequest) -> BudgetFit:
    """Check whether an item fits its category's remaining budget (advisory)."""
    return check_budget_fit(
        item=request.item,
        current_allocation=request.current_allocation,
        category=request.category,
        currency=get_settings().currency,
    )
