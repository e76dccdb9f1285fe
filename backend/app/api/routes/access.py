"""Feature access endpoints - what the caller may use and how much is left."""

from fastapi import APIRouter, HTTPException, status

from backend.app.api.dependencies import ContextDep, GateDep
from backend.app.models.access import FeatureDecision, UsageCounter
from backend.app.models.common import CamelModel

router = APIRouter(prefix="/access", tags=["access"])


class FeatureAccessResponse(CamelModel):
    """Gate decision plus quota figures for one feature."""

    feature: str
    decision: FeatureDecision
    remaining: int | None = None
    max_usage: int | None = None
    usage: UsageCounter | None = None


class UsageRecordedResponse(CamelModel):
    """Response for POST /access/{feature}/usage."""

    feature: str
    count: int | None
    remaining: int | None
    usage: UsageCounter | None = None


@router.get("", response_model=dict[str, FeatureDecision])
async def list_access(ctx: ContextDep, gate: GateDep) -> dict[str, FeatureDecision]:
    """Decisions for every feature of the caller's audience."""
    return gate.summary(ctx)


@router.get("/{feature}", response_model=FeatureAccessResponse)
async def get_access(feature: str, ctx: ContextDep, gate: GateDep) -> FeatureAccessResponse:
    """Check one feature without consuming quota."""
    return FeatureAccessResponse(
        feature=feature,
        decision=gate.can_use_feature(ctx, feature),
        remaining=gate.get_remaining_usage(ctx, feature),
        max_usage=gate.get_max_usage(ctx, feature),
        usage=gate.get_usage(ctx, feature),
    )


@router.post("/{feature}/usage", response_model=UsageRecordedResponse)
async def record_usage(feature: str, ctx: ContextDep, gate: GateDep) -> UsageRecordedResponse:
    """Count one use of a metered feature performed elsewhere.

    Raises:
        HTTPException: 404 if the feature is not metered for this caller
    """
    count = gate.record_usage(ctx, feature)
    if count is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Feature {feature} is not metered",
        )

    return UsageRecordedResponse(
        feature=feature,
        count=count,
        remaining=gate.get_remaining_usage(ctx, feature),
        usage=gate.get_usage(ctx, feature),
    )
