"""AI recommendation and chat endpoints - quota-gated proxy to the provider."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.app.access.limits import AI_CHAT, AI_RECOMMENDATIONS, PACKING_LIST
from backend.app.api.dependencies import (
    ContextDep,
    GateDep,
    RecommendationServiceDep,
    enforce_rate_limit,
    raise_for_decision,
)
from backend.app.models.recommendations import (
    ChatRequest,
    ChatResponse,
    PackingListRequest,
    PackingListResponse,
    RecommendationRequest,
    RecommendationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/recommendations",
    tags=["recommendations"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.post("", response_model=RecommendationResponse)
async def get_recommendations(
    request: RecommendationRequest,
    ctx: ContextDep,
    gate: GateDep,
    service: RecommendationServiceDep,
    force_refresh: bool = Query(False, description="Skip the cache and fetch fresh results"),
) -> RecommendationResponse:
    """Recommendations for a trip.

    Cached results are served without using quota. A fresh fetch consumes
    one ``aiRecommendations`` use, given back if the fetch fails.

    Raises:
        HTTPException: 429 when the quota is used up (with ``useCache``),
            502 if the provider call fails
    """
    if not force_refresh:
        cached = service.peek(request)
        if cached is not None:
            return cached

    decision = gate.try_consume(ctx, AI_RECOMMENDATIONS)
    raise_for_decision(decision)

    try:
        return await service.get_recommendations(request, force_refresh=force_refresh)
    except Exception as e:
        gate.release(ctx, AI_RECOMMENDATIONS, decision.claim)
        logger.error(f"Recommendation fetch failed for {request.destination}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate recommendations",
        ) from e


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    ctx: ContextDep,
    gate: GateDep,
    service: RecommendationServiceDep,
) -> ChatResponse:
    """Ask the AI travel concierge a question.

    Raises:
        HTTPException: 429 when the chat quota is used up, 502 if the
            provider call fails (the use is given back)
    """
    decision = gate.try_consume(ctx, AI_CHAT)
    raise_for_decision(decision)

    try:
        return await service.chat(request)
    except Exception as e:
        gate.release(ctx, AI_CHAT, decision.claim)
        logger.error(f"Chat failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to answer chat message",
        ) from e


@router.post("/packing-list", response_model=PackingListResponse)
async def packing_list(
    request: PackingListRequest,
    ctx: ContextDep,
    gate: GateDep,
    service: RecommendationServiceDep,
) -> PackingListResponse:
    """Generate a packing list for a trip.

    Signed-in users may generate a list a few times per trip (keyed by
    ``tripId``, or the destination when the trip is not saved yet).

    Raises:
        HTTPException: 403 for guests, 429 when the trip's regenerations are
            used up, 502 if the provider call fails
    """
    subject = request.trip_id or request.destination
    decision = gate.try_consume_generation(ctx, PACKING_LIST, subject)
    raise_for_decision(decision)

    try:
        response = await service.packing_list(request)
    except Exception as e:
        gate.release_generation(ctx, PACKING_LIST, subject)
        logger.error(f"Packing list generation failed for {request.destination}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate packing list",
        ) from e

    response.remaining = decision.remaining
    return response
