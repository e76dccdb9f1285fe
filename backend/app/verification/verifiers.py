"""Verification functions for trip dates and budget."""

from collections.abc import Iterable

from backend.app.budget.allocator import DANGER_THRESHOLD, WARNING_THRESHOLD
from backend.app.models.budget import BudgetAllocation
from backend.app.models.trip import TripBase, TripWindow
from backend.app.models.violations import Violation, ViolationKind, ViolationSeverity
from backend.app.verification.overlap import check_date_overlap


def verify_dates(
    trip: TripBase,
    existing_trips: Iterable[TripWindow],
    local_trips: Iterable[TripWindow] = (),
    ignore_trip_id: str | None = None,
) -> list[Violation]:
    """Verify that the trip does not collide with another trip.

    Args:
        trip: Candidate trip
        existing_trips: Persisted trips of the same user
        local_trips: Unsynced local trip metadata
        ignore_trip_id: ID of the trip being edited

    Returns:
        Empty list, or a single BLOCKING violation naming the conflicting trip
    """
    conflict = check_date_overlap(
        trip.start_date,
        trip.end_date,
        existing_trips,
        local_trips,
        ignore_trip_id=ignore_trip_id,
    )
    if conflict is None:
        return []

    return [
        Violation(
            kind=ViolationKind.DATES,
            code="DATE_OVERLAP",
            message=(
                f"These dates overlap with your trip to {conflict.destination} "
                f"({conflict.start_date} to {conflict.end_date})."
            ),
            severity=ViolationSeverity.BLOCKING,
            details=conflict.model_dump(mode="json", by_alias=True),
        )
    ]


def verify_budget(allocation: BudgetAllocation) -> list[Violation]:
    """Verify committed spend against the trip budget.

    Over-budget trips are surfaced but never blocked.

    Args:
        allocation: Current budget allocation

    Returns:
        List of violations (empty if utilization is below the warning threshold)
    """
    utilization = allocation.utilization_percentage
    details: dict = {
        "committed": allocation.committed_expenses,
        "total_budget": allocation.total_budget,
        "utilization_percentage": utilization,
    }

    # Case 1: Past the budget
    if utilization > DANGER_THRESHOLD:
        return [
            Violation(
                kind=ViolationKind.BUDGET,
                code="OVER_BUDGET",
                message="Saved items cost more than the total trip budget.",
                severity=ViolationSeverity.ADVISORY,
                details=details,
            )
        ]

    # Case 2: Approaching the budget
    if utilization >= WARNING_THRESHOLD:
        return [
            Violation(
                kind=ViolationKind.BUDGET,
                code="NEAR_BUDGET",
                message="Saved items already use most of the trip budget.",
                severity=ViolationSeverity.ADVISORY,
                details=details,
            )
        ]

    return []


def run_verifiers(
    trip: TripBase,
    allocation: BudgetAllocation | None,
    existing_trips: Iterable[TripWindow] = (),
    local_trips: Iterable[TripWindow] = (),
    ignore_trip_id: str | None = None,
) -> list[Violation]:
    """Run all trip verifiers, blocking violations first."""
    violations = verify_dates(trip, existing_trips, local_trips, ignore_trip_id)
    if allocation is not None:
        violations.extend(verify_budget(allocation))
    return violations


def has_blocking(violations: Iterable[Violation]) -> bool:
    """True if any violation must be resolved before proceeding."""
    return any(v.severity == ViolationSeverity.BLOCKING for v in violations)
