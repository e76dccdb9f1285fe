"""Tests for trip date-overlap checking."""

from datetime import date, datetime

import pytest

from backend.app.budget.allocator import calculate_budget_allocation
from backend.app.models.trip import SavedItem, TripBase, TripWindow
from backend.app.models.violations import ViolationSeverity
from backend.app.verification.overlap import check_date_overlap, parse_trip_date, ranges_overlap
from backend.app.verification.verifiers import has_blocking, run_verifiers, verify_budget, verify_dates


@pytest.fixture
def kandy() -> TripWindow:
    return TripWindow(
        destination="Kandy",
        trip_id="kandy-2026-01-10",
        start_date=date(2026, 1, 10),
        end_date=date(2026, 1, 15),
    )


def test_shared_boundary_day_is_an_overlap(kandy: TripWindow) -> None:
    conflict = check_date_overlap("2026-01-15", "2026-01-20", [kandy])

    assert conflict is not None
    assert conflict.destination == "Kandy"
    assert conflict.start_date == date(2026, 1, 10)
    assert conflict.trip_id == "kandy-2026-01-10"


def test_adjacent_trip_does_not_overlap(kandy: TripWindow) -> None:
    assert check_date_overlap(date(2026, 1, 16), date(2026, 1, 20), [kandy]) is None
    assert check_date_overlap(date(2026, 1, 1), date(2026, 1, 9), [kandy]) is None


def test_enclosing_range_overlaps(kandy: TripWindow) -> None:
    assert check_date_overlap(date(2026, 1, 1), date(2026, 2, 1), [kandy]) is not None


def test_malformed_existing_dates_are_skipped(kandy: TripWindow) -> None:
    broken = TripWindow(destination="Ella", start_date="not-a-date", end_date="2026-01-12")

    conflict = check_date_overlap("2026-01-11", "2026-01-12", [broken, kandy])

    assert conflict is not None
    assert conflict.destination == "Kandy"


def test_malformed_candidate_never_conflicts(kandy: TripWindow) -> None:
    assert check_date_overlap("soon", "2026-01-12", [kandy]) is None
    assert check_date_overlap(None, None, [kandy]) is None


def test_local_ghost_trip_is_ignored() -> None:
    """Test local trips without saved items are not real conflicts."""
    ghost = TripWindow(destination="Galle", start_date="2026-02-01", end_date="2026-02-03")

    assert check_date_overlap("2026-02-02", "2026-02-04", [], [ghost]) is None


def test_local_trip_with_items_conflicts() -> None:
    local = TripWindow(
        destination="Galle",
        start_date="2026-02-01",
        end_date="2026-02-03",
        saved_items=[{"name": "Galle Fort"}],
    )

    conflict = check_date_overlap("2026-02-02", "2026-02-04", [], [local])

    assert conflict is not None
    assert conflict.destination == "Galle"


def test_persisted_trip_counts_without_items(kandy: TripWindow) -> None:
    assert kandy.saved_items == []
    assert check_date_overlap("2026-01-12", "2026-01-12", [kandy]) is not None


def test_ignored_trip_is_excluded(kandy: TripWindow) -> None:
    conflict = check_date_overlap(
        "2026-01-11", "2026-01-13", [kandy], ignore_trip_id="kandy-2026-01-10"
    )

    assert conflict is None


def test_parse_trip_date_variants() -> None:
    assert parse_trip_date("2026-01-10T08:30:00Z") == date(2026, 1, 10)
    assert parse_trip_date(datetime(2026, 1, 10, 23, 0)) == date(2026, 1, 10)
    assert parse_trip_date(" 2026-01-10 ") == date(2026, 1, 10)
    assert parse_trip_date("10/01/2026") is None
    assert parse_trip_date(None) is None


def test_ranges_overlap_is_symmetric() -> None:
    a = (date(2026, 3, 1), date(2026, 3, 5))
    b = (date(2026, 3, 5), date(2026, 3, 9))

    assert ranges_overlap(*a, *b)
    assert ranges_overlap(*b, *a)


def test_verify_dates_blocking_violation(kandy: TripWindow) -> None:
    trip = TripBase(destination="Ella", start_date=date(2026, 1, 14), end_date=date(2026, 1, 18))

    violations = verify_dates(trip, [kandy])

    assert len(violations) == 1
    assert violations[0].code == "DATE_OVERLAP"
    assert violations[0].severity == ViolationSeverity.BLOCKING
    assert "Kandy" in violations[0].message
    assert violations[0].details["destination"] == "Kandy"
    assert has_blocking(violations)


def test_budget_violations_are_advisory() -> None:
    over = calculate_budget_allocation(
        total_budget=1000,
        duration=1,
        group_size=1,
        saved_items=[SavedItem(name="Safari", cost=5000)],
    )
    near = calculate_budget_allocation(
        total_budget=1000,
        duration=1,
        group_size=1,
        saved_items=[SavedItem(name="Safari", cost=850)],
    )
    fine = calculate_budget_allocation(total_budget=1000, duration=1, group_size=1)

    assert verify_budget(over)[0].code == "OVER_BUDGET"
    assert verify_budget(near)[0].code == "NEAR_BUDGET"
    assert verify_budget(fine) == []
    assert not has_blocking(verify_budget(over))


def test_run_verifiers_puts_dates_first(kandy: TripWindow) -> None:
    trip = TripBase(destination="Ella", start_date=date(2026, 1, 14), end_date=date(2026, 1, 18))
    allocation = calculate_budget_allocation(
        total_budget=1000,
        duration=4,
        group_size=1,
        saved_items=[SavedItem(name="Safari", cost=5000)],
    )

    violations = run_verifiers(trip, allocation, [kandy])

    assert [v.code for v in violations] == ["DATE_OVERLAP", "OVER_BUDGET"]
