"""Places that must never be recommended, e.g. permanently closed venues."""

from typing import Any

CLOSED_ESTABLISHMENTS: tuple[str, ...] = (
    "ozo kandy sri lanka",
    "ozo kandy",
)


def is_blacklisted(name: str | None, blacklist: tuple[str, ...] = CLOSED_ESTABLISHMENTS) -> bool:
    """Whether a place name matches a blacklisted one.

    Matching is case-insensitive and works both ways, so "OZO Kandy Hotel"
    and "Ozo" both match "ozo kandy". Empty names never match.
    """
    lower = str(name or "").strip().lower()
    if not lower:
        return False
    return any(closed in lower or lower in closed for closed in blacklist)


def filter_blacklisted(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop items whose ``name`` is blacklisted."""
    return [item for item in items if not is_blacklisted(item.get("name"))]
