"""Violation models - trip validity problems found during verification."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# JSON-serializable value types for violation details
JsonValue = str | int | float | bool | None | dict[str, Any] | list[Any]


class ViolationSeverity(str, Enum):
    """Severity levels for trip violations."""

    ADVISORY = "advisory"
    BLOCKING = "blocking"


class ViolationKind(str, Enum):
    """Categories of trip checks."""

    BUDGET = "budget"
    DATES = "dates"


class Violation(BaseModel):
    """A trip validity problem.

    Advisory violations are shown as inline warnings and the user may proceed;
    blocking ones must be resolved first.
    """

    kind: ViolationKind
    code: str  # Machine-usable short code, e.g., "DATE_OVERLAP"
    message: str  # Human-readable description (1-2 sentences)
    severity: ViolationSeverity
    details: dict[str, JsonValue] = Field(default_factory=dict)
