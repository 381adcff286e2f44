"""Clamp-and-record validation for result limits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from obsidian_search.constants import DEFAULT_SEARCH_RESULTS, MAX_RESULTS_MAX, MAX_RESULTS_MIN


@dataclass(frozen=True)
class MaxResultsValidation:
    """A limit constrained to the allowed range, with the caller's value if it changed."""

    value: int
    adjusted: bool
    original_value: Optional[int] = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"value": self.value, "adjusted": self.adjusted}
        if self.adjusted:
            payload["original_value"] = self.original_value
        return payload


def validate_max_results(
    value: Optional[int],
    default: int = DEFAULT_SEARCH_RESULTS,
    minimum: int = MAX_RESULTS_MIN,
    maximum: int = MAX_RESULTS_MAX,
) -> MaxResultsValidation:
    """Constrain ``value`` to ``[minimum, maximum]``.

    Examples:
        >>> validate_max_results(-5)
        MaxResultsValidation(value=1, adjusted=True, original_value=-5)
        >>> validate_max_results(None)
        MaxResultsValidation(value=25, adjusted=False, original_value=None)
    """
    if value is None:
        return MaxResultsValidation(value=default, adjusted=False)
    if value < minimum:
        return MaxResultsValidation(value=minimum, adjusted=True, original_value=value)
    if value > maximum:
        return MaxResultsValidation(value=maximum, adjusted=True, original_value=value)
    return MaxResultsValidation(value=value, adjusted=False)
