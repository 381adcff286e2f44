"""Character budget tracking for size-bounded tool responses.

Consumers render results one at a time in rank order, ask
:meth:`ResponseTruncator.can_add_result` whether the fragment fits, and either
consume it or stop. Nothing after the first rejected fragment is considered,
so the response always holds the top-N results that fit.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Iterable

from obsidian_search.constants import (
    BUDGET_SATURATION,
    DEFAULT_ESTIMATION_RATIO,
    DEFAULT_MAX_CHARACTERS,
    DEFAULT_MAX_TOKENS,
)
from obsidian_search.data_models import ResponseFormat
from obsidian_search.errors import BudgetExceededError, InvalidTokenConfigError


@dataclass(frozen=True)
class TokenBudgetConfig:
    """Response size limits. ``estimation_ratio`` is characters per token."""

    max_tokens: int = DEFAULT_MAX_TOKENS
    max_characters: int = DEFAULT_MAX_CHARACTERS
    estimation_ratio: int = DEFAULT_ESTIMATION_RATIO

    def __post_init__(self) -> None:
        if self.max_characters <= 0:
            raise InvalidTokenConfigError("max_characters must be positive")
        if self.max_tokens <= 0:
            raise InvalidTokenConfigError("max_tokens must be positive")
        if self.estimation_ratio <= 0:
            raise InvalidTokenConfigError("estimation_ratio must be positive")

    @classmethod
    def from_characters(cls, max_characters: int, estimation_ratio: int = DEFAULT_ESTIMATION_RATIO) -> TokenBudgetConfig:
        if estimation_ratio <= 0:
            raise InvalidTokenConfigError("estimation_ratio must be positive")
        return cls(
            max_tokens=max(1, max_characters // estimation_ratio),
            max_characters=max_characters,
            estimation_ratio=estimation_ratio,
        )


@dataclass(frozen=True)
class TruncationMetadata:
    """Read-only snapshot describing how a response was cut."""

    truncated: bool
    shown_count: int
    total_count: int
    limit_type: str
    format_used: ResponseFormat
    auto_downgraded: bool
    estimated_tokens: int
    estimated_characters: int
    suggestion: str

    def as_payload(self) -> dict[str, Any]:
        return asdict(self)


def standard_suggestion(remaining: int) -> str:
    return (
        f"{remaining} more results exist: "
        "raise max_results (up to 100) or add filters to narrow the search."
    )


def budget_suggestion() -> str:
    return (
        "The response size limit was reached. "
        "Refine the query or use format='concise' for more specific results."
    )


def downgraded_suggestion() -> str:
    return (
        "Results are in concise format (auto-downgraded to fit the response size limit). "
        "Use more specific filters to reduce the result count."
    )


class ResponseTruncator:
    """Tracks consumed characters against an immutable budget."""

    def __init__(self, config: TokenBudgetConfig | None = None) -> None:
        self.config = config if config is not None else TokenBudgetConfig()
        self.consumed = 0

    @property
    def remaining_budget(self) -> int:
        return max(0, self.config.max_characters - self.consumed)

    @property
    def total_budget(self) -> int:
        return self.config.max_characters

    def can_add_result(self, fragment: str) -> bool:
        """Return True if ``fragment`` fits in the remaining budget."""
        return self.consumed + len(fragment) <= self.config.max_characters

    def consume_budget(self, fragment: str) -> None:
        """Charge ``fragment`` against the budget.

        Callers must check :meth:`can_add_result` first.

        Raises:
            BudgetExceededError: If the fragment does not fit.
        """
        if not self.can_add_result(fragment):
            raise BudgetExceededError(attempted=len(fragment), available=self.remaining_budget)
        self.consumed += len(fragment)

    def estimate_tokens(self, text: str) -> int:
        return math.ceil(len(text) / self.config.estimation_ratio)

    def is_saturated(self) -> bool:
        return self.consumed >= self.config.max_characters * BUDGET_SATURATION

    def get_truncation_info(
        self,
        shown_count: int,
        total_count: int,
        format_used: ResponseFormat = "detailed",
        auto_downgraded: bool = False,
    ) -> TruncationMetadata:
        truncated = shown_count < total_count
        if not truncated:
            limit_type = "result"
        elif self.is_saturated():
            limit_type = "both"
        else:
            limit_type = "token"

        if auto_downgraded:
            suggestion = downgraded_suggestion()
        elif not truncated:
            suggestion = "All results are shown."
        elif self.is_saturated():
            suggestion = budget_suggestion()
        else:
            suggestion = standard_suggestion(total_count - shown_count)

        return TruncationMetadata(
            truncated=truncated,
            shown_count=shown_count,
            total_count=total_count,
            limit_type=limit_type,
            format_used=format_used,
            auto_downgraded=auto_downgraded,
            estimated_tokens=math.ceil(self.consumed / self.config.estimation_ratio),
            estimated_characters=self.consumed,
            suggestion=suggestion,
        )

    def reset(self) -> None:
        self.consumed = 0


def take_while_fits(truncator: ResponseTruncator, fragments: Iterable[str], separator: str = "") -> list[str]:
    """Consume fragments in order until the first one that does not fit.

    Each accepted fragment is charged together with ``separator``. Rendering is
    lazy, so fragments after the first rejection are never produced.
    """
    accepted: list[str] = []
    for fragment in fragments:
        charged = fragment + separator
        if not truncator.can_add_result(charged):
            break
        truncator.consume_budget(charged)
        accepted.append(fragment)
    return accepted
