"""Budget-aware search responses for the MCP tool layer."""

from __future__ import annotations

import logging
from typing import Any, Optional

from obsidian_search.constants import MIN_MAX_CHARACTERS, NOTICE_RESERVE
from obsidian_search.core.document_store import VaultDocumentStore
from obsidian_search.core.natural_language import NaturalLanguageProcessor
from obsidian_search.core.response_truncator import (
    ResponseTruncator,
    TokenBudgetConfig,
    TruncationMetadata,
    take_while_fits,
)
from obsidian_search.core.result_formatter import RESULT_SEPARATOR, format_result, frame_response
from obsidian_search.core.search_engine import SearchEngine, SearchOutcome
from obsidian_search.core.validation import MaxResultsValidation
from obsidian_search.core.vault_operations import ensure_vault_ready
from obsidian_search.data_models import ResponseFormat, SearchRequest, VaultMetadata
from obsidian_search.errors import InvalidTokenConfigError

logger = logging.getLogger(__name__)


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def body_budget(budget: TokenBudgetConfig) -> TokenBudgetConfig:
    """Budget left for the rendered body once the notice reserve is held back.

    The truncation notice and heading are written outside the budget loop, so
    reserving room for them keeps the whole response within ``max_characters``.

    Raises:
        InvalidTokenConfigError: If ``max_characters`` leaves no room for a body.
    """
    if budget.max_characters < MIN_MAX_CHARACTERS:
        raise InvalidTokenConfigError(
            f"max_characters must be at least {MIN_MAX_CHARACTERS} to fit the truncation notice; "
            f"got {budget.max_characters}"
        )
    available = budget.max_characters - NOTICE_RESERVE
    return TokenBudgetConfig.from_characters(available, budget.estimation_ratio)


def _render(
    outcome: SearchOutcome,
    vault: VaultMetadata,
    truncator: ResponseTruncator,
    format: ResponseFormat,
) -> tuple[list[str], int]:
    """Run the accept-or-stop loop; return accepted fragments and shown result count."""
    fragments: list[str] = []
    if outcome.interpretation is not None:
        preamble = NaturalLanguageProcessor.format_interpretation(outcome.interpretation)
        fragments.extend(take_while_fits(truncator, [preamble], RESULT_SEPARATOR))

    rendered = (
        format_result(index, result, vault.name, format)
        for index, result in enumerate(outcome.results, start=1)
    )
    accepted = take_while_fits(truncator, rendered, RESULT_SEPARATOR)
    return fragments + accepted, len(accepted)


# ==============================================================================
# SEARCH OPERATIONS
# ==============================================================================


def execute_search(
    vault: VaultMetadata,
    request: SearchRequest,
    format: ResponseFormat = "detailed",
    budget: Optional[TokenBudgetConfig] = None,
    auto_downgrade: bool = False,
    max_results_validation: Optional[MaxResultsValidation] = None,
    engine: Optional[SearchEngine] = None,
    store: Optional[VaultDocumentStore] = None,
) -> dict[str, Any]:
    """Search a vault and render the ranked results within a character budget.

    Args:
        vault: Vault metadata.
        request: Resolved search request (entry mode, filters, ordering, cap).
        format: ``"detailed"`` (default) or ``"concise"`` result rendering.
        budget: Response size limits; defaults to :class:`TokenBudgetConfig`.
        auto_downgrade: Re-render in concise form when detailed output truncates.
        max_results_validation: Outcome of clamping the caller's ``max_results``,
            echoed back in the payload.
        engine: Search engine to use; one over ``store`` is created when omitted.
        store: Document store to read from; created for ``vault`` when omitted.

    Returns:
        A dictionary containing the vault name, the response ``content`` text and
        ``truncation`` metadata (``None`` when every result was shown).

    Raises:
        FileNotFoundError: If the vault directory is not accessible.
        ValueError: If the request contains an invalid pattern or expression.
    """
    ensure_vault_ready(vault)
    if engine is None:
        engine = SearchEngine(store if store is not None else VaultDocumentStore(vault))
    config = budget if budget is not None else TokenBudgetConfig()

    outcome = engine.run(request)
    total = outcome.total_count

    truncator = ResponseTruncator(body_budget(config))
    fragments, shown = _render(outcome, vault, truncator, format)
    truncation: TruncationMetadata = truncator.get_truncation_info(shown, total, format)

    if truncation.truncated and auto_downgrade and format == "detailed":
        truncator.reset()
        concise_fragments, concise_shown = _render(outcome, vault, truncator, "concise")
        if concise_shown > shown:
            fragments, shown = concise_fragments, concise_shown
            truncation = truncator.get_truncation_info(shown, total, "concise", auto_downgraded=True)

    heading = f"Found {total} results:" if total else "No results found."
    if truncation.auto_downgraded and not truncation.truncated:
        heading = f"Found {total} results (concise format, to fit the response size limit):"
    content = frame_response(RESULT_SEPARATOR.join(fragments), truncation, heading)

    logger.info(
        "Rendered %d of %d results for vault '%s' (format=%s, truncated=%s)",
        shown,
        total,
        vault.name,
        truncation.format_used,
        truncation.truncated,
    )

    payload: dict[str, Any] = {
        "vault": vault.name,
        "content": content,
        "truncation": truncation.as_payload() if truncation.truncated or truncation.auto_downgraded else None,
        "total_count": total,
        "shown_count": shown,
    }
    if outcome.interpretation is not None:
        payload["interpretation"] = {
            "text": outcome.interpretation.text,
            "confidence": outcome.interpretation.confidence,
            "suggestions": list(outcome.interpretation.suggestions),
        }
    if max_results_validation is not None:
        payload["max_results"] = max_results_validation.as_payload()
    return payload
