"""Search tool for Obsidian vaults.

This module contains the MCP tool wrapper for vault search:
- search_vault: ranked free-text, glob or natural-language search with filters
"""
from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import Context

from obsidian_search.server import mcp
from obsidian_search.session import resolve_vault
from obsidian_search.config import get_document_store, get_response_budget
from obsidian_search.models import SearchVaultInput
from obsidian_search.core.search_operations import execute_search

logger = logging.getLogger(__name__)

# ==============================================================================
# SEARCH TOOLS
# ==============================================================================


@mcp.tool()
async def search_vault(
    input: SearchVaultInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Search a vault and return ranked results within the response size limit.

    Exactly one entry mode is used: ``pattern`` (glob over note paths) wins
    over ``natural_language`` (conversational phrase turned into filters),
    which wins over ``query`` (free text). With none of them, the filters
    alone select notes, ranked by recency.

    Args:
        input (SearchVaultInput): Validated input containing:
            - query / pattern / natural_language (str, optional): Entry mode
            - content_type, tags, category, folder, days, yaml_properties, ...: Filters
            - max_results (int, optional): 1-100, default 25; clamped, not rejected
            - sort_by (str): "relevance", "modified", "created" or "title"
            - format (str): "concise" or "detailed"
            - vault (str, optional): Vault name (omit to use active vault)
        ctx (Context, optional): FastMCP context for session state

    Returns:
        {
            "vault": str,
            "content": str,             # Markdown results, led by a notice when truncated
            "truncation": dict | None,  # shown_count, total_count, limit_type, suggestion, ...
            "total_count": int,
            "shown_count": int,
            "max_results": {"value": int, "adjusted": bool, "original_value": int}
        }

    Examples:
        - query="project plan" → notes containing the phrase
        - query="api OR graphql" → notes containing either word
        - content_type=["Reference"], max_results=10 → top 10 references
        - natural_language="Italian restaurants in Toronto"
        - pattern="Daily Notes/2025-*", format="concise"

    Error Handling:
        - ValidationError: Unknown sort_by or query_strategy, empty vault name
        - Invalid regular expression or glob → ValueError naming the problem
        - Vault missing on disk → FileNotFoundError with the path
        - Unreadable or malformed notes → skipped, search continues
    """
    metadata = resolve_vault(input.vault, ctx)
    validation = input.validated_max_results()
    if validation.adjusted:
        logger.info(
            "Clamped max_results from %s to %s",
            validation.original_value,
            validation.value,
        )

    result = execute_search(
        metadata,
        input.to_request(),
        format=input.format,
        budget=get_response_budget(),
        store=get_document_store(metadata),
        auto_downgrade=input.auto_downgrade,
        max_results_validation=validation,
    )
    logger.info(
        "Search in vault '%s' returned %s of %s results",
        metadata.name,
        result["shown_count"],
        result["total_count"],
    )
    return result
