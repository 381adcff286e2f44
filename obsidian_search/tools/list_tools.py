"""Listing tool for Obsidian vaults.

- list_vault: folders, recent notes, templates and front matter properties
"""
from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import Context

from obsidian_search.server import mcp
from obsidian_search.session import resolve_vault
from obsidian_search.config import get_document_store, get_response_budget
from obsidian_search.models import ListVaultInput
from obsidian_search.core.list_operations import execute_list

logger = logging.getLogger(__name__)


@mcp.tool()
async def list_vault(
    input: ListVaultInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List vault contents within the response size limit.

    Args:
        input (ListVaultInput): Validated input containing:
            - type (str): "folders", "recent_notes", "templates", "yaml_properties" or "auto"
            - path (str): Folder for "folders" / "recent_notes" (vault root by default)
            - limit (int, optional): Recent notes to show, 1-100 (default 10)
            - include_count (bool): Show usage counts for yaml properties
            - exclude_standard (bool): Hide standard yaml properties
            - format (str): "concise" or "detailed"
            - vault (str, optional): Vault name (omit to use active vault)
        ctx (Context, optional): FastMCP context for session state

    Returns:
        {
            "vault": str,
            "list_type": str,           # Resolved type when "auto" was requested
            "content": str,
            "truncation": dict | None,
            "total_count": int,
            "shown_count": int
        }

    Examples:
        - type="folders", path="Projects" → sub-folders of Projects
        - type="recent_notes", limit=5 → five most recently modified notes
        - type="yaml_properties", include_count=True

    Error Handling:
        - ValidationError: Unknown type, absolute path or '..' segments
        - Folder not found → FileNotFoundError naming the folder
        - type="templates" without a configured templates_folder → ValueError
    """
    metadata = resolve_vault(input.vault, ctx)
    result = execute_list(
        metadata,
        list_type=input.type,
        path=input.path,
        limit=input.limit,
        include_count=input.include_count,
        exclude_standard=input.exclude_standard,
        format=input.format,
        budget=get_response_budget(),
        store=get_document_store(metadata),
    )
    logger.info(
        "Listed %s items (%s) in vault '%s'",
        result["shown_count"],
        result["list_type"],
        metadata.name,
    )
    return result
