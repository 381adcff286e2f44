"""Vault discovery and per-session vault selection tools.

- list_vaults: configured vaults, default, active vault and response budget
- set_active_vault: choose the vault later calls fall back to
"""

import logging
from typing import Any
from mcp.server.fastmcp import Context

from obsidian_search.server import mcp
from obsidian_search.models import ListVaultsInput, SetActiveVaultInput
from obsidian_search.config import get_vault_configuration
from obsidian_search.session import (
    set_active_vault as remember_active_vault,
    get_active_vault,
    get_session_key,
)

logger = logging.getLogger(__name__)


@mcp.tool()
async def list_vaults(
    input: ListVaultsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Show which vaults can be searched and which one this session uses.

    Args:
        input (ListVaultsInput): Empty input model
        ctx (Context, optional): FastMCP context; without it "active" is None

    Returns:
        {
            "default": str,
            "active": str | None,
            "response_budget": {"max_characters": int, "estimation_ratio": int},
            "vaults": [
                {
                    "name": str,
                    "path": str,
                    "description": str,
                    "exists": bool,
                    "templates_folder": str | None,    # needed by list_vault(type="templates")
                    "daily_notes_folder": str | None   # default folder for recent_notes
                }
            ]
        }

    Examples:
        - First call of a conversation, to learn vault names
        - Before list_vault(type="templates"), to check a templates folder exists

    Error Handling:
        - Config file missing → FileNotFoundError naming the expected path
        - Malformed vaults.yaml → ValueError naming the offending entry
    """
    configuration = get_vault_configuration()
    payload = configuration.as_payload()
    payload["active"] = get_active_vault(ctx).name if ctx is not None else None
    payload["response_budget"] = {
        "max_characters": configuration.budget.max_characters,
        "estimation_ratio": configuration.budget.estimation_ratio,
    }
    return payload


@mcp.tool()
async def set_active_vault(
    input: SetActiveVaultInput,
    ctx: Context,
) -> dict[str, Any]:
    """Make one vault the default for the rest of this session.

    search_vault and list_vault calls without a ``vault`` argument use it.

    Args:
        input (SetActiveVaultInput): Validated input containing:
            - vault (str): Vault name from list_vaults()
        ctx (Context): FastMCP context identifying the session

    Returns:
        {"vault": str, "path": str, "exists": bool, "status": "active"}

    Error Handling:
        - ValidationError: Blank vault name
        - Unknown vault → ValueError listing the configured names
    """
    metadata = remember_active_vault(ctx, input.vault)
    if not metadata.exists:
        logger.warning("Vault '%s' selected but %s is not a directory", metadata.name, metadata.path)
    logger.info("Session %s now uses vault '%s'", get_session_key(ctx), metadata.name)
    return {
        "vault": metadata.name,
        "path": str(metadata.path),
        "exists": metadata.exists,
        "status": "active",
    }
