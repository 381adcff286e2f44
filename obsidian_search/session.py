"""Per-session active vault selection.

FastMCP hands every request a :class:`Context`; its ``session`` object lives as
long as the client connection, so its identity keys the selection.
"""

import logging
from typing import Dict, Optional
from mcp.server.fastmcp import Context

from obsidian_search.config import get_vault_configuration
from obsidian_search.data_models import VaultMetadata

logger = logging.getLogger(__name__)

# session key -> vault name
_ACTIVE_VAULTS: Dict[int, str] = {}


def get_session_key(ctx: Context) -> int:
    return id(ctx.session)


def set_active_vault(ctx: Context, vault_name: str) -> VaultMetadata:
    """Remember ``vault_name`` as the session's vault.

    Raises:
        ValueError: If no vault with that name is configured.
    """
    metadata = get_vault_configuration().get(vault_name)
    _ACTIVE_VAULTS[get_session_key(ctx)] = metadata.name
    return metadata


def get_active_vault(ctx: Context) -> VaultMetadata:
    """The session's vault, or the configured default when none was chosen.

    A selection that disappeared from a reloaded configuration is dropped
    in favour of the default.
    """
    configuration = get_vault_configuration()
    key = get_session_key(ctx)
    selected = _ACTIVE_VAULTS.get(key)
    if selected is not None and selected not in configuration.vaults:
        logger.warning("Active vault '%s' is no longer configured; using '%s'", selected, configuration.default_vault)
        del _ACTIVE_VAULTS[key]
        selected = None
    return configuration.get(selected or configuration.default_vault)


def resolve_vault(vault: Optional[str], ctx: Optional[Context] = None) -> VaultMetadata:
    """Pick the vault for one tool call.

    An explicit ``vault`` wins, then the session's active vault, then the
    configured default.

    Raises:
        ValueError: If ``vault`` names an unknown vault.
    """
    if vault:
        return get_vault_configuration().get(vault)
    if ctx is not None:
        return get_active_vault(ctx)
    configuration = get_vault_configuration()
    return configuration.get(configuration.default_vault)


def clear_sessions() -> None:
    _ACTIVE_VAULTS.clear()
