"""Obsidian Search MCP Server

Budget-aware search and listing over Obsidian vaults via Model Context Protocol.
"""

from obsidian_search.config import get_vault_configuration
from obsidian_search.data_models import VaultMetadata, VaultConfiguration, SearchRequest
from obsidian_search.session import resolve_vault, set_active_vault, get_active_vault
from obsidian_search.server import mcp, run_server

# Import tools to register them with the MCP server
from obsidian_search import tools  # noqa: F401

__version__ = "0.1.0"
__all__ = [
    "get_vault_configuration",
    "VaultMetadata",
    "VaultConfiguration",
    "SearchRequest",
    "resolve_vault",
    "set_active_vault",
    "get_active_vault",
    "mcp",
    "run_server",
]
