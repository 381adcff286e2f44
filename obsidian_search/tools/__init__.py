"""MCP tool definitions for Obsidian vault search.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from obsidian_search.tools import vault_tools
from obsidian_search.tools import search_tools
from obsidian_search.tools import list_tools

__all__ = [
    "vault_tools",
    "search_tools",
    "list_tools",
]
