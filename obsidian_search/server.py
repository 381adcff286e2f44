"""FastMCP server instance and stdio entry point.

Tool modules register themselves on :data:`mcp` when ``obsidian_search.tools``
is imported (see ``obsidian_search/__init__.py``).
"""

import logging
from mcp.server.fastmcp import FastMCP

from obsidian_search.config import get_vault_configuration, resolve_config_path
from obsidian_search.constants import LOG_LEVEL

# stdout carries the stdio transport; basicConfig logs to stderr
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

mcp = FastMCP("obsidian_search")


def run_server():
    """Validate the vault configuration, then serve over stdio."""
    configuration = get_vault_configuration()
    missing = [name for name, vault in configuration.vaults.items() if not vault.exists]
    if missing:
        logger.warning("Configured vault(s) not found on disk: %s", ", ".join(sorted(missing)))
    logger.info(
        "Starting Obsidian Search MCP Server (%d vault(s) from %s, default '%s')",
        len(configuration.vaults),
        resolve_config_path(),
        configuration.default_vault,
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
