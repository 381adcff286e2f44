"""Module-level constants for the Obsidian search MCP server."""

from pathlib import Path

# Configuration
CONFIG_PATH = Path(__file__).parent.parent / "vaults.yaml"
CONFIG_ENV_VAR = "OBSIDIAN_SEARCH_CONFIG"

# Response budget (~4 characters per token)
DEFAULT_MAX_TOKENS = 25_000
DEFAULT_MAX_CHARACTERS = 100_000
DEFAULT_ESTIMATION_RATIO = 4

# Characters held back from the body budget for the response header/notice
NOTICE_RESERVE = 512
MIN_MAX_CHARACTERS = NOTICE_RESERVE + 1

# Budget share above which truncation is attributed to the character budget
BUDGET_SATURATION = 0.95

# Result limits
MAX_RESULTS_MIN = 1
MAX_RESULTS_MAX = 100
DEFAULT_SEARCH_RESULTS = 25
DEFAULT_LIST_LIMIT = 10

# Matching
CONTEXT_RADIUS = 40
MAX_MATCHES_SHOWN = 3

# Document cache
DOCUMENT_CACHE_TTL_SECONDS = 300.0

# Front matter keys with a fixed meaning in the vault
CONTENT_TYPE_KEY = "content type"
TITLE_KEYS = ("title", "aliases")
STANDARD_PROPERTIES = frozenset(
    {
        "title",
        "aliases",
        "tags",
        "content type",
        "category",
        "sub-category",
        "date created",
        "date modified",
        "source",
        "people",
        "author",
    }
)

# Logging
LOG_LEVEL = "INFO"
