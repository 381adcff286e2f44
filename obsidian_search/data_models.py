"""Data models for vault configuration, documents and search requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Literal, Optional, Union

QueryStrategy = Literal["exact_phrase", "all_terms", "any_term", "auto"]
MatchType = Literal["frontmatter", "content", "path"]
SortBy = Literal["relevance", "modified", "created", "title"]
SortOrder = Literal["asc", "desc"]
ResponseFormat = Literal["concise", "detailed"]
MatchMode = Literal["all", "any"]
ArrayMode = Literal["exact", "contains", "any"]
ListType = Literal["folders", "recent_notes", "templates", "yaml_properties", "auto"]

QUERY_STRATEGIES: tuple[str, ...] = ("exact_phrase", "all_terms", "any_term", "auto")
SORT_FIELDS: tuple[str, ...] = ("relevance", "modified", "created", "title")
LIST_TYPES: tuple[str, ...] = ("folders", "recent_notes", "templates", "yaml_properties", "auto")


# ==============================================================================
# VAULT CONFIGURATION
# ==============================================================================


@dataclass(frozen=True)
class VaultMetadata:
    """Normalized metadata describing an Obsidian vault."""

    name: str
    path: Path
    description: str
    exists: bool
    templates_folder: Optional[str] = None
    daily_notes_folder: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        return {
            "name": self.name,
            "path": str(self.path),
            "description": self.description,
            "exists": self.path.is_dir(),
            "templates_folder": self.templates_folder,
            "daily_notes_folder": self.daily_notes_folder,
        }


@dataclass(frozen=True)
class BudgetSettings:
    """Response budget read from the configuration file."""

    max_characters: int
    estimation_ratio: int


class VaultConfiguration:
    """Holds vault metadata, the default vault and the response budget settings."""

    def __init__(
        self,
        default_vault: str,
        vaults: dict[str, VaultMetadata],
        budget: BudgetSettings,
    ) -> None:
        self.default_vault = default_vault
        self.vaults = vaults
        self.budget = budget

    def get(self, name: str) -> VaultMetadata:
        """Get vault metadata by name.

        Raises:
            ValueError: If the vault name is not found in configuration.
        """
        try:
            return self.vaults[name]
        except KeyError as exc:
            available = ", ".join(sorted(self.vaults)) or "none"
            raise ValueError(f"Unknown vault '{name}'. Available vaults: {available}") from exc

    def as_payload(self) -> dict[str, Any]:
        return {
            "default": self.default_vault,
            "vaults": [vault.as_payload() for vault in self.vaults.values()],
        }


# ==============================================================================
# DOCUMENTS AND MATCHES
# ==============================================================================


@dataclass(frozen=True)
class Document:
    """A single note as handed to the search core by the document store.

    ``path`` is vault-relative, uses forward slashes and keeps the ``.md`` suffix.
    """

    path: str
    frontmatter: dict[str, Any]
    body: str
    modified_at: datetime
    created_at: datetime

    @property
    def stem(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def title(self) -> str:
        value = self.frontmatter.get("title")
        if isinstance(value, str) and value.strip():
            return value.strip()
        return self.stem

    @property
    def content_type(self) -> Any:
        return self.frontmatter.get("content type")


@dataclass(frozen=True)
class MatchRecord:
    """One hit inside a document."""

    type: MatchType
    text: str
    context: str
    position: int = 0
    field: Optional[str] = None


@dataclass(frozen=True)
class ParsedQuery:
    """Immutable result of parsing one raw query string."""

    original: str
    terms: tuple[str, ...]
    normalized_terms: tuple[str, ...]
    strategy: QueryStrategy
    has_regex_chars: bool
    is_quoted: bool


@dataclass(frozen=True)
class QueryInterpretation:
    """Structured hints inferred from a natural-language phrase."""

    phrase: str
    content_type: Optional[str]
    yaml_properties: dict[str, Any]
    array_mode: ArrayMode
    days: Optional[int]
    remainder: tuple[str, ...]
    confidence: float
    text: str
    suggestions: tuple[str, ...] = ()

    @property
    def has_filters(self) -> bool:
        return bool(self.content_type or self.yaml_properties or self.days is not None)


@dataclass(frozen=True)
class SearchResult:
    """A scored document together with the matches that produced the score."""

    document: Document
    score: float
    matches: tuple[MatchRecord, ...]
    interpretation: Optional[QueryInterpretation] = None


# ==============================================================================
# SEARCH REQUESTS
# ==============================================================================


@dataclass(frozen=True)
class QueryEntry:
    """Free-text entry mode."""

    query: str = ""
    strategy: QueryStrategy = "auto"
    case_sensitive: bool = False
    use_regex: bool = False
    title_query: Optional[str] = None
    content_query: Optional[str] = None
    include_content: bool = True

    kind: Literal["query"] = field(default="query", init=False)


@dataclass(frozen=True)
class PatternEntry:
    """Glob entry mode; matching is delegated to the document store."""

    pattern: str

    kind: Literal["pattern"] = field(default="pattern", init=False)


@dataclass(frozen=True)
class NaturalLanguageEntry:
    """Conversational phrase entry mode."""

    phrase: str
    case_sensitive: bool = False

    kind: Literal["natural_language"] = field(default="natural_language", init=False)


EntryMode = Union[QueryEntry, PatternEntry, NaturalLanguageEntry]


@dataclass(frozen=True)
class SearchFilters:
    """Cheap metadata filters applied before any pattern matching."""

    content_type: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    category: Optional[str] = None
    sub_category: Optional[str] = None
    folder: Optional[str] = None
    exclude_folders: tuple[str, ...] = ()
    days: Optional[int] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None
    modified_after: Optional[datetime] = None
    modified_before: Optional[datetime] = None
    yaml_properties: dict[str, Any] = field(default_factory=dict)
    match_mode: MatchMode = "all"
    array_mode: ArrayMode = "contains"
    include_null_values: bool = False


@dataclass(frozen=True)
class SearchRequest:
    """A fully resolved search: exactly one entry mode plus filters and ordering."""

    entry: EntryMode = field(default_factory=QueryEntry)
    filters: SearchFilters = field(default_factory=SearchFilters)
    max_results: int = 25
    sort_by: SortBy = "relevance"
    sort_order: SortOrder = "desc"
