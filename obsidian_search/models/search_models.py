"""Pydantic input model for the search_vault tool.

The tool accepts three mutually exclusive entry modes (``query``, ``pattern``
and ``natural_language``) plus metadata filters. :meth:`SearchVaultInput.to_request`
resolves the entry mode and hands a single tagged request to the search engine.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import Field, field_validator

from obsidian_search.core.validation import MaxResultsValidation, validate_max_results
from obsidian_search.data_models import (
    QUERY_STRATEGIES,
    SORT_FIELDS,
    EntryMode,
    NaturalLanguageEntry,
    PatternEntry,
    QueryEntry,
    SearchFilters,
    SearchRequest,
)

from .base import BaseVaultInput


def _as_tuple(value: Optional[list[str]]) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value if item and item.strip())


class SearchVaultInput(BaseVaultInput):
    """Input model for search_vault tool.

    Free-text, glob or conversational search with metadata filters. When more
    than one entry mode is supplied, ``pattern`` wins over ``natural_language``,
    which wins over ``query``. Omitting all three runs a filters-only search.

    Examples:
        >>> SearchVaultInput(query="project plan")
        >>> SearchVaultInput(content_type="Reference", max_results=10)
        >>> SearchVaultInput(natural_language="Italian restaurants in Toronto")
        >>> SearchVaultInput(pattern="Daily Notes/2025-*")
    """

    # Entry modes
    query: Optional[str] = Field(
        None,
        description=(
            "Free-text query. Quoted text is an exact phrase, 'OR' between words "
            "matches any word, three or more words must all appear."
        )
    )

    pattern: Optional[str] = Field(
        None,
        description=(
            "Glob over vault-relative note paths. "
            "Examples: 'Projects/**', 'Daily Notes/2025-*'. '.md' is implied."
        )
    )

    natural_language: Optional[str] = Field(
        None,
        description=(
            "Conversational request such as 'Italian restaurants in Toronto'. "
            "Locations, cuisines, content types and time phrases become filters."
        )
    )

    # Query options
    title_query: Optional[str] = Field(None, description="Query matched only against titles, aliases and file names.")
    content_query: Optional[str] = Field(None, description="Query matched only against note bodies.")
    query_strategy: str = Field(
        "auto",
        description="Override the detected strategy: 'exact_phrase', 'all_terms', 'any_term' or 'auto'."
    )
    case_sensitive: bool = Field(False, description="Match case exactly.")
    use_regex: bool = Field(False, description="Treat query as a raw regular expression.")
    include_content: bool = Field(True, description="Search note bodies as well as front matter and paths.")

    # Filters
    content_type: Optional[list[str]] = Field(
        None,
        description="Front matter 'content type' values to keep (any match). Example: ['Reference']."
    )
    tags: Optional[list[str]] = Field(None, description="Tags to keep (any match, '#' optional).")
    category: Optional[str] = Field(None, description="Front matter 'category' value to keep.")
    sub_category: Optional[str] = Field(None, description="Front matter 'sub-category' value to keep.")
    folder: Optional[str] = Field(None, description="Only search below this vault-relative folder.")
    exclude_folders: Optional[list[str]] = Field(None, description="Vault-relative folders to skip.")
    days: Optional[int] = Field(None, ge=0, description="Only notes modified within the last N days.")
    created_after: Optional[datetime] = Field(None, description="ISO date; created on or after.")
    created_before: Optional[datetime] = Field(None, description="ISO date; created on or before.")
    modified_after: Optional[datetime] = Field(None, description="ISO date; modified on or after.")
    modified_before: Optional[datetime] = Field(None, description="ISO date; modified on or before.")
    yaml_properties: Optional[dict[str, Any]] = Field(
        None,
        description="Front matter properties to match. Example: {'city': 'Toronto'}."
    )
    match_mode: Literal["all", "any"] = Field("all", description="Require all or any yaml_properties to match.")
    array_mode: Literal["exact", "contains", "any"] = Field(
        "contains",
        description="How list values compare: 'exact', 'contains' (all given values) or 'any'."
    )
    include_null_values: bool = Field(
        False,
        description="Keep notes that lack a requested yaml property."
    )

    # Ordering and output
    max_results: Optional[int] = Field(
        None,
        description="Maximum results (1-100, default 25). Out-of-range values are clamped and reported."
    )
    sort_by: str = Field("relevance", description="'relevance', 'modified', 'created' or 'title'.")
    sort_order: str = Field("desc", description="'asc' or 'desc'.")
    format: Literal["concise", "detailed"] = Field(
        "detailed",
        description="'concise' renders one line per result; 'detailed' adds score, link and snippets."
    )
    auto_downgrade: bool = Field(
        False,
        description="Switch to concise output automatically when detailed output would be truncated."
    )

    @field_validator('content_type', 'tags', 'exclude_folders', mode='before')
    @classmethod
    def validate_string_list(cls, v: Union[str, list[str], None]) -> Optional[list[str]]:
        """Accept a single string where a list is expected."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator('query_strategy')
    @classmethod
    def validate_query_strategy(cls, v: str) -> str:
        """Validate query_strategy is one of the allowed values."""
        cleaned = v.strip().lower()
        if cleaned not in QUERY_STRATEGIES:
            raise ValueError(
                f"Invalid query_strategy '{v}'. "
                f"Must be one of: {', '.join(QUERY_STRATEGIES)}"
            )
        return cleaned

    @field_validator('sort_by')
    @classmethod
    def validate_sort_by(cls, v: str) -> str:
        """Validate sort_by is one of the allowed values."""
        cleaned = v.strip().lower()
        if cleaned not in SORT_FIELDS:
            raise ValueError(
                f"Invalid sort_by '{v}'. "
                f"Must be one of: {', '.join(SORT_FIELDS)}"
            )
        return cleaned

    @field_validator('sort_order')
    @classmethod
    def validate_sort_order(cls, v: str) -> str:
        """Validate sort_order is 'asc' or 'desc'."""
        cleaned = v.strip().lower()
        if cleaned not in {"asc", "desc"}:
            raise ValueError(f"Invalid sort_order '{v}'. Must be 'asc' or 'desc'")
        return cleaned

    @field_validator('pattern', 'natural_language', 'title_query', 'content_query', 'folder')
    @classmethod
    def validate_optional_text(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank strings as omitted."""
        if v is None or not v.strip():
            return None
        return v.strip()

    def validated_max_results(self) -> MaxResultsValidation:
        """Clamp ``max_results`` to [1, 100], recording any adjustment."""
        return validate_max_results(self.max_results)

    def entry_mode(self) -> EntryMode:
        """Resolve the entry mode: pattern, then natural language, then query."""
        if self.pattern:
            return PatternEntry(pattern=self.pattern)
        if self.natural_language:
            return NaturalLanguageEntry(phrase=self.natural_language, case_sensitive=self.case_sensitive)
        return QueryEntry(
            query=(self.query or "").strip(),
            strategy=self.query_strategy,
            case_sensitive=self.case_sensitive,
            use_regex=self.use_regex,
            title_query=self.title_query,
            content_query=self.content_query,
            include_content=self.include_content,
        )

    def filters(self) -> SearchFilters:
        return SearchFilters(
            content_type=_as_tuple(self.content_type),
            tags=_as_tuple(self.tags),
            category=self.category,
            sub_category=self.sub_category,
            folder=self.folder,
            exclude_folders=_as_tuple(self.exclude_folders),
            days=self.days,
            created_after=self.created_after,
            created_before=self.created_before,
            modified_after=self.modified_after,
            modified_before=self.modified_before,
            yaml_properties=dict(self.yaml_properties or {}),
            match_mode=self.match_mode,
            array_mode=self.array_mode,
            include_null_values=self.include_null_values,
        )

    def to_request(self) -> SearchRequest:
        """Build the engine request from this input."""
        return SearchRequest(
            entry=self.entry_mode(),
            filters=self.filters(),
            max_results=self.validated_max_results().value,
            sort_by=self.sort_by,
            sort_order=self.sort_order,
        )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"query": "project plan"},
                {"content_type": ["Reference"], "max_results": 10},
                {"natural_language": "Italian restaurants in Toronto"},
                {"pattern": "Daily Notes/2025-*", "format": "concise"},
                {"query": "meeting", "tags": ["work"], "days": 7, "sort_by": "modified"}
            ]
        }
