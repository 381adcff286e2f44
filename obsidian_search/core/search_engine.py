"""Search orchestration: filtering, matching, scoring, ordering and capping.

A search runs in four steps over the documents handed out by the store:

1. Cheap metadata filters (content type, tags, category, folder, dates,
   YAML properties) discard candidates before any regex runs.
2. The query is compiled once and matched against each remaining document.
   A failure on one document is logged and that document is skipped.
3. Every document with matches is scored; filter-only searches keep every
   candidate and rank by recency.
4. Results are sorted and only then capped at ``max_results``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from obsidian_search.core import query_parser
from obsidian_search.core.document_store import VaultDocumentStore, folder_matches
from obsidian_search.core.natural_language import NaturalLanguageProcessor
from obsidian_search.core.pattern_matcher import PatternMatcher, searchable_text
from obsidian_search.core.relevance import RelevanceScorer, sort_results
from obsidian_search.data_models import (
    ArrayMode,
    Document,
    MatchRecord,
    NaturalLanguageEntry,
    PatternEntry,
    QueryEntry,
    QueryInterpretation,
    SearchFilters,
    SearchRequest,
    SearchResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOutcome:
    """Capped, ordered results plus the number of matches before capping."""

    results: list[SearchResult]
    total_count: int
    interpretation: Optional[QueryInterpretation] = None


# ==============================================================================
# FILTER HELPERS
# ==============================================================================


def _normalize(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _note_tags(document: Document) -> set[str]:
    return {
        str(tag).strip().lstrip("#").lower()
        for tag in _as_list(document.frontmatter.get("tags"))
        if tag is not None and str(tag).strip()
    }


def _matches_array(actual: Any, expected: list[Any], array_mode: ArrayMode) -> bool:
    expected_norm = [_normalize(item) for item in expected]
    if isinstance(actual, list):
        actual_norm = [_normalize(item) for item in actual]
        if array_mode == "exact":
            return actual_norm == expected_norm
        if array_mode == "contains":
            return all(item in actual_norm for item in expected_norm)
        return any(item in actual_norm for item in expected_norm)

    if array_mode == "exact":
        return len(expected_norm) == 1 and _normalize(actual) == expected_norm[0]
    return _normalize(actual) in expected_norm


def matches_yaml_property(actual: Any, expected: Any, array_mode: ArrayMode, include_null_values: bool) -> bool:
    """Compare one front matter value against an expected filter value.

    Missing values match only when ``include_null_values`` is set or the
    expected value is itself null.
    """
    if actual is None:
        return include_null_values or expected is None

    if isinstance(expected, (list, tuple)):
        return _matches_array(actual, list(expected), array_mode)

    if isinstance(actual, list):
        actual_norm = [_normalize(item) for item in actual]
        if array_mode == "exact":
            return actual_norm == [_normalize(expected)]
        return _normalize(expected) in actual_norm

    return _normalize(actual) == _normalize(expected)


def matches_filters(document: Document, filters: SearchFilters, now: datetime) -> bool:
    """Return True if ``document`` passes every metadata filter."""
    fm = document.frontmatter

    if filters.content_type:
        wanted = {_normalize(item) for item in filters.content_type}
        actual = {_normalize(item) for item in _as_list(document.content_type)}
        if not wanted & actual:
            return False

    if filters.tags:
        wanted_tags = {tag.strip().lstrip("#").lower() for tag in filters.tags if tag.strip()}
        if wanted_tags and not wanted_tags & _note_tags(document):
            return False

    if filters.category and _normalize(fm.get("category")) != _normalize(filters.category):
        return False
    if filters.sub_category and _normalize(fm.get("sub-category")) != _normalize(filters.sub_category):
        return False

    if filters.folder and not folder_matches(document.path, filters.folder):
        return False
    if any(folder_matches(document.path, folder) for folder in filters.exclude_folders if folder.strip()):
        return False

    if filters.days is not None:
        cutoff = (now - timedelta(days=filters.days)).replace(hour=0, minute=0, second=0, microsecond=0)
        if document.modified_at < cutoff:
            return False

    if filters.created_after and document.created_at < filters.created_after:
        return False
    if filters.created_before and document.created_at > filters.created_before:
        return False
    if filters.modified_after and document.modified_at < filters.modified_after:
        return False
    if filters.modified_before and document.modified_at > filters.modified_before:
        return False

    if filters.yaml_properties:
        outcomes = [
            matches_yaml_property(fm.get(key), expected, filters.array_mode, filters.include_null_values)
            for key, expected in filters.yaml_properties.items()
        ]
        if filters.match_mode == "all" and not all(outcomes):
            return False
        if filters.match_mode == "any" and not any(outcomes):
            return False

    return True


def merge_interpretation(filters: SearchFilters, interpretation: QueryInterpretation) -> SearchFilters:
    """Fold inferred hints into ``filters``; explicit caller filters win."""
    content_type = filters.content_type
    if not content_type and interpretation.content_type:
        content_type = (interpretation.content_type,)

    yaml_properties = {**interpretation.yaml_properties, **filters.yaml_properties}
    array_mode = interpretation.array_mode if interpretation.yaml_properties else filters.array_mode
    days = filters.days if filters.days is not None else interpretation.days

    return replace(
        filters,
        content_type=content_type,
        yaml_properties=yaml_properties,
        array_mode=array_mode,
        days=days,
    )


# ==============================================================================
# QUERY PLAN
# ==============================================================================


@dataclass(frozen=True)
class _QueryPlan:
    """Compiled matchers for one query entry."""

    main: Optional[PatternMatcher]
    title: Optional[PatternMatcher]
    content: Optional[PatternMatcher]
    prefilter: tuple[re.Pattern[str], ...]
    fallback: Optional[PatternMatcher]

    @property
    def has_criteria(self) -> bool:
        return any(matcher is not None for matcher in (self.main, self.title, self.content))


def _compile_regex(query: str, case_sensitive: bool) -> re.Pattern[str]:
    try:
        return re.compile(query, 0 if case_sensitive else re.IGNORECASE)
    except re.error as exc:
        raise ValueError(f"query is not a valid regular expression: {exc}") from exc


def _compile_matcher(text: str, entry: QueryEntry, **scope: bool) -> PatternMatcher:
    if entry.use_regex:
        return PatternMatcher(_compile_regex(text, entry.case_sensitive), find_all=True, **scope)
    _, pattern = query_parser.compile_query(text, entry.strategy, entry.case_sensitive)
    return PatternMatcher(pattern, **scope)


def build_query_plan(entry: QueryEntry) -> _QueryPlan:
    """Compile every matcher a query entry needs, once per search."""
    query = entry.query.strip()
    main = title = content = fallback = None
    prefilter: tuple[re.Pattern[str], ...] = ()

    if query:
        main = _compile_matcher(
            query,
            entry,
            include_content=entry.include_content and not entry.content_query,
        )
        if not entry.use_regex:
            parsed = query_parser.parse(query, entry.case_sensitive)
            effective = parsed.strategy if entry.strategy == "auto" else entry.strategy
            if query_parser.resolve_strategy(effective, len(parsed.terms)) == "all_terms":
                flags = 0 if entry.case_sensitive else re.IGNORECASE
                prefilter = tuple(
                    re.compile(rf"\b{query_parser.escape_term(term)}\b", flags)
                    for term in parsed.normalized_terms
                    if term
                )
                fallback = PatternMatcher(
                    query_parser.create_pattern(parsed.terms, "any_term", entry.case_sensitive),
                    include_content=entry.include_content,
                )

    if entry.title_query and entry.title_query.strip():
        title = _compile_matcher(entry.title_query.strip(), entry)
    if entry.content_query and entry.content_query.strip() and entry.include_content:
        content = _compile_matcher(
            entry.content_query.strip(),
            entry,
            include_frontmatter=False,
            include_path=False,
        )

    return _QueryPlan(main=main, title=title, content=content, prefilter=prefilter, fallback=fallback)


def match_document(document: Document, plan: _QueryPlan) -> Optional[list[MatchRecord]]:
    """Return the match records for ``document``, or None if it is excluded."""
    if plan.prefilter:
        combined = searchable_text(document)
        if not all(regex.search(combined) for regex in plan.prefilter):
            return None

    matches: list[MatchRecord] = []
    if plan.main is not None:
        matches.extend(plan.main.match(document))
        if not matches and plan.fallback is not None:
            # Every term is present, just not within a single field.
            matches.extend(plan.fallback.match(document))
    if plan.title is not None:
        matches.extend(plan.title.match_titles(document))
    if plan.content is not None:
        matches.extend(plan.content.match(document))

    if plan.has_criteria and not matches:
        return None
    return matches


# ==============================================================================
# ENGINE
# ==============================================================================


class SearchEngine:
    """Runs searches against one document store.

    Args:
        store: Source of candidate documents.
        language: Natural-language interpreter; a default one is created when omitted.
        clock: Returns "now" once per search; anchors date filters and recency.
    """

    def __init__(
        self,
        store: VaultDocumentStore,
        language: Optional[NaturalLanguageProcessor] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.language = language if language is not None else NaturalLanguageProcessor()
        self._clock = clock

    def search(self, request: SearchRequest) -> list[SearchResult]:
        """Return the top ``max_results`` results for ``request``."""
        return self.run(request).results

    def run(self, request: SearchRequest) -> SearchOutcome:
        """Execute ``request`` and report the pre-cap match count alongside the results.

        Raises:
            ValueError: If a raw regular expression or glob pattern is invalid.
            FileNotFoundError: If the vault is not accessible.
        """
        now = self._clock()
        entry = request.entry
        filters = request.filters
        interpretation: Optional[QueryInterpretation] = None

        if isinstance(entry, PatternEntry):
            results = self._search_pattern(entry, filters, now)
        else:
            if isinstance(entry, NaturalLanguageEntry):
                interpretation = self.language.interpret(entry.phrase)
                filters = merge_interpretation(filters, interpretation)
                entry = QueryEntry(
                    query=NaturalLanguageProcessor.free_text_query(interpretation) or "",
                    case_sensitive=entry.case_sensitive,
                )
            results = self._search_query(entry, filters, now)

        total_count = len(results)
        ordered = sort_results(results, request.sort_by, request.sort_order)[: request.max_results]
        if interpretation is not None and ordered:
            ordered[0] = replace(ordered[0], interpretation=interpretation)

        logger.info(
            "Search in vault '%s' (%s mode) matched %d documents, returning %d",
            self.store.vault.name,
            entry.kind,
            total_count,
            len(ordered),
        )
        return SearchOutcome(results=ordered, total_count=total_count, interpretation=interpretation)

    def _search_query(self, entry: QueryEntry, filters: SearchFilters, now: datetime) -> list[SearchResult]:
        plan = build_query_plan(entry)
        scorer = RelevanceScorer(reference_time=now, query=entry.query or None)
        results: list[SearchResult] = []

        for document in self.store.list_candidate_documents(filters):
            try:
                if not matches_filters(document, filters, now):
                    continue
                matches = match_document(document, plan)
                if matches is None:
                    continue
                score = scorer.score(document, matches)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping '%s' after match failure: %s", document.path, exc)
                continue
            results.append(SearchResult(document=document, score=score, matches=tuple(matches)))

        return results

    def _search_pattern(self, entry: PatternEntry, filters: SearchFilters, now: datetime) -> list[SearchResult]:
        results: list[SearchResult] = []
        for document in self.store.find_by_pattern(entry.pattern):
            try:
                if not matches_filters(document, filters, now):
                    continue
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping '%s' after filter failure: %s", document.path, exc)
                continue
            match = MatchRecord(
                type="path",
                text=document.stem,
                context=f"File: {document.path}",
            )
            results.append(SearchResult(document=document, score=1.0, matches=(match,)))
        return results
