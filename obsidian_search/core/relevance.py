"""Relevance scoring and result ordering."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from obsidian_search.constants import TITLE_KEYS
from obsidian_search.data_models import Document, MatchRecord, SearchResult, SortBy, SortOrder

BASE_MATCH_SCORE = 10.0
TITLE_WEIGHT = 5.0
FRONTMATTER_WEIGHT = 3.0
CONTENT_WEIGHT = 1.0
PATH_WEIGHT = 0.5
EXACT_MATCH_BONUS = 5.0


def match_weight(match: MatchRecord) -> float:
    if match.type == "frontmatter":
        return TITLE_WEIGHT if match.field in TITLE_KEYS else FRONTMATTER_WEIGHT
    if match.type == "content":
        return CONTENT_WEIGHT
    return PATH_WEIGHT


@dataclass(frozen=True)
class RelevanceScorer:
    """Reduces a document's matches to a single score.

    ``reference_time`` anchors the recency boost; it is captured once per search
    so repeated scoring of the same inputs is deterministic.
    """

    reference_time: datetime
    query: Optional[str] = None

    def recency_boost(self, document: Document) -> float:
        age_days = (self.reference_time - document.modified_at).total_seconds() / 86_400
        boost = 0.0
        if age_days < 30:
            boost += 2.0
        if age_days < 7:
            boost += 1.0
        return boost

    def score(self, document: Document, matches: Sequence[MatchRecord]) -> float:
        total = 0.0
        if matches:
            total += BASE_MATCH_SCORE
        total += sum(match_weight(match) for match in matches)

        if self.query:
            needle = self.query.strip().strip("\"'").lower()
            total += sum(EXACT_MATCH_BONUS for match in matches if match.text.lower() == needle)

        return total + self.recency_boost(document)


def _title_key(result: SearchResult) -> str:
    return result.document.title.lower()


def sort_results(
    results: list[SearchResult],
    sort_by: SortBy = "relevance",
    sort_order: SortOrder = "desc",
) -> list[SearchResult]:
    """Order results; ties always fall back to path ascending.

    Relevance ordering is score, then most recently modified, then path. For
    the other keys ``sort_order`` picks the direction of the primary key.
    """
    # Python's sort is stable, so sort by the tie-breakers first.
    ordered = sorted(results, key=lambda result: result.document.path)

    if sort_by == "relevance":
        ordered.sort(key=lambda result: result.document.modified_at, reverse=True)
        ordered.sort(key=lambda result: result.score, reverse=sort_order != "asc")
        return ordered

    reverse = sort_order == "desc"
    if sort_by == "modified":
        ordered.sort(key=lambda result: result.document.modified_at, reverse=reverse)
    elif sort_by == "created":
        ordered.sort(key=lambda result: result.document.created_at, reverse=reverse)
    elif sort_by == "title":
        ordered.sort(key=_title_key, reverse=reverse)
    else:
        raise ValueError(f"sort_by must be one of relevance, modified, created, title; got '{sort_by}'")
    return ordered
