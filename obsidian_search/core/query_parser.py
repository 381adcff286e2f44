"""Query parsing, search strategy detection and matcher compilation.

A raw query is split into terms (quoted spans count as one term), classified
into one of the search strategies and compiled into a single regular
expression:

- ``exact_phrase``: the terms in order, separated by any run of whitespace.
- ``all_terms``: one word-boundary lookahead per term, so every term must
  appear somewhere in the text in any order (newlines included).
- ``any_term``: an alternation of word-boundary-wrapped terms.

Compiled patterns carry only the ``IGNORECASE`` flag, never any state, so a
single pattern can be reused across documents and calls.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from obsidian_search.data_models import ParsedQuery, QueryStrategy

QUOTE_CHARS = ('"', "'")
REGEX_SPECIAL_CHARS = frozenset(".*+?^${}()|[]\\")
LOGICAL_OPERATORS = frozenset({"OR", "AND", "NOT"})

_OR_OPERATOR = re.compile(r"\s+OR\s+", re.IGNORECASE)

# Matches nothing, anywhere.
MATCH_NOTHING = re.compile(r"(?!)")


def escape_term(term: str) -> str:
    """Escape regex metacharacters so ``term`` matches literally."""
    return "".join(f"\\{char}" if char in REGEX_SPECIAL_CHARS else char for char in term)


def normalize_terms(terms: Sequence[str], case_sensitive: bool = False) -> tuple[str, ...]:
    if case_sensitive:
        return tuple(term.strip() for term in terms)
    return tuple(term.strip().lower() for term in terms)


def extract_terms(query: str) -> list[str]:
    """Split a query into terms, keeping quoted spans together.

    An unterminated quote still yields its content as a trailing term.

    Examples:
        >>> extract_terms('trip "new york" 2024')
        ['trip', 'new york', '2024']
    """
    if not query or not query.strip():
        return []

    terms: list[str] = []
    current: list[str] = []
    quote_char = ""

    def _flush() -> None:
        term = "".join(current).strip()
        if term:
            terms.append(term)
        current.clear()

    for char in query:
        if quote_char:
            if char == quote_char:
                _flush()
                quote_char = ""
            else:
                current.append(char)
        elif char in QUOTE_CHARS:
            _flush()
            quote_char = char
        elif char.isspace():
            _flush()
        else:
            current.append(char)

    _flush()
    return terms


def is_quoted(query: str) -> bool:
    """Return True if the whole query is wrapped in matching quotes."""
    trimmed = query.strip()
    return len(trimmed) >= 2 and trimmed[0] in QUOTE_CHARS and trimmed[-1] == trimmed[0]


def has_regex_chars(query: str) -> bool:
    """Return True if a regex metacharacter appears outside quoted spans."""
    quote_char = ""
    for char in query:
        if quote_char:
            if char == quote_char:
                quote_char = ""
        elif char in QUOTE_CHARS:
            quote_char = char
        elif char in REGEX_SPECIAL_CHARS:
            return True
    return False


def detect_strategy(query: str) -> QueryStrategy:
    """Classify a query; the first matching rule wins.

    1. Wrapped in quotes -> ``exact_phrase``
    2. Contains ``OR`` between whitespace -> ``any_term``
    3. Three or more terms -> ``all_terms``
    4. Otherwise -> ``exact_phrase``
    """
    if is_quoted(query):
        return "exact_phrase"
    if _OR_OPERATOR.search(query):
        return "any_term"
    if len(extract_terms(query)) >= 3:
        return "all_terms"
    return "exact_phrase"


def resolve_strategy(strategy: QueryStrategy, term_count: int) -> QueryStrategy:
    if strategy == "auto":
        return "all_terms" if term_count >= 3 else "exact_phrase"
    return strategy


def parse(query: str, case_sensitive: bool = False) -> ParsedQuery:
    """Parse a raw query string into a :class:`ParsedQuery`."""
    terms = tuple(extract_terms(query))
    return ParsedQuery(
        original=query,
        terms=terms,
        normalized_terms=normalize_terms(terms, case_sensitive),
        strategy=detect_strategy(query),
        has_regex_chars=has_regex_chars(query),
        is_quoted=is_quoted(query),
    )


def create_pattern(
    terms: Sequence[str],
    strategy: QueryStrategy,
    case_sensitive: bool = False,
) -> re.Pattern[str]:
    """Compile the matcher for ``terms`` under ``strategy``.

    Logical operator words are dropped only for ``any_term``; elsewhere they are
    literal search words. An empty term list yields a pattern that never matches.
    """
    resolved = resolve_strategy(strategy, len(terms))
    normalized = normalize_terms(terms, case_sensitive)
    if resolved == "any_term":
        normalized = tuple(term for term in normalized if term.upper() not in LOGICAL_OPERATORS)
    normalized = tuple(term for term in normalized if term)

    if not normalized:
        return MATCH_NOTHING

    flags = 0 if case_sensitive else re.IGNORECASE
    escaped = [escape_term(term) for term in normalized]

    if resolved == "all_terms":
        # matches only at offset 0
        lookaheads = "".join(rf"(?=[\s\S]*\b{term}\b)" for term in escaped)
        return re.compile(rf"\A{lookaheads}[\s\S]*", flags)

    if resolved == "any_term":
        return re.compile(rf"\b(?:{'|'.join(escaped)})\b", flags)

    words = [escape_term(word) for term in normalized for word in term.split()]
    return re.compile(r"\s+".join(words), flags)


def compile_query(
    query: str,
    strategy: QueryStrategy = "auto",
    case_sensitive: bool = False,
) -> tuple[ParsedQuery, re.Pattern[str]]:
    """Parse ``query`` and compile its matcher in one step.

    ``auto`` defers to the detected strategy, so quoting and ``OR`` are honoured.
    """
    parsed = parse(query, case_sensitive)
    effective = parsed.strategy if strategy == "auto" else strategy
    return parsed, create_pattern(parsed.terms, effective, case_sensitive)
