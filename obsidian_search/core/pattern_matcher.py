"""Match compiled query patterns against documents.

Front matter values, the note body and the note path are tested
independently; every independent hit becomes its own :class:`MatchRecord`
carrying a short context window for display.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from obsidian_search.constants import CONTEXT_RADIUS, TITLE_KEYS
from obsidian_search.core.vault_operations import note_display_name
from obsidian_search.data_models import Document, MatchRecord, MatchType

_WHITESPACE = re.compile(r"\s+")


def extract_context(text: str, position: int, length: int = 0, radius: int = CONTEXT_RADIUS) -> str:
    """Return a single-line window of roughly ``2 * radius`` characters around a hit."""
    start = max(0, position - radius)
    end = min(len(text), position + max(length, 1) + radius)
    end = min(end, start + 2 * radius)
    window = _WHITESPACE.sub(" ", text[start:end]).strip()

    if start > 0:
        window = "..." + window
    if end < len(text):
        window = window + "..."
    return window


def stringify(value: Any) -> Optional[str]:
    """Render a scalar front matter value for matching, or None for containers."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def iter_frontmatter_values(frontmatter: dict[str, Any]) -> Iterator[tuple[str, str]]:
    """Yield ``(key, text)`` for every scalar value, flattening lists."""
    for key, value in frontmatter.items():
        items = value if isinstance(value, (list, tuple)) else [value]
        for item in items:
            text = stringify(item)
            if text:
                yield key, text


@dataclass(frozen=True)
class PatternMatcher:
    """Applies one compiled pattern to documents.

    With ``find_all`` every non-overlapping occurrence is recorded (raw regex
    queries); otherwise a field contributes at most one record.
    """

    pattern: re.Pattern[str]
    find_all: bool = False
    include_frontmatter: bool = True
    include_content: bool = True
    include_path: bool = True

    def find(self, text: str, match_type: MatchType, field: Optional[str] = None) -> list[MatchRecord]:
        if not text:
            return []

        if self.find_all:
            found = [hit for hit in self.pattern.finditer(text) if hit.group(0)]
        else:
            hit = self.pattern.search(text)
            found = [hit] if hit is not None else []

        return [
            MatchRecord(
                type=match_type,
                field=field,
                text=hit.group(0),
                context=extract_context(text, hit.start(), len(hit.group(0))),
                position=hit.start(),
            )
            for hit in found
        ]

    def match(self, document: Document) -> list[MatchRecord]:
        """Return every match record for ``document`` (possibly empty)."""
        records: list[MatchRecord] = []

        if self.include_frontmatter:
            for key, text in iter_frontmatter_values(document.frontmatter):
                records.extend(self.find(text, "frontmatter", key))

        if self.include_content:
            records.extend(self.find(document.body, "content"))

        if self.include_path:
            records.extend(self.find(note_display_name(document.path), "path"))

        return records

    def match_titles(self, document: Document) -> list[MatchRecord]:
        """Match only title-like sources: title, aliases and the file name."""
        records: list[MatchRecord] = []
        for key, text in iter_frontmatter_values(document.frontmatter):
            if key in TITLE_KEYS:
                records.extend(self.find(text, "frontmatter", key))
        records.extend(self.find(document.stem, "path"))
        return records


def searchable_text(document: Document) -> str:
    """All text a document can be matched on, joined by newlines."""
    parts = [note_display_name(document.path), document.body]
    parts.extend(text for _, text in iter_frontmatter_values(document.frontmatter))
    return "\n".join(parts)
