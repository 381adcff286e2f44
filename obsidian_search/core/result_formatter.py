"""Markdown rendering of search results and response framing."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from obsidian_search.constants import MAX_MATCHES_SHOWN
from obsidian_search.core.response_truncator import TruncationMetadata
from obsidian_search.core.vault_operations import note_display_name
from obsidian_search.data_models import Document, ResponseFormat, SearchResult

RESULT_SEPARATOR = "\n\n---\n\n"

_DAILY_NOTE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def note_url(vault_name: str, path: str) -> str:
    """Build an ``obsidian://open`` URL for a vault-relative note path."""
    return f"obsidian://open?vault={quote(vault_name, safe='')}&file={quote(note_display_name(path), safe='')}"


def display_title(document: Document) -> str:
    """Human title for a note; daily notes render as long dates."""
    if isinstance(document.frontmatter.get("title"), str) and document.frontmatter["title"].strip():
        return document.title

    stem = document.stem
    if _DAILY_NOTE.match(stem):
        try:
            day = datetime.strptime(stem, "%Y-%m-%d")
        except ValueError:
            return stem
        return f"{day:%B} {day.day}, {day.year}"
    return stem


def _content_type_text(document: Document) -> Optional[str]:
    value = document.content_type
    if isinstance(value, list):
        return ", ".join(str(item) for item in value) or None
    if value:
        return str(value)
    return None


def format_result(index: int, result: SearchResult, vault_name: str, format: ResponseFormat = "detailed") -> str:
    """Render one result as a Markdown fragment.

    Concise output is a single line; detailed output adds score, content type,
    path, an Obsidian link and up to three match snippets.
    """
    document = result.document
    title = display_title(document)
    path = document.path

    if format == "concise":
        return f"{index}. **{title}** - `{path}`"

    lines = [f"**{index}. {title}** (Score: {result.score:.1f})"]
    content_type = _content_type_text(document)
    if content_type:
        lines.append(f"*{content_type}*")
    lines.append(f"{len(result.matches)} matches")
    lines.append(f"`{path}`")
    lines.append(f"[Open in Obsidian: {title}]({note_url(vault_name, path)})")

    shown = result.matches[:MAX_MATCHES_SHOWN]
    if shown:
        lines.append("")
        lines.append("**Matches:**")
        for match in shown:
            label = f"{match.type} ({match.field})" if match.type == "frontmatter" else match.type
            lines.append(f'- *{label}*: "{match.context}"')

    return "\n".join(lines)


def truncation_notice(truncation: TruncationMetadata, noun: str = "results") -> str:
    return (
        f"Showing {truncation.shown_count} of {truncation.total_count} {noun} (limit reached)"
        f"\n\n{truncation.suggestion}"
    )


def frame_response(
    body: str,
    truncation: TruncationMetadata,
    heading: str,
    noun: str = "results",
) -> str:
    """Assemble the final text: notice, separator and body when truncated.

    Untruncated responses start with ``heading`` instead, when one is given.
    """
    if truncation.truncated:
        return f"{truncation_notice(truncation, noun)}{RESULT_SEPARATOR}{body}"
    return "\n\n".join(part for part in (heading, body) if part)
