"""Vault enumerations (folders, recent notes, templates, YAML properties)."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Optional

from obsidian_search.constants import DEFAULT_LIST_LIMIT, STANDARD_PROPERTIES
from obsidian_search.core.document_store import VaultDocumentStore
from obsidian_search.core.response_truncator import ResponseTruncator, TokenBudgetConfig, take_while_fits
from obsidian_search.core.result_formatter import display_title, frame_response
from obsidian_search.core.search_operations import body_budget
from obsidian_search.core.validation import validate_max_results
from obsidian_search.core.vault_operations import ensure_vault_ready
from obsidian_search.data_models import ListType, ResponseFormat, VaultMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ListItem:
    concise: str
    detailed: str


@dataclass(frozen=True)
class _Listing:
    """Items for one list type plus the text around them."""

    header: str
    items: list[_ListItem]
    empty_message: str
    detailed_separator: str = "\n"


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def resolve_list_type(
    list_type: ListType,
    path: str = "",
    limit: Optional[int] = None,
    include_count: bool = False,
) -> str:
    """Pick a concrete list type for ``"auto"`` from the other arguments."""
    if list_type != "auto":
        return list_type
    if path.strip():
        return "folders"
    if limit is not None:
        return "recent_notes"
    if include_count:
        return "yaml_properties"
    return "folders"


def _list_folders(store: VaultDocumentStore, path: str) -> _Listing:
    folder = path.strip().strip("/")
    names = store.list_folders(folder)
    items = [
        _ListItem(concise=name, detailed=f"- {folder}/{name}/" if folder else f"- {name}/")
        for name in names
    ]
    return _Listing(
        header=f"Folders in {folder or 'vault root'}:",
        items=items,
        empty_message=f"No folders found in {folder or 'vault root'}.",
    )


def _list_recent_notes(store: VaultDocumentStore, vault: VaultMetadata, path: str, limit: int) -> _Listing:
    folder = path.strip().strip("/") or (vault.daily_notes_folder or "")
    documents = store.notes_in_folder(folder)
    documents.sort(key=lambda document: document.path)
    documents.sort(key=lambda document: document.modified_at, reverse=True)
    documents = documents[:limit]

    items = [
        _ListItem(
            concise=document.path,
            detailed=(
                f"**{display_title(document)}**\n"
                f"`{document.path}`\n"
                f"Modified: {document.modified_at:%Y-%m-%d %H:%M}"
            ),
        )
        for document in documents
    ]
    scope = folder or "vault"
    return _Listing(
        header=f"Latest {len(items)} notes in {scope}:",
        items=items,
        empty_message=f"No notes found in {scope}.",
        detailed_separator="\n\n",
    )


def _list_templates(store: VaultDocumentStore, vault: VaultMetadata) -> _Listing:
    if not vault.templates_folder:
        raise ValueError(f"Vault '{vault.name}' has no 'templates_folder' configured")

    documents = sorted(store.notes_in_folder(vault.templates_folder), key=lambda document: document.path)
    items: list[_ListItem] = []
    for index, document in enumerate(documents, start=1):
        fm = document.frontmatter
        description = fm.get("description") or "No description"
        target = fm.get("target folder") or "Auto-detect"
        content_type = document.content_type or "Varies"
        items.append(
            _ListItem(
                concise=f"**{document.stem}**: {document.title}",
                detailed=(
                    f"**{index}. {document.title}** (`{document.stem}`)\n"
                    f"   {description}\n"
                    f"   Target: `{target}`\n"
                    f"   Content Type: {content_type}"
                ),
            )
        )
    return _Listing(
        header="# Available Templates",
        items=items,
        empty_message=f"No templates found in '{vault.templates_folder}'.",
        detailed_separator="\n\n",
    )


def collect_yaml_properties(store: VaultDocumentStore, exclude_standard: bool = False) -> tuple[Counter[str], int]:
    """Count how many notes use each front matter key.

    Returns:
        A tuple of ``(counts, note_count)``.
    """
    counts: Counter[str] = Counter()
    documents = store.list_candidate_documents()
    for document in documents:
        counts.update(document.frontmatter.keys())
    if exclude_standard:
        for key in STANDARD_PROPERTIES:
            counts.pop(key, None)
    return counts, len(documents)


def _list_yaml_properties(store: VaultDocumentStore, include_count: bool, exclude_standard: bool) -> _Listing:
    counts, note_count = collect_yaml_properties(store, exclude_standard)
    items: list[_ListItem] = []
    for prop in sorted(counts, key=str.lower):
        if include_count:
            count = counts[prop]
            detailed = f"- **{prop}** (used in {count} note{'s' if count != 1 else ''})"
        else:
            detailed = f"- {prop}"
        items.append(_ListItem(concise=prop, detailed=detailed))

    return _Listing(
        header=(
            "# YAML Properties in Vault\n\n"
            f"Found **{len(items)}** unique properties across **{note_count}** notes"
        ),
        items=items,
        empty_message="No YAML properties found.",
    )


# ==============================================================================
# LIST OPERATIONS
# ==============================================================================


def execute_list(
    vault: VaultMetadata,
    list_type: ListType = "auto",
    path: str = "",
    limit: Optional[int] = None,
    include_count: bool = False,
    exclude_standard: bool = False,
    format: ResponseFormat = "detailed",
    budget: Optional[TokenBudgetConfig] = None,
    store: Optional[VaultDocumentStore] = None,
) -> dict[str, Any]:
    """Enumerate vault contents within a character budget.

    Args:
        vault: Vault metadata.
        list_type: ``folders``, ``recent_notes``, ``templates``,
            ``yaml_properties`` or ``auto``.
        path: Vault-relative folder for ``folders`` and ``recent_notes``.
        limit: Number of recent notes, clamped to [1, 100] (default 10).
        include_count: Report per-property usage counts.
        exclude_standard: Leave out the standard front matter keys.
        format: ``"detailed"`` (default) or ``"concise"``.
        budget: Response size limits; defaults to :class:`TokenBudgetConfig`.
        store: Document store to read from; created for ``vault`` when omitted.

    Returns:
        A dictionary containing the vault name, resolved list type, the
        response ``content`` and ``truncation`` metadata (``None`` when complete).

    Raises:
        FileNotFoundError: If the vault or the requested folder does not exist.
        ValueError: If the list type is unknown or the vault lacks a templates folder.
    """
    ensure_vault_ready(vault)
    store = store if store is not None else VaultDocumentStore(vault)
    resolved = resolve_list_type(list_type, path, limit, include_count)

    if resolved == "folders":
        listing = _list_folders(store, path)
    elif resolved == "recent_notes":
        clamped = validate_max_results(limit, default=DEFAULT_LIST_LIMIT)
        listing = _list_recent_notes(store, vault, path, clamped.value)
    elif resolved == "templates":
        listing = _list_templates(store, vault)
    elif resolved == "yaml_properties":
        listing = _list_yaml_properties(store, include_count, exclude_standard)
    else:
        raise ValueError(f"list type must be one of folders, recent_notes, templates, yaml_properties, auto; got '{list_type}'")

    truncator = ResponseTruncator(body_budget(budget if budget is not None else TokenBudgetConfig()))
    separator = listing.detailed_separator if format == "detailed" else "\n"
    fragments: list[str] = []
    if format == "detailed" and listing.items:
        fragments.extend(take_while_fits(truncator, [listing.header], "\n\n"))

    rendered = (item.detailed if format == "detailed" else item.concise for item in listing.items)
    accepted = take_while_fits(truncator, rendered, separator)
    truncation = truncator.get_truncation_info(len(accepted), len(listing.items), format)

    body = separator.join(accepted)
    if fragments:
        body = f"{fragments[0]}\n\n{body}"
    heading = "" if listing.items else listing.empty_message
    content = frame_response(body, truncation, heading, noun="items")

    logger.info(
        "Listed %d of %d %s items for vault '%s'",
        len(accepted),
        len(listing.items),
        resolved,
        vault.name,
    )
    return {
        "vault": vault.name,
        "list_type": resolved,
        "content": content,
        "truncation": truncation.as_payload() if truncation.truncated else None,
        "total_count": len(listing.items),
        "shown_count": len(accepted),
    }
