"""Vault-backed document source for the search core.

The store owns all file I/O: it walks the vault, parses YAML front matter with
python-frontmatter and hands immutable :class:`Document` objects to the search
engine. Parsed documents are kept in an explicit :class:`DocumentCache` whose
clock and TTL are injected, so tests never have to patch time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Iterable, Iterator, Optional

import frontmatter
import yaml

from obsidian_search.constants import DOCUMENT_CACHE_TTL_SECONDS
from obsidian_search.core.vault_operations import (
    ensure_vault_ready,
    relative_note_path,
    resolve_folder_path,
)
from obsidian_search.data_models import Document, SearchFilters, VaultMetadata

logger = logging.getLogger(__name__)

IGNORED_DIRECTORIES = frozenset({"node_modules"})


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter metadata and note body from raw text.

    Returns:
        A tuple of ``(metadata, content)`` where ``metadata`` is the parsed YAML
        dictionary (empty when no frontmatter is present) and ``content`` is the
        markdown body without the frontmatter block.

    Raises:
        ValueError: If the frontmatter block exists but cannot be parsed as YAML.
    """
    if not text:
        return {}, ""

    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Frontmatter contains invalid YAML: {exc}") from exc
    except Exception as exc:  # pragma: no cover
        raise ValueError(f"Unable to parse frontmatter: {exc}") from exc

    if not isinstance(post.metadata, Mapping):
        raise ValueError("Frontmatter must be a YAML mapping")

    def _convert(value: Any) -> Any:
        if isinstance(value, Mapping):
            return {str(k): _convert(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_convert(item) for item in value]
        return value

    metadata = {str(key): _convert(value) for key, value in post.metadata.items()}
    content = post.content if post.content is not None else ""
    return metadata, content


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Interpret a front matter value as a naive local datetime, if possible."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return coerce_datetime(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def _is_ignored(relative: PurePosixPath) -> bool:
    return any(part.startswith(".") or part in IGNORED_DIRECTORIES for part in relative.parts[:-1])


def folder_matches(path: str, folder: str) -> bool:
    """Case-insensitive path-prefix test; an empty folder matches every path."""
    prefix = folder.strip().strip("/").lower()
    return not prefix or path.lower().startswith(prefix)


# ==============================================================================
# CACHE
# ==============================================================================


@dataclass(frozen=True)
class _CacheEntry:
    mtime_ns: int
    stored_at: float
    document: Document


class DocumentCache:
    """Parsed-document cache keyed by absolute path.

    An entry is served only while it is younger than ``ttl_seconds`` according
    to ``clock`` and the file's mtime has not changed since it was stored.
    """

    def __init__(
        self,
        ttl_seconds: float = DOCUMENT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be zero or positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def get(self, key: str, mtime_ns: int) -> Optional[Document]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.mtime_ns != mtime_ns or self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.document

    def put(self, key: str, mtime_ns: int, document: Document) -> None:
        self._entries[key] = _CacheEntry(mtime_ns=mtime_ns, stored_at=self._clock(), document=document)

    def prune(self, keep: set[str]) -> int:
        """Drop entries whose key is not in ``keep``; return how many were dropped."""
        stale = [key for key in self._entries if key not in keep]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one entry, or every entry when ``key`` is omitted."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


# ==============================================================================
# STORE
# ==============================================================================


class VaultDocumentStore:
    """Reads notes from one vault and produces :class:`Document` objects."""

    def __init__(self, vault: VaultMetadata, cache: Optional[DocumentCache] = None) -> None:
        self.vault = vault
        self.cache = cache if cache is not None else DocumentCache()

    def _iter_note_paths(self, root: Path, pattern: str = "**/*.md") -> Iterator[Path]:
        vault_root = self.vault.path.resolve(strict=False)
        for path in sorted(root.glob(pattern)):
            if not path.is_file() or path.suffix.lower() != ".md":
                continue
            relative = PurePosixPath(path.resolve(strict=False).relative_to(vault_root).as_posix())
            if _is_ignored(relative):
                continue
            yield path

    def load_document(self, path: Path) -> Document:
        """Read and parse one note, consulting the cache first.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the note's front matter is malformed.
        """
        stat = path.stat()
        key = str(path)
        cached = self.cache.get(key, stat.st_mtime_ns)
        if cached is not None:
            return cached

        text = path.read_text(encoding="utf-8")
        metadata, body = parse_frontmatter(text)

        modified_at = datetime.fromtimestamp(stat.st_mtime)
        birth = getattr(stat, "st_birthtime", None) or stat.st_ctime
        created_at = coerce_datetime(metadata.get("date created")) or datetime.fromtimestamp(birth)

        document = Document(
            path=relative_note_path(self.vault, path),
            frontmatter=metadata,
            body=body,
            modified_at=modified_at,
            created_at=created_at,
        )
        self.cache.put(key, stat.st_mtime_ns, document)
        return document

    def _load_all(self, paths: Iterable[Path]) -> list[Document]:
        documents: list[Document] = []
        for path in paths:
            try:
                documents.append(self.load_document(path))
            except (OSError, UnicodeDecodeError, ValueError) as exc:
                logger.warning(
                    "Skipping note '%s' in vault '%s': %s",
                    path,
                    self.vault.name,
                    exc,
                )
        return documents

    def list_candidate_documents(self, filters: Optional[SearchFilters] = None) -> list[Document]:
        """Return every readable note, narrowed by the folder filters when given.

        Raises:
            FileNotFoundError: If the vault directory is not accessible.
        """
        ensure_vault_ready(self.vault)
        paths = list(self._iter_note_paths(self.vault.path))
        dropped = self.cache.prune({str(path) for path in paths})
        if dropped:
            logger.debug("Dropped %d cached note(s) no longer in vault '%s'", dropped, self.vault.name)
        documents = self._load_all(paths)
        if filters is None:
            return documents

        if filters.folder:
            documents = [doc for doc in documents if folder_matches(doc.path, filters.folder)]
        if filters.exclude_folders:
            documents = [
                doc
                for doc in documents
                if not any(folder_matches(doc.path, folder) for folder in filters.exclude_folders if folder.strip())
            ]
        return documents

    def find_by_pattern(self, pattern: str) -> list[Document]:
        """Return notes whose vault-relative path matches a glob pattern.

        ``.md`` is appended when the pattern names no suffix and does not end in
        a wildcard.

        Raises:
            ValueError: If the pattern is empty, absolute or escapes the vault.
            FileNotFoundError: If the vault directory is not accessible.
        """
        ensure_vault_ready(self.vault)
        cleaned = pattern.strip()
        if not cleaned:
            raise ValueError("pattern cannot be empty")
        if cleaned.startswith("/") or ".." in PurePosixPath(cleaned).parts:
            raise ValueError(f"pattern must stay inside the vault: '{pattern}'")

        if not PurePosixPath(cleaned).suffix and not cleaned.endswith("*"):
            cleaned = f"{cleaned}.md"

        return self._load_all(self._iter_note_paths(self.vault.path, cleaned))

    def notes_in_folder(self, folder: str) -> list[Document]:
        """Return the notes below ``folder`` (recursively).

        Raises:
            FileNotFoundError: If the folder does not exist in the vault.
        """
        ensure_vault_ready(self.vault)
        target = resolve_folder_path(self.vault, folder)
        if not target.is_dir():
            raise FileNotFoundError(f"Folder '{folder}' not found in vault '{self.vault.name}'.")
        return self._load_all(self._iter_note_paths(target))

    def list_folders(self, folder: str = "") -> list[str]:
        """Return the names of the visible sub-folders of ``folder``, sorted.

        Raises:
            FileNotFoundError: If the folder does not exist in the vault.
        """
        ensure_vault_ready(self.vault)
        target = resolve_folder_path(self.vault, folder)
        if not target.is_dir():
            raise FileNotFoundError(f"Folder '{folder or '/'}' not found in vault '{self.vault.name}'.")
        return sorted(
            child.name
            for child in target.iterdir()
            if child.is_dir() and not child.name.startswith(".") and child.name not in IGNORED_DIRECTORIES
        )
