"""Vault-relative path helpers shared by the document store and formatters."""

from pathlib import Path

from obsidian_search.data_models import VaultMetadata


def ensure_vault_ready(vault: VaultMetadata) -> None:
    """Raise :class:`FileNotFoundError` unless the vault directory exists."""
    if not vault.path.is_dir():
        raise FileNotFoundError(f"Vault '{vault.name}' has no directory at {vault.path}")


def resolve_folder_path(vault: VaultMetadata, folder_path: str) -> Path:
    """Resolve a folder path within the vault, enforcing sandbox constraints.

    Args:
        vault: Vault metadata.
        folder_path: Folder path supplied by the caller (relative to vault root).
            An empty string resolves to the vault root.

    Returns:
        Absolute :class:`Path` to the folder inside the vault.

    Raises:
        ValueError: If the folder escapes the vault boundaries.
    """
    vault_root = vault.path.resolve(strict=False)
    cleaned = folder_path.strip().strip("/")
    if not cleaned:
        return vault_root

    candidate = (vault_root / Path(cleaned)).resolve(strict=False)
    if not candidate.is_relative_to(vault_root):
        raise ValueError(f"Folder '{folder_path}' escapes vault '{vault.name}'.")
    return candidate


def relative_note_path(vault: VaultMetadata, path: Path) -> str:
    """Convert an absolute note path into a vault-relative, forward-slash path."""
    relative = path.resolve(strict=False).relative_to(vault.path.resolve(strict=False))
    return relative.as_posix()


def note_display_name(path: str) -> str:
    """Strip the ``.md`` suffix from a vault-relative note path.

    Examples:
        >>> note_display_name("Projects/Plan.md")
        'Projects/Plan'
    """
    if path.lower().endswith(".md"):
        return path[:-3]
    return path
