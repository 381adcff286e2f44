"""vaults.yaml loading: vault registry, default vault and response budget.

The file is read lazily on first use and memoised. Set ``OBSIDIAN_SEARCH_CONFIG``
to point at a different file.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from obsidian_search.constants import (
    CONFIG_ENV_VAR,
    CONFIG_PATH,
    DEFAULT_ESTIMATION_RATIO,
    DEFAULT_MAX_CHARACTERS,
    MIN_MAX_CHARACTERS,
)
from obsidian_search.core.document_store import VaultDocumentStore
from obsidian_search.core.response_truncator import TokenBudgetConfig
from obsidian_search.data_models import BudgetSettings, VaultConfiguration, VaultMetadata

logger = logging.getLogger(__name__)

# vault name -> store, kept for the life of the process
_DOCUMENT_STORES: dict[str, VaultDocumentStore] = {}


def _optional_folder(name: str, entry: dict[str, Any], key: str) -> Optional[str]:
    value = entry.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Vault '{name}' has an invalid '{key}' value; expected a folder path string")
    return value.strip().strip("/")


def _load_vault(name: str, entry: Any) -> VaultMetadata:
    if not isinstance(entry, dict):
        raise ValueError(f"Vault '{name}' must be a mapping with at least a 'path' key")

    raw_path = entry.get("path")
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise ValueError(f"Vault '{name}' needs a non-empty 'path' string")

    path = Path(raw_path).expanduser().resolve(strict=False)
    return VaultMetadata(
        name=name,
        path=path,
        description=str(entry.get("description") or "").strip(),
        exists=path.is_dir(),
        templates_folder=_optional_folder(name, entry, "templates_folder"),
        daily_notes_folder=_optional_folder(name, entry, "daily_notes_folder"),
    )


def _load_budget(raw_budget: Any) -> BudgetSettings:
    if raw_budget is None:
        return BudgetSettings(
            max_characters=DEFAULT_MAX_CHARACTERS,
            estimation_ratio=DEFAULT_ESTIMATION_RATIO,
        )
    if not isinstance(raw_budget, dict):
        raise ValueError("'response_budget' must be a mapping")

    max_characters = raw_budget.get("max_characters", DEFAULT_MAX_CHARACTERS)
    estimation_ratio = raw_budget.get("estimation_ratio", DEFAULT_ESTIMATION_RATIO)
    for key, value in (("max_characters", max_characters), ("estimation_ratio", estimation_ratio)):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"'response_budget.{key}' must be a positive integer")
    if max_characters < MIN_MAX_CHARACTERS:
        raise ValueError(
            f"'response_budget.max_characters' must be at least {MIN_MAX_CHARACTERS} "
            "to leave room for the truncation notice"
        )

    return BudgetSettings(max_characters=max_characters, estimation_ratio=estimation_ratio)


def resolve_config_path() -> Path:
    """Return the configuration path, honouring the ``OBSIDIAN_SEARCH_CONFIG`` override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def load_vault_configuration(config_path: Path = CONFIG_PATH) -> VaultConfiguration:
    """Read ``config_path`` into a :class:`VaultConfiguration`.

    Expected layout::

        default: personal
        vaults:
          personal:
            path: ~/Obsidian/Personal
            templates_folder: Templates      # optional
            daily_notes_folder: Daily Notes  # optional
        response_budget:                      # optional
          max_characters: 100000

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: If a section is missing or malformed; the message names it.
    """
    if not config_path.is_file():
        raise FileNotFoundError(
            f"No vault configuration at {config_path}. "
            f"Copy vaults.example.yaml there or set {CONFIG_ENV_VAR}."
        )

    document = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(document, dict):
        raise ValueError(f"{config_path} must contain a YAML mapping")

    raw_vaults = document.get("vaults")
    if not isinstance(raw_vaults, dict) or not raw_vaults:
        raise ValueError("Vault configuration needs a non-empty 'vaults' mapping")
    vaults = {str(name): _load_vault(str(name), entry) for name, entry in raw_vaults.items()}

    default_vault = document.get("default")
    if not isinstance(default_vault, str) or default_vault not in vaults:
        raise ValueError(
            f"'default' must name one of the configured vaults ({', '.join(sorted(vaults))}); "
            f"got {default_vault!r}"
        )

    budget = _load_budget(document.get("response_budget"))
    logger.debug("Loaded %d vault(s) from %s", len(vaults), config_path)
    return VaultConfiguration(default_vault=default_vault, vaults=vaults, budget=budget)


@lru_cache(maxsize=1)
def get_vault_configuration() -> VaultConfiguration:
    """Load the configuration on first use and memoise it.

    Call ``get_vault_configuration.cache_clear()`` to force a reload.
    """
    return load_vault_configuration(resolve_config_path())


def get_response_budget() -> TokenBudgetConfig:
    """Response size limits from the configuration's ``response_budget`` section."""
    settings = get_vault_configuration().budget
    return TokenBudgetConfig.from_characters(settings.max_characters, settings.estimation_ratio)


def get_document_store(vault: VaultMetadata) -> VaultDocumentStore:
    """Shared store for ``vault``; its document cache persists across tool calls.

    The store is replaced when the vault's metadata changes after a reload.
    """
    store = _DOCUMENT_STORES.get(vault.name)
    if store is None or store.vault != vault:
        store = VaultDocumentStore(vault)
        _DOCUMENT_STORES[vault.name] = store
    return store


def clear_document_stores() -> None:
    _DOCUMENT_STORES.clear()
