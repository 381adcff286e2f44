"""Shared fixtures: throwaway vaults on disk and a configuration pointing at them."""

import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import pytest

from obsidian_search.config import clear_document_stores, get_vault_configuration
from obsidian_search.constants import CONFIG_ENV_VAR
from obsidian_search.data_models import VaultMetadata
from obsidian_search.session import clear_sessions

FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0)

NoteWriter = Callable[..., Path]


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def vault_root(tmp_path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def vault(vault_root) -> VaultMetadata:
    return VaultMetadata(
        name="test",
        path=vault_root,
        description="Test vault",
        exists=True,
        templates_folder="Templates",
        daily_notes_folder="Daily Notes",
    )


@pytest.fixture
def write_note(vault_root) -> NoteWriter:
    """Return a helper that writes a note and optionally pins its mtime."""

    def _write(relative: str, text: str, modified: Optional[datetime] = None) -> Path:
        path = vault_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        if modified is not None:
            timestamp = modified.timestamp()
            os.utime(path, (timestamp, timestamp))
        return path

    return _write


@pytest.fixture
def configured_vault(tmp_path, vault_root, monkeypatch):
    """Point the configuration loader at a vaults.yaml naming ``vault_root``."""
    config_path = tmp_path / "vaults.yaml"
    config_path.write_text(
        "default: test\n"
        "vaults:\n"
        "  test:\n"
        f"    path: {vault_root.as_posix()}\n"
        "    description: Test vault\n"
        "    templates_folder: Templates\n"
        "  other:\n"
        f"    path: {(tmp_path / 'missing').as_posix()}\n"
        "    description: Not on disk\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    get_vault_configuration.cache_clear()
    clear_sessions()
    clear_document_stores()
    yield config_path
    get_vault_configuration.cache_clear()
    clear_sessions()
    clear_document_stores()
