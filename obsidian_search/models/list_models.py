"""Pydantic input model for the list_vault tool."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator

from obsidian_search.data_models import LIST_TYPES

from .base import BaseVaultInput


class ListVaultInput(BaseVaultInput):
    """Input model for list_vault tool.

    Enumerates folders, recently modified notes, templates or front matter
    properties. ``type='auto'`` picks one from the other arguments.

    Examples:
        >>> ListVaultInput(type="folders", path="Projects")
        >>> ListVaultInput(type="recent_notes", limit=5)
        >>> ListVaultInput(type="yaml_properties", include_count=True)
    """

    type: str = Field(
        "auto",
        description="'folders', 'recent_notes', 'templates', 'yaml_properties' or 'auto'."
    )

    path: str = Field(
        "",
        description=(
            "Vault-relative folder for 'folders' and 'recent_notes'. "
            "Empty means the vault root (or the daily notes folder for 'recent_notes')."
        )
    )

    limit: Optional[int] = Field(
        None,
        description="Number of recent notes (1-100, default 10). Out-of-range values are clamped."
    )

    include_count: bool = Field(False, description="Show how many notes use each yaml property.")
    exclude_standard: bool = Field(False, description="Hide standard properties such as title, tags and aliases.")

    format: Literal["concise", "detailed"] = Field("detailed", description="'concise' or 'detailed'.")

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate type is one of the allowed list types."""
        cleaned = v.strip().lower()
        if cleaned not in LIST_TYPES:
            raise ValueError(
                f"Invalid type '{v}'. "
                f"Must be one of: {', '.join(LIST_TYPES)}"
            )
        return cleaned

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject absolute paths and '..' segments."""
        cleaned = v.strip()
        if cleaned.startswith("/"):
            raise ValueError(
                "Path must be relative to the vault root. "
                f"Invalid path: '{cleaned}'"
            )
        if any(part == ".." for part in cleaned.split("/")):
            raise ValueError(
                "Path cannot contain '..' segments. "
                f"Invalid path: '{cleaned}'"
            )
        return cleaned.rstrip("/")

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"type": "folders"},
                {"type": "recent_notes", "limit": 5, "format": "concise"},
                {"type": "templates"},
                {"type": "yaml_properties", "include_count": True, "exclude_standard": True}
            ]
        }
