"""Shared pieces of the tool input models.

Search and listing tools both accept an optional ``vault``; the name check is
shared with :class:`~obsidian_search.models.vault_models.SetActiveVaultInput`.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator


def clean_vault_name(value: str) -> str:
    """Strip a vault name and reject blank ones.

    Raises:
        ValueError: If nothing is left after stripping whitespace.
    """
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(
            "Vault name cannot be empty. "
            "Omit it to search the active vault, or pick a name from list_vaults()."
        )
    return cleaned


class BaseVaultInput(BaseModel):
    """Inputs scoped to one vault.

    Omitting ``vault`` selects the session's active vault, falling back to the
    configured default.
    """

    vault: Optional[str] = Field(
        None,
        description=(
            "Vault to search or list (omit to use the active vault). "
            "Names come from list_vaults()."
        ),
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else clean_vault_name(v)
