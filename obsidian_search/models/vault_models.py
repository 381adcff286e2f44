"""Inputs for the vault selection tools (list_vaults, set_active_vault)."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from obsidian_search.models.base import clean_vault_name


class ListVaultsInput(BaseModel):
    """list_vaults takes no arguments; the empty model keeps every tool's signature uniform."""

    class Config:
        json_schema_extra = {"examples": [{}]}


class SetActiveVaultInput(BaseModel):
    """Choose the vault that later search_vault / list_vault calls default to.

    Examples:
        >>> SetActiveVaultInput(vault="personal").vault
        'personal'
    """

    vault: str = Field(
        min_length=1,
        description="Name of a vault declared in vaults.yaml (see list_vaults()).",
        examples=["personal", "research"],
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: str) -> str:
        return clean_vault_name(v)

    class Config:
        json_schema_extra = {
            "examples": [{"vault": "personal"}, {"vault": "research"}]
        }
