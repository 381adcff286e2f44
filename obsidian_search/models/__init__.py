"""Pydantic input models for the MCP tools.

Architecture:
- base: BaseVaultInput with the shared vault-name validation
- search_models: SearchVaultInput (entry modes, filters, ordering, output)
- list_models: ListVaultInput (folders, recent notes, templates, properties)
- vault_models: ListVaultsInput, SetActiveVaultInput

Usage:
    from obsidian_search.models import SearchVaultInput, ListVaultInput
"""

from .base import BaseVaultInput
from .search_models import SearchVaultInput
from .list_models import ListVaultInput
from .vault_models import ListVaultsInput, SetActiveVaultInput

__all__ = [
    "BaseVaultInput",
    "SearchVaultInput",
    "ListVaultInput",
    "ListVaultsInput",
    "SetActiveVaultInput",
]
