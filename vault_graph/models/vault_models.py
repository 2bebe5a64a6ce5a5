"""Pydantic input models for vault selection.

Every graph tool resolves its vault through the session state these tools manage.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ListVaultsInput(BaseModel):
    """Input model for list_vaults tool. Takes no parameters.

    Examples:
        >>> ListVaultsInput()
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{}]
        }


class SetActiveVaultInput(BaseModel):
    """Input model for set_active_vault tool.

    Examples:
        >>> SetActiveVaultInput(vault="research")
    """

    vault: str = Field(
        min_length=1,
        description=(
            "Vault name from vaults.yaml. "
            "Use list_vaults() to discover valid names."
        ),
        examples=["personal", "work", "research"]
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: str) -> str:
        """Strip whitespace and reject blank names."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError(
                "Vault name cannot be empty. "
                "Use list_vaults() to see available vaults."
            )
        return cleaned

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "personal"},
                {"vault": "research"}
            ]
        }
