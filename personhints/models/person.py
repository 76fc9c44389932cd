"""Person directory data model definitions."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PersonRef(BaseModel):
    """Read-only projection of a directory entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Unique person identifier")
    full_name: str = Field("", alias="fullName")
    first_name_used: Optional[str] = Field(None, alias="gebruikteVoornaam")
    last_name: Optional[str] = Field(None, alias="achternaam")
    alternative_name: Optional[str] = Field(None, alias="alternatieveNaam")
    uri: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_full_name(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("fullName") or data.get("full_name"):
            return data
        first = data.get("gebruikteVoornaam", data.get("first_name_used")) or ""
        last = data.get("achternaam", data.get("last_name")) or ""
        return {**data, "full_name": f"{first} {last}".strip()}

    def name_fields(self) -> tuple[str, str, str]:
        """Fields a prefix is matched against, lower-cased."""

        return (
            (self.full_name or "").lower(),
            (self.first_name_used or "").lower(),
            (self.last_name or "").lower(),
        )
