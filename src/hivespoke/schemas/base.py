"""Shared pydantic base classes for declaration documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Immutable model whose YAML keys are the camelCase field names."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_yaml_dict(self) -> dict:
        """Dump with published key names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class EntryModel(BaseModel):
    """Immutable model whose YAML keys are the field names verbatim."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    def to_yaml_dict(self) -> dict:
        return self.model_dump(exclude_none=True, mode="json")
