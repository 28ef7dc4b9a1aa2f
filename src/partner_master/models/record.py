"""Enriched field, row and master record models."""

from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FieldDescriptor(BaseModel):
    """Descriptive metadata for one field, keyed by "<TableName>_<FieldAlias>"."""

    model_config = ConfigDict(frozen=True)

    field_key: str
    description: Optional[str] = None
    long_name: Optional[str] = None
    data_type_description: Optional[str] = None
    size: Optional[Union[int, float, str]] = None


# Read-only mapping of field_key -> FieldDescriptor for one logical table.
FieldDictionary = Mapping[str, FieldDescriptor]


class EnrichedField(BaseModel):
    """Raw value plus its descriptor; details is None when the dictionary has no entry."""

    value: Any = None
    details: Optional[FieldDescriptor] = None


EnrichedRow = dict[str, EnrichedField]


class MasterRecord(BaseModel):
    """
    Fully joined, enriched record for one business partner.
    children maps logical table name to a single row (cardinality one) or a list (many).
    A one-to-one table with no matching row has no key at all.
    """

    parent_key: str
    parent: EnrichedRow = Field(default_factory=dict)
    children: dict[str, Union[list[EnrichedRow], EnrichedRow]] = Field(default_factory=dict)
