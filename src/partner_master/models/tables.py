"""Logical table descriptors."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Cardinality(str, Enum):
    """How many child rows a parent keeps for one table."""

    ONE = "one"
    MANY = "many"


class TableSpec(BaseModel):
    """
    One logical table and the field that joins it to the parent.
    key_field is the bare name used in filter expressions (e.g. AN8).
    row_key_field is the column carrying the key in returned rows; the remote
    service prefixes columns with the table name, so it defaults to "<name>_<key_field>".
    """

    name: str = Field(..., min_length=1)
    key_field: str = "AN8"
    row_key_field: Optional[str] = None
    cardinality: Cardinality = Cardinality.MANY
    label: Optional[str] = None

    @property
    def key_column(self) -> str:
        return self.row_key_field or f"{self.name}_{self.key_field}"

    @property
    def display_name(self) -> str:
        return self.label or self.name
