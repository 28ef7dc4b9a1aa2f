"""Raw rows and records as fetched from the source, before enrichment."""

from typing import Any

from pydantic import BaseModel, Field

# One source row: field key -> scalar (or nested) value. No fixed schema.
RawRow = dict[str, Any]


class RawRecord(BaseModel):
    """
    Parent row plus every child row fetched for it, unenriched.
    Child tables map to the full list of rows returned, whatever their cardinality.
    """

    parent_key: str
    parent: RawRow = Field(default_factory=dict)
    children: dict[str, list[RawRow]] = Field(default_factory=dict)
