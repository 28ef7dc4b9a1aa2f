"""Data models for raw rows, enriched records and run configuration."""

from partner_master.models.metadata import RemoteFieldMetadata, ValidValue
from partner_master.models.raw import RawRecord, RawRow
from partner_master.models.record import (
    EnrichedField,
    EnrichedRow,
    FieldDescriptor,
    FieldDictionary,
    MasterRecord,
)
from partner_master.models.run_config import RunConfig
from partner_master.models.tables import Cardinality, TableSpec

__all__ = [
    "Cardinality",
    "EnrichedField",
    "EnrichedRow",
    "FieldDescriptor",
    "FieldDictionary",
    "MasterRecord",
    "RawRecord",
    "RawRow",
    "RemoteFieldMetadata",
    "RunConfig",
    "TableSpec",
    "ValidValue",
]
