"""Overlay raw row values with field dictionary descriptors."""

from typing import Any

from partner_master.dictionary.loader import field_key
from partner_master.models.raw import RawRow
from partner_master.models.record import EnrichedField, EnrichedRow, FieldDictionary


def is_omitted(value: Any) -> bool:
    """Null and whitespace-only strings are dropped; 0, False and empty containers are kept."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def dictionary_key(table: str, column: str) -> str:
    """
    Dictionary key for a row column. The remote service already prefixes columns with
    the table name ("F0101_ALPH"); bare spreadsheet headers ("ALPH") get the prefix added.
    """
    if column.startswith(f"{table}_"):
        return column
    return field_key(table, column)


def enrich_row(row: RawRow, dictionary: FieldDictionary, table: str) -> EnrichedRow:
    """
    Pair every retained field with its descriptor.
    Keys stay exactly as in the raw row (source order, minus omitted fields); descriptors
    left as None when the dictionary lacks them.
    """
    enriched: EnrichedRow = {}
    for name, value in row.items():
        if is_omitted(value):
            continue
        enriched[name] = EnrichedField(
            value=value,
            details=dictionary.get(dictionary_key(table, name)),
        )
    return enriched


def enrich_rows(rows: list[RawRow], dictionary: FieldDictionary, table: str) -> list[EnrichedRow]:
    return [enrich_row(r, dictionary, table) for r in rows]
