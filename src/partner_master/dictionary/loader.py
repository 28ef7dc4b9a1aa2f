"""Field dictionary loading: per-table descriptive metadata keyed by "<Table>_<Alias>".

Each logical table has its own metadata export (one sheet per table) with at least
the columns Table Name, Alias DD Item, item description, long name, data type
description and size. Exports spell the item columns two ways ("DD Item Description"
or "Item Description"); the DD-prefixed spelling wins when both are filled.
"""

import logging
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, Union

from openpyxl.utils.exceptions import InvalidFileException

from partner_master.connectors.xlsx import read_sheet_rows
from partner_master.models.record import FieldDescriptor, FieldDictionary

logger = logging.getLogger(__name__)

TABLE_NAME_COLUMN = "Table Name"
ALIAS_COLUMN = "Alias DD Item"

# (primary, fallback) source columns per descriptor attribute
DESCRIPTION_COLUMNS = ("DD Item Description", "Item Description")
LONG_NAME_COLUMNS = ("DD Item Long Name", "Item Long Name")
DATA_TYPE_COLUMNS = ("DD Item Data Type Description", "Item Data Type Description")
SIZE_COLUMNS = ("DD Item Size", "Item Size")

EMPTY_DICTIONARY: FieldDictionary = MappingProxyType({})


def field_key(table: str, field: str) -> str:
    """Dictionary lookup key for a table field."""
    return f"{table}_{field}"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _first_present(row: Mapping[str, Any], columns: Iterable[str]) -> Any:
    for column in columns:
        value = row.get(column)
        if not _is_blank(value):
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_size(value: Any) -> Optional[Union[int, float, str]]:
    """Numeric sizes as numbers; anything non-numeric kept as text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if isinstance(value, float) and value.is_integer() else value
    text = str(value).strip()
    try:
        number = float(text)
    except ValueError:
        return text
    return int(number) if number.is_integer() else number


def build_field_dictionary(rows: Iterable[Mapping[str, Any]]) -> FieldDictionary:
    """
    Build a read-only field dictionary from metadata rows.
    Rows missing the table name or alias are skipped; a later row for the same key wins.
    """
    entries: dict[str, FieldDescriptor] = {}
    skipped = 0
    for row in rows:
        table = _as_text(row.get(TABLE_NAME_COLUMN))
        alias = _as_text(row.get(ALIAS_COLUMN))
        if not table or not alias:
            skipped += 1
            continue
        key = field_key(table, alias)
        entries[key] = FieldDescriptor(
            field_key=key,
            description=_as_text(_first_present(row, DESCRIPTION_COLUMNS)),
            long_name=_as_text(_first_present(row, LONG_NAME_COLUMNS)),
            data_type_description=_as_text(_first_present(row, DATA_TYPE_COLUMNS)),
            size=_as_size(_first_present(row, SIZE_COLUMNS)),
        )
    if skipped:
        logger.debug("Skipped %d metadata rows without table name or alias", skipped)
    return MappingProxyType(entries)


class FieldDictionaryLoader(ABC):
    """Loads the field dictionary for one logical table."""

    @abstractmethod
    def load(self, table: str) -> FieldDictionary:
        """Return the table's dictionary; an empty mapping when no metadata source exists."""
        pass


class XlsxFieldDictionaryLoader(FieldDictionaryLoader):
    """Reads <data_dir>/<table>.xlsx (first sheet, header row first)."""

    def __init__(self, data_dir: str | Path = "data/dictionary"):
        self._data_dir = Path(data_dir)

    def path_for(self, table: str) -> Path:
        return self._data_dir / f"{table}.xlsx"

    def load(self, table: str) -> FieldDictionary:
        path = self.path_for(table)
        if not path.exists():
            logger.info("%s not found in %s. Returning empty field map.", path.name, self._data_dir)
            return EMPTY_DICTIONARY
        try:
            dictionary = build_field_dictionary(read_sheet_rows(path))
        except (OSError, zipfile.BadZipFile, InvalidFileException) as e:
            logger.warning("Could not read field metadata from %s: %s", path, e)
            return EMPTY_DICTIONARY
        logger.info("Loaded %d field descriptors for %s", len(dictionary), table)
        return dictionary


class StaticFieldDictionaryLoader(FieldDictionaryLoader):
    """Serves dictionaries built in memory, e.g. from rows already at hand."""

    def __init__(self, tables: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None):
        self._tables = {
            name: build_field_dictionary(rows) for name, rows in (tables or {}).items()
        }

    def load(self, table: str) -> FieldDictionary:
        return self._tables.get(table, EMPTY_DICTIONARY)


class FieldDictionaryCache:
    """
    Loads each table's dictionary once per run and hands out the same read-only mapping.
    Call preload() before fanning out to worker threads.
    """

    def __init__(self, loader: FieldDictionaryLoader):
        self._loader = loader
        self._loaded: dict[str, FieldDictionary] = {}

    def preload(self, tables: Iterable[str]) -> None:
        for table in tables:
            self.get(table)

    def get(self, table: str) -> FieldDictionary:
        if table not in self._loaded:
            self._loaded[table] = self._loader.load(table)
        return self._loaded[table]

    def __contains__(self, table: str) -> bool:
        return table in self._loaded
