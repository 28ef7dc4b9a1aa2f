"""Spreadsheet snapshot client: answers table queries from pre-fetched .xlsx exports."""

import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from partner_master.connectors.base import BaseQueryClient
from partner_master.connectors.filters import parse_filter
from partner_master.connectors.xlsx import read_sheet_rows
from partner_master.exceptions import QueryError
from partner_master.models.raw import RawRow
from partner_master.models.tables import TableSpec

logger = logging.getLogger(__name__)


class SnapshotClient(BaseQueryClient):
    """
    Serves query() from <data_dir>/<table>.xlsx, one export per logical table.
    Exports label the key column with a human header or the bare alias, so key
    lookups try the declared key_columns in order. A missing export yields no rows.
    Exports are complete local tables, so row_limit does not cap the result.
    """

    source_id = "snapshot"
    requires_pacing = False

    def __init__(
        self,
        data_dir: str | Path = "data",
        key_columns: Sequence[str] = ("AN8", "Address Number"),
    ):
        self._data_dir = Path(data_dir)
        self._key_columns = list(key_columns)
        self._tables: dict[str, list[RawRow]] = {}

    def authenticate(self) -> str:
        return "snapshot"

    def _rows(self, table: str) -> list[RawRow]:
        if table not in self._tables:
            path = self._data_dir / f"{table}.xlsx"
            if not path.exists():
                logger.info("%s not found in %s; treating as empty", path.name, self._data_dir)
                self._tables[table] = []
            else:
                self._tables[table] = list(read_sheet_rows(path))
                logger.info("Loaded %d rows from %s", len(self._tables[table]), path.name)
        return self._tables[table]

    def _candidate_columns(self, table: str, field: str) -> list[str]:
        columns = [field, f"{table}_{field}"]
        if field in self._key_columns:
            columns.extend(c for c in self._key_columns if c not in columns)
        return columns

    def _lookup(self, row: RawRow, columns: list[str]) -> Any:
        for column in columns:
            value = row.get(column)
            if value is not None and str(value).strip():
                return value
        return None

    def _matches(self, row: RawRow, columns: list[str], wanted: str) -> bool:
        value = self._lookup(row, columns)
        return value is not None and str(value).strip() == wanted

    def query(self, table: str, filter_expression: Optional[str], row_limit: int) -> list[RawRow]:
        rows = self._rows(table)
        if filter_expression:
            try:
                expr = parse_filter(filter_expression)
            except ValueError as e:
                raise QueryError(table, filter_expression, reason=str(e)) from e
            if expr.table and expr.table != table:
                raise QueryError(
                    table, filter_expression, reason=f"filter targets table {expr.table}"
                )
            columns = self._candidate_columns(table, expr.field)
            wanted = expr.value.strip()
            rows = [r for r in rows if self._matches(r, columns, wanted)]
        return [dict(r) for r in rows]

    def extract_key(self, spec: TableSpec, row: RawRow) -> Any:
        columns = [spec.key_column, *self._candidate_columns(spec.name, spec.key_field)]
        return self._lookup(row, columns)
