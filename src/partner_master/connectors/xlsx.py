"""Shared helpers for reading first-sheet .xlsx exports as row dicts."""

import re
from pathlib import Path
from typing import Any, Iterator


def normalize_header(value: Any) -> str:
    """Header cell as a clean column name ('' for blanks)."""
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def normalize_cell(value: Any) -> Any:
    """Integral floats become ints (Excel stores 4242 as 4242.0); everything else as-is."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def read_sheet_rows(path: Path) -> Iterator[dict[str, Any]]:
    """
    Yield one dict per data row of the first worksheet, keyed by the header row.
    Columns with a blank header are dropped; fully empty rows are skipped.
    """
    import openpyxl

    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = wb.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return
        headers = [normalize_header(h) for h in header]
        for values in rows:
            if not any(v is not None and v != "" for v in values):
                continue
            yield {
                h: normalize_cell(v)
                for h, v in zip(headers, values)
                if h
            }
    finally:
        wb.close()
