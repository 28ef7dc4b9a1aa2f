"""Pytest fixtures for partner-master tests."""

from pathlib import Path
from typing import Any, Optional

import openpyxl
import pytest

from partner_master.connectors.base import BaseQueryClient
from partner_master.exceptions import QueryError
from partner_master.models.tables import Cardinality, TableSpec


class FakeQueryClient(BaseQueryClient):
    """
    In-memory query client. responses maps (table, filter) to rows or an exception
    to raise; unknown pairs return no rows. Every call is recorded.
    """

    source_id = "fake"

    def __init__(
        self,
        responses: Optional[dict[tuple[str, Optional[str]], Any]] = None,
        requires_pacing: bool = True,
    ):
        self.responses = responses or {}
        self.requires_pacing = requires_pacing
        self.calls: list[tuple[str, Optional[str], int]] = []
        self.authenticated = 0

    def authenticate(self) -> str:
        self.authenticated += 1
        return "fake-token"

    def query(self, table: str, filter_expression: Optional[str], row_limit: int) -> list[dict]:
        self.calls.append((table, filter_expression, row_limit))
        response = self.responses.get((table, filter_expression), [])
        if isinstance(response, Exception):
            raise response
        return [dict(r) for r in response][:row_limit]

    def tables_queried(self) -> list[str]:
        return [c[0] for c in self.calls]


def write_xlsx(path: Path, header: list[str], rows: list[list[Any]]) -> Path:
    """Write a one-sheet workbook with a header row."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(header)
    for row in rows:
        ws.append(row)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def query_failure(table: str, filter_expression: str, status: int = 500) -> QueryError:
    return QueryError(table, filter_expression, status_code=status, body="server error")


@pytest.fixture
def fake_client_cls() -> type[FakeQueryClient]:
    return FakeQueryClient


@pytest.fixture
def primary_spec() -> TableSpec:
    """Primary table whose rows carry the key under the bare field name."""
    return TableSpec(name="AddressBook", key_field="AN8", row_key_field="AN8", cardinality=Cardinality.ONE)


@pytest.fixture
def contacts_spec() -> TableSpec:
    return TableSpec(name="Contacts", key_field="AN8", cardinality=Cardinality.MANY)


@pytest.fixture
def supplier_spec() -> TableSpec:
    return TableSpec(name="Supplier", key_field="AN8", cardinality=Cardinality.ONE)


@pytest.fixture
def metadata_header() -> list[str]:
    return [
        "Table Name",
        "Alias DD Item",
        "DD Item Description",
        "Item Description",
        "DD Item Long Name",
        "DD Item Data Type Description",
        "DD Item Size",
    ]


@pytest.fixture
def dictionary_dir(tmp_path: Path, metadata_header: list[str]) -> Path:
    """Dictionary exports for AddressBook and Contacts; none for Supplier."""
    directory = tmp_path / "dictionary"
    write_xlsx(
        directory / "AddressBook.xlsx",
        metadata_header,
        [
            ["AddressBook", "AN8", "Address Number", None, "AddressNumber", "Numeric", 8],
            ["AddressBook", "Name", "Alpha Name", None, "NameAlpha", "String", 40],
        ],
    )
    write_xlsx(
        directory / "Contacts.xlsx",
        metadata_header,
        [
            ["Contacts", "AN8", "Address Number", None, "AddressNumber", "Numeric", 8],
            ["Contacts", "MLNM", None, "Mailing Name", "NameMailing", "String", 40],
        ],
    )
    return directory
