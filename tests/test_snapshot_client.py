"""Unit tests for the spreadsheet snapshot client."""

from pathlib import Path

import pytest

from conftest import write_xlsx
from partner_master.connectors.snapshot import SnapshotClient
from partner_master.exceptions import QueryError
from partner_master.models.run_config import RunConfig
from partner_master.models.tables import TableSpec
from partner_master.pipeline import run_batch


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "snapshot"
    write_xlsx(
        directory / "F0101.xlsx",
        ["Address Number", "Alpha Name", "AT1"],
        [[4242.0, "Acme", "V"], [77, "Globex", "C"], [None, None, None], [9001, "Initech", "V"]],
    )
    write_xlsx(
        directory / "F0115.xlsx",
        ["AN8", "PH1"],
        [[4242, "555-0100"], [4242, "555-0101"], [77, "555-0199"]],
    )
    return directory


class TestSnapshotClientQuery:
    """Tests for query."""

    def test_filters_by_key_alias_header(self, snapshot_dir: Path) -> None:
        client = SnapshotClient(snapshot_dir)
        rows = client.query("F0101", "AN8 EQ 4242", 10)
        assert rows == [{"Address Number": 4242, "Alpha Name": "Acme", "AT1": "V"}]

    def test_qualified_filter(self, snapshot_dir: Path) -> None:
        client = SnapshotClient(snapshot_dir)
        rows = client.query("F0115", "F0115.AN8 EQ 4242", 10)
        assert [r["PH1"] for r in rows] == ["555-0100", "555-0101"]

    def test_non_key_filter(self, snapshot_dir: Path) -> None:
        client = SnapshotClient(snapshot_dir)
        rows = client.query("F0101", "F0101.AT1 EQ V", 10)
        assert [r["Alpha Name"] for r in rows] == ["Acme", "Initech"]

    def test_skips_empty_rows_and_ignores_limit(self, snapshot_dir: Path) -> None:
        """Exports are whole tables; the remote row cap does not apply."""
        client = SnapshotClient(snapshot_dir)
        assert len(client.query("F0101", None, 10)) == 3
        assert len(client.query("F0101", None, 2)) == 3
        assert len(client.query("F0115", "AN8 EQ 4242", 1)) == 2

    def test_missing_export_returns_no_rows(self, snapshot_dir: Path) -> None:
        client = SnapshotClient(snapshot_dir)
        assert client.query("F0111", "AN8 EQ 4242", 10) == []

    def test_unparseable_filter_raises_query_error(self, snapshot_dir: Path) -> None:
        client = SnapshotClient(snapshot_dir)
        with pytest.raises(QueryError):
            client.query("F0115", "AN8 LIKE 42%", 10)

    def test_filter_for_other_table_raises(self, snapshot_dir: Path) -> None:
        client = SnapshotClient(snapshot_dir)
        with pytest.raises(QueryError, match="targets table F0101"):
            client.query("F0115", "F0101.AN8 EQ 4242", 10)

    def test_does_not_require_pacing(self, snapshot_dir: Path) -> None:
        assert SnapshotClient(snapshot_dir).requires_pacing is False


class TestSnapshotClientExtractKey:
    def test_uses_declared_key_columns(self, snapshot_dir: Path) -> None:
        client = SnapshotClient(snapshot_dir)
        spec = TableSpec(name="F0101")
        assert client.extract_key(spec, {"Address Number": 4242}) == 4242
        assert client.extract_key(spec, {"AN8": "77"}) == "77"
        assert client.extract_key(spec, {"Alpha Name": "x"}) is None


class TestSnapshotBatch:
    """Batch runs over snapshot exports cover every row of every table."""

    def test_row_limit_does_not_truncate_batch(self, tmp_path: Path) -> None:
        snapshot_dir = tmp_path / "snapshot"
        write_xlsx(
            snapshot_dir / "F0101.xlsx",
            ["Address Number", "Alpha Name", "AT1"],
            [[n, f"Vendor {n}", "V"] for n in range(1, 16)],
        )
        write_xlsx(
            snapshot_dir / "F0115.xlsx",
            ["AN8", "PH1"],
            [[1, f"555-01{n:02d}"] for n in range(12)],
        )
        config = RunConfig.default().model_copy(
            update={"snapshot_dir": snapshot_dir, "dictionary_dir": tmp_path / "dictionary"}
        )
        result = run_batch(SnapshotClient(snapshot_dir), config)

        assert config.row_limit == 10
        assert result.primary_rows == 15
        assert [m.parent_key for m in result.enhanced] == [str(n) for n in range(1, 16)]
        assert len(result.enhanced[0].children["F0115"]) == 12
        assert len(result.raw[0].children["F0115"]) == 12
