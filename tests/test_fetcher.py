"""Unit tests for TableFetcher."""

import httpx
import pytest

from conftest import FakeQueryClient, query_failure
from partner_master.fetching import FetchPhase, TableFetcher
from partner_master.models.tables import TableSpec

SPEC = TableSpec(name="F0401", key_field="AN8")


class TestTableFetcherPhases:
    """Primary → fallback → give-up sequence."""

    def test_primary_success_never_issues_fallback(self) -> None:
        client = FakeQueryClient({("F0401", "AN8 EQ 4242"): [{"F0401_AN8": 4242}]})
        outcome = TableFetcher().fetch_outcome(client, SPEC, "4242")
        assert outcome.phase is FetchPhase.PRIMARY
        assert outcome.rows == [{"F0401_AN8": 4242}]
        assert client.calls == [("F0401", "AN8 EQ 4242", 10)]

    def test_primary_empty_result_is_success(self) -> None:
        client = FakeQueryClient()
        outcome = TableFetcher().fetch_outcome(client, SPEC, "4242")
        assert outcome.succeeded
        assert outcome.rows == []
        assert len(client.calls) == 1

    def test_falls_back_to_qualified_filter(self) -> None:
        client = FakeQueryClient({
            ("F0401", "AN8 EQ 4242"): query_failure("F0401", "AN8 EQ 4242"),
            ("F0401", "F0401.AN8 EQ 4242"): [{"F0401_AN8": 4242}],
        })
        outcome = TableFetcher().fetch_outcome(client, SPEC, "4242")
        assert outcome.phase is FetchPhase.FALLBACK
        assert outcome.rows == [{"F0401_AN8": 4242}]
        assert outcome.filters_tried == ["AN8 EQ 4242", "F0401.AN8 EQ 4242"]
        assert len(outcome.errors) == 1

    def test_gives_up_with_empty_rows(self) -> None:
        client = FakeQueryClient({
            ("F0401", "AN8 EQ 4242"): query_failure("F0401", "AN8 EQ 4242"),
            ("F0401", "F0401.AN8 EQ 4242"): httpx.ConnectError("refused"),
        })
        fetcher = TableFetcher()
        outcome = fetcher.fetch_outcome(client, SPEC, "4242")
        assert outcome.phase is FetchPhase.GIVE_UP
        assert not outcome.succeeded
        assert outcome.rows == []
        assert len(client.calls) == 2
        assert fetcher.fetch(client, SPEC, "4242") == []

    def test_unexpected_errors_do_not_escape(self) -> None:
        client = FakeQueryClient({
            ("F0401", "AN8 EQ 1"): RuntimeError("boom"),
            ("F0401", "F0401.AN8 EQ 1"): ValueError("bad payload"),
        })
        assert TableFetcher().fetch(client, SPEC, "1") == []

    def test_non_iterable_result_counts_as_failure(self) -> None:
        """A client returning None instead of rows falls back rather than raising."""

        class NoneOnBareFilter(FakeQueryClient):
            def query(self, table, filter_expression, row_limit):
                if filter_expression == "AN8 EQ 1":
                    self.calls.append((table, filter_expression, row_limit))
                    return None
                return super().query(table, filter_expression, row_limit)

        client = NoneOnBareFilter({("F0401", "F0401.AN8 EQ 1"): [{"F0401_AN8": 1}]})
        outcome = TableFetcher().fetch_outcome(client, SPEC, "1")
        assert outcome.phase is FetchPhase.FALLBACK
        assert outcome.rows == [{"F0401_AN8": 1}]
        assert len(outcome.errors) == 1


class TestTableFetcherLimits:
    def test_row_limit_passed_to_client(self) -> None:
        client = FakeQueryClient({("F0401", "AN8 EQ 7"): [{"n": i} for i in range(50)]})
        rows = TableFetcher(row_limit=3).fetch(client, SPEC, "7")
        assert len(rows) == 3
        assert client.calls[0][2] == 3

    def test_invalid_row_limit(self) -> None:
        with pytest.raises(ValueError):
            TableFetcher(row_limit=0)

    def test_preserves_service_order(self) -> None:
        client = FakeQueryClient({("F0401", "AN8 EQ 7"): [{"n": 3}, {"n": 1}, {"n": 2}]})
        assert [r["n"] for r in TableFetcher().fetch(client, SPEC, "7")] == [3, 1, 2]

    def test_filter_for_give_up_phase(self) -> None:
        with pytest.raises(ValueError):
            TableFetcher.filter_for(FetchPhase.GIVE_UP, SPEC, "1")
