"""Cross-table aggregation: one master record per parent row.

For each valid parent key the aggregator fetches every configured child table
concurrently (fan-out, joined before moving on), enriches the rows, applies the
table's cardinality and enriches the parent row itself. Parents are processed
strictly one after another with a pacing delay in between when talking to the
remote service.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence

from partner_master.connectors.base import BaseQueryClient
from partner_master.dictionary.loader import FieldDictionaryCache
from partner_master.enrichment.enricher import enrich_row, enrich_rows
from partner_master.fetching.fetcher import TableFetcher
from partner_master.models.raw import RawRecord, RawRow
from partner_master.models.record import EnrichedRow, MasterRecord
from partner_master.models.run_config import DEFAULT_MAX_WORKERS, DEFAULT_PACING_SECONDS
from partner_master.models.tables import Cardinality, TableSpec

logger = logging.getLogger(__name__)

# Stringified placeholders that upstream systems emit for a missing key.
INVALID_KEY_TOKENS = frozenset({"undefined", "null"})


def normalize_parent_key(value: Any) -> Optional[str]:
    """Key as a trimmed string, or None when empty or a placeholder token."""
    if value is None:
        return None
    key = str(value).strip()
    if not key or key.lower() in INVALID_KEY_TOKENS:
        return None
    return key


@dataclass
class AggregationResult:
    """Raw and enriched views of one parent."""

    raw: RawRecord
    master: MasterRecord


@dataclass
class AggregationBatch:
    results: list[AggregationResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    stopped_early: bool = False


@dataclass
class _ChildRows:
    spec: TableSpec
    raw: list[RawRow]
    enriched: list[EnrichedRow]


class CrossTableAggregator:
    """
    Joins child tables onto parent rows by the parent key.
    Dictionaries come from a per-run cache and are only read here.
    """

    def __init__(
        self,
        client: BaseQueryClient,
        primary: TableSpec,
        children: Sequence[TableSpec],
        dictionaries: FieldDictionaryCache,
        fetcher: Optional[TableFetcher] = None,
        *,
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._primary = primary
        self._children = list(children)
        self._dictionaries = dictionaries
        self._fetcher = fetcher or TableFetcher()
        self._pacing_seconds = pacing_seconds if client.requires_pacing else 0.0
        self._max_workers = max(1, max_workers)
        self._sleep = sleep
        self._clock = clock

    @property
    def pacing_seconds(self) -> float:
        return self._pacing_seconds

    def parent_key_for(self, parent_row: RawRow) -> Optional[str]:
        return normalize_parent_key(self._client.extract_key(self._primary, parent_row))

    def _fetch_child(self, spec: TableSpec, parent_key: str) -> _ChildRows:
        raw = self._fetcher.fetch(self._client, spec, parent_key)
        enriched = enrich_rows(raw, self._dictionaries.get(spec.name), spec.name)
        return _ChildRows(spec=spec, raw=raw, enriched=enriched)

    def _fetch_children(self, parent_key: str) -> list[_ChildRows]:
        if not self._children:
            return []
        workers = min(self._max_workers, len(self._children))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="child-fetch") as executor:
            futures = [
                executor.submit(self._fetch_child, spec, parent_key)
                for spec in self._children
            ]
            return [f.result() for f in futures]

    def aggregate(self, parent_row: RawRow, parent_key: Any = None) -> Optional[AggregationResult]:
        """
        Build the raw and master records for one parent.
        Returns None, without fetching anything, when the parent key is invalid.
        """
        if parent_key is None:
            parent_key = self._client.extract_key(self._primary, parent_row)
        key = normalize_parent_key(parent_key)
        if key is None:
            logger.warning("Skipping %s row with invalid key %r", self._primary.display_name, parent_key)
            return None

        fetched = self._fetch_children(key)

        raw_children: dict[str, list[RawRow]] = {}
        children: dict[str, Any] = {}
        for child in fetched:
            name = child.spec.name
            raw_children[name] = child.raw
            if child.spec.cardinality is Cardinality.ONE:
                if child.enriched:
                    children[name] = child.enriched[0]
            else:
                children[name] = child.enriched

        parent = enrich_row(parent_row, self._dictionaries.get(self._primary.name), self._primary.name)
        logger.info(
            "Built master record for %s (%s)",
            key,
            ", ".join(f"{c.spec.display_name}={len(c.raw)}" for c in fetched) or "no child tables",
        )
        return AggregationResult(
            raw=RawRecord(parent_key=key, parent=dict(parent_row), children=raw_children),
            master=MasterRecord(parent_key=key, parent=parent, children=children),
        )

    def aggregate_all(
        self,
        parent_rows: Iterable[RawRow],
        *,
        stop_event: Optional[threading.Event] = None,
        max_runtime_seconds: Optional[float] = None,
    ) -> AggregationBatch:
        """
        Aggregate every parent in order. Invalid parents are skipped; the pacing delay
        separates successive aggregated parents. An abort or timeout stops the batch
        before the next parent starts.
        """
        batch = AggregationBatch()
        started = self._clock()
        processed = 0

        for row in parent_rows:
            if stop_event is not None and stop_event.is_set():
                logger.warning("Abort requested; stopping after %d parents", processed)
                batch.stopped_early = True
                break
            if max_runtime_seconds is not None and self._clock() - started >= max_runtime_seconds:
                logger.warning("Run time limit of %.0fs reached; stopping after %d parents", max_runtime_seconds, processed)
                batch.stopped_early = True
                break

            key = self.parent_key_for(row)
            if key is None:
                raw_key = self._client.extract_key(self._primary, row)
                logger.warning("Skipping %s row with invalid key %r", self._primary.display_name, raw_key)
                batch.skipped.append("" if raw_key is None else str(raw_key))
                continue

            if processed and self._pacing_seconds > 0:
                logger.debug("Pacing %.1fs before %s", self._pacing_seconds, key)
                self._sleep(self._pacing_seconds)

            result = self.aggregate(row, key)
            processed += 1
            if result is not None:
                batch.results.append(result)

        logger.info(
            "Aggregated %d parents (%d skipped%s)",
            len(batch.results), len(batch.skipped), ", stopped early" if batch.stopped_early else "",
        )
        return batch
