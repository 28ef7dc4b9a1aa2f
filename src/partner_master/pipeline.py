"""Batch orchestration: primary table → per-parent aggregation → raw and enhanced views."""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from partner_master.aggregation import AggregationResult, CrossTableAggregator, normalize_parent_key
from partner_master.connectors.base import BaseQueryClient
from partner_master.dictionary import FieldDictionaryCache, FieldDictionaryLoader, XlsxFieldDictionaryLoader
from partner_master.exceptions import PrimaryFetchError
from partner_master.fetching import TableFetcher
from partner_master.models.raw import RawRecord, RawRow
from partner_master.models.record import MasterRecord
from partner_master.models.run_config import RunConfig

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Both output collections of a run, in primary-table order."""

    raw: list[RawRecord] = field(default_factory=list)
    enhanced: list[MasterRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    primary_rows: int = 0
    stopped_early: bool = False


def fetch_primary_rows(client: BaseQueryClient, config: RunConfig) -> list[RawRow]:
    """
    List the primary table with its configured filter.
    Any failure here is fatal to the run and raised as PrimaryFetchError.
    """
    table = config.primary.name
    try:
        rows = client.query(table, config.primary_filter, config.row_limit)
    except Exception as e:
        logger.error("Failed to fetch primary table %s: %s", table, e)
        raise PrimaryFetchError(table, e) from e
    logger.info("Fetched %d %s rows.", len(rows), table)
    return rows


def _dictionary_cache(config: RunConfig, loader: Optional[FieldDictionaryLoader]) -> FieldDictionaryCache:
    cache = FieldDictionaryCache(loader or XlsxFieldDictionaryLoader(config.dictionary_dir))
    cache.preload([config.primary.name, *(c.name for c in config.children)])
    return cache


def _aggregator(
    client: BaseQueryClient,
    config: RunConfig,
    cache: FieldDictionaryCache,
    sleep: Callable[[float], None],
) -> CrossTableAggregator:
    return CrossTableAggregator(
        client,
        config.primary,
        config.children,
        cache,
        TableFetcher(config.row_limit),
        pacing_seconds=config.pacing_seconds,
        max_workers=config.max_workers,
        sleep=sleep,
    )


def run_batch(
    client: BaseQueryClient,
    config: RunConfig,
    loader: Optional[FieldDictionaryLoader] = None,
    *,
    stop_event: Optional[threading.Event] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchResult:
    """
    Run the full batch: authenticate, load dictionaries, list the primary table,
    then aggregate every parent. Authentication and primary-table failures propagate;
    child-table failures only leave gaps in the output.
    """
    client.authenticate()
    cache = _dictionary_cache(config, loader)
    primary_rows = fetch_primary_rows(client, config)

    aggregator = _aggregator(client, config, cache, sleep)
    batch = aggregator.aggregate_all(
        primary_rows,
        stop_event=stop_event,
        max_runtime_seconds=config.max_runtime_seconds,
    )
    return BatchResult(
        raw=[r.raw for r in batch.results],
        enhanced=[r.master for r in batch.results],
        skipped=batch.skipped,
        primary_rows=len(primary_rows),
        stopped_early=batch.stopped_early,
    )


def run_single(
    client: BaseQueryClient,
    config: RunConfig,
    parent_key: str,
    loader: Optional[FieldDictionaryLoader] = None,
) -> Optional[AggregationResult]:
    """
    Build the master record for one parent key. The parent row is looked up through
    the table fetcher; returns None when the key is invalid or no parent row exists.
    """
    key = normalize_parent_key(parent_key)
    if key is None:
        logger.warning("Invalid parent key %r", parent_key)
        return None

    client.authenticate()
    cache = _dictionary_cache(config, loader)
    fetcher = TableFetcher(config.row_limit)
    parent_rows = fetcher.fetch(client, config.primary, key)
    if not parent_rows:
        logger.warning("No %s row found for %s", config.primary.name, key)
        return None

    aggregator = _aggregator(client, config, cache, time.sleep)
    return aggregator.aggregate(parent_rows[0], key)
