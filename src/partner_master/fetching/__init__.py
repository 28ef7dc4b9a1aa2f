"""Per-table row fetching with filter fallback."""

from .fetcher import FetchOutcome, FetchPhase, TableFetcher

__all__ = ["FetchOutcome", "FetchPhase", "TableFetcher"]
