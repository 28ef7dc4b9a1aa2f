"""Abstract base class for table query clients."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from partner_master.models.raw import RawRow
from partner_master.models.tables import TableSpec


class BaseQueryClient(ABC):
    """
    Standard interface for sources of tabular rows.
    Clients authenticate once, then answer filtered queries per logical table.
    query() raises QueryError on any failure so callers can decide on a fallback.
    """

    source_id: str = ""

    # Remote services need throttling between parents; local snapshots do not.
    requires_pacing: bool = True

    @abstractmethod
    def authenticate(self) -> str:
        """Obtain (and keep) a session token. Raises AuthenticationError."""
        pass

    @abstractmethod
    def query(self, table: str, filter_expression: Optional[str], row_limit: int) -> list[RawRow]:
        """Return rows of table matching filter_expression, at most row_limit for paged sources."""
        pass

    def extract_key(self, spec: TableSpec, row: RawRow) -> Any:
        """Return the raw key value carried by a row of the given table."""
        return row.get(spec.key_column)

    def close(self) -> None:
        """Release any underlying resources."""
        return None
