"""Table fetcher: rows of one logical table scoped to one parent key.

Deployments expose the key field either bare ("AN8 EQ 4242") or qualified with
the table name ("F0401.AN8 EQ 4242"). The fetcher tries the bare form, falls back
to the qualified form once, then gives up with no rows. It never raises: one
failing child table must not abort the rest of a parent's aggregation.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from partner_master.connectors.base import BaseQueryClient
from partner_master.connectors.filters import key_filter, qualified_key_filter
from partner_master.models.raw import RawRow
from partner_master.models.run_config import DEFAULT_ROW_LIMIT
from partner_master.models.tables import TableSpec

logger = logging.getLogger(__name__)


class FetchPhase(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    GIVE_UP = "give_up"


# Phase entered after a failed attempt in the given phase.
_NEXT_PHASE = {
    FetchPhase.PRIMARY: FetchPhase.FALLBACK,
    FetchPhase.FALLBACK: FetchPhase.GIVE_UP,
}


@dataclass
class FetchOutcome:
    """Rows plus the phase that produced them (GIVE_UP when both attempts failed)."""

    table: str
    parent_key: str
    rows: list[RawRow] = field(default_factory=list)
    phase: FetchPhase = FetchPhase.PRIMARY
    filters_tried: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.phase is not FetchPhase.GIVE_UP


class TableFetcher:
    """Two-phase filtered fetch with a fixed row cap per query."""

    def __init__(self, row_limit: int = DEFAULT_ROW_LIMIT):
        if row_limit < 1:
            raise ValueError("row_limit must be at least 1")
        self.row_limit = row_limit

    @staticmethod
    def filter_for(phase: FetchPhase, spec: TableSpec, parent_key: str) -> str:
        if phase is FetchPhase.PRIMARY:
            return key_filter(spec.key_field, parent_key)
        if phase is FetchPhase.FALLBACK:
            return qualified_key_filter(spec.name, spec.key_field, parent_key)
        raise ValueError(f"No filter for phase {phase.value}")

    def fetch_outcome(
        self,
        client: BaseQueryClient,
        spec: TableSpec,
        parent_key: str,
    ) -> FetchOutcome:
        """Run the primary → fallback → give-up sequence and report how it ended."""
        outcome = FetchOutcome(table=spec.name, parent_key=parent_key)
        phase = FetchPhase.PRIMARY
        while phase is not FetchPhase.GIVE_UP:
            expression = self.filter_for(phase, spec, parent_key)
            outcome.filters_tried.append(expression)
            try:
                rows = list(client.query(spec.name, expression, self.row_limit))
            except Exception as e:
                outcome.errors.append(str(e))
                next_phase = _NEXT_PHASE[phase]
                if next_phase is FetchPhase.FALLBACK:
                    logger.warning(
                        "%s query for %s failed (%s); retrying with table-qualified filter",
                        spec.name, parent_key, e,
                    )
                phase = next_phase
                continue

            outcome.rows = rows
            outcome.phase = phase
            logger.info(
                "Fetched %d %s rows for %s (%s filter: %s)",
                len(outcome.rows), spec.name, parent_key, phase.value, expression,
            )
            return outcome

        outcome.phase = FetchPhase.GIVE_UP
        logger.warning(
            "Giving up on %s for %s after %d attempts: %s",
            spec.name, parent_key, len(outcome.filters_tried), outcome.errors[-1],
        )
        return outcome

    def fetch(self, client: BaseQueryClient, spec: TableSpec, parent_key: str) -> list[RawRow]:
        """Rows for one table and parent key; empty when nothing matched or both attempts failed."""
        return self.fetch_outcome(client, spec, parent_key).rows
