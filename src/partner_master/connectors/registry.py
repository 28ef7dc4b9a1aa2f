"""Registry for discovering and instantiating query clients."""

from typing import Type

from partner_master.connectors.ais import AISClient
from partner_master.connectors.base import BaseQueryClient
from partner_master.connectors.snapshot import SnapshotClient


class ConnectorRegistry:
    """Discovers and provides query clients."""

    _connectors: dict[str, Type[BaseQueryClient]] = {
        "ais": AISClient,
        "snapshot": SnapshotClient,
    }

    @classmethod
    def get(cls, source_id: str, **kwargs) -> BaseQueryClient:
        """
        Get a client instance for the given source. kwargs passed to the client.
        The remote client is built from environment settings unless kwargs are given.
        """
        connector_cls = cls._connectors.get(source_id.lower())
        if not connector_cls:
            raise ValueError(f"Unknown source: {source_id}. Available: {list(cls._connectors.keys())}")
        if connector_cls is AISClient and not kwargs:
            return AISClient.from_env()
        return connector_cls(**kwargs)

    @classmethod
    def available_sources(cls) -> list[str]:
        """Return list of available source identifiers."""
        return list(cls._connectors.keys())
