"""Query clients for the remote data service and spreadsheet snapshots."""

from partner_master.connectors.base import BaseQueryClient
from partner_master.connectors.registry import ConnectorRegistry

__all__ = ["BaseQueryClient", "ConnectorRegistry"]
