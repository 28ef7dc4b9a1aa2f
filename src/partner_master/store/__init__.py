"""Persistence for batch outputs."""

from partner_master.store.json_output import dump_models, dump_rows, write_batch
from partner_master.store.sqlite_store import MasterRecordStore, RunRecord

__all__ = [
    "MasterRecordStore",
    "RunRecord",
    "dump_models",
    "dump_rows",
    "write_batch",
]
