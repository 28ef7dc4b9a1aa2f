"""Run configuration: which tables to join and how to pace the remote service."""

from pathlib import Path
from typing import Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for run config loading. Run: poetry install"
    ) from e
from pydantic import BaseModel, Field

from partner_master.models.tables import Cardinality, TableSpec

DEFAULT_ROW_LIMIT = 10
DEFAULT_PACING_SECONDS = 3.0
DEFAULT_MAX_WORKERS = 4


class RunConfig(BaseModel):
    """Primary table, ordered child tables and run limits for one batch."""

    primary: TableSpec
    primary_filter: Optional[str] = Field(
        default=None,
        description="Filter applied when listing the primary table, e.g. 'F0101.AT1 EQ V'",
    )
    children: list[TableSpec] = Field(default_factory=list)

    row_limit: int = Field(default=DEFAULT_ROW_LIMIT, ge=1)
    pacing_seconds: float = Field(default=DEFAULT_PACING_SECONDS, ge=0)
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    max_runtime_seconds: Optional[float] = Field(default=None, gt=0)

    dictionary_dir: Path = Path("data/dictionary")
    snapshot_dir: Path = Path("data/snapshot")
    snapshot_key_columns: list[str] = Field(default_factory=lambda: ["AN8", "Address Number"])
    output_prefix: str = "vendors"

    @classmethod
    def default(cls) -> "RunConfig":
        """Vendor master run: address book vendors joined to their related tables."""
        return cls(
            primary=TableSpec(name="F0101", label="Address Book Master", cardinality=Cardinality.ONE),
            primary_filter="F0101.AT1 EQ V",
            children=[
                TableSpec(name="F0401", label="Supplier Master", cardinality=Cardinality.ONE),
                TableSpec(name="F0115", label="Phone Numbers"),
                TableSpec(name="F01151", label="Electronic Address"),
                TableSpec(name="F0116", label="Address by Date"),
                TableSpec(name="F0111", label="Who's Who"),
            ],
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RunConfig":
        """
        Load run config from YAML. Missing keys fall back to the vendor master defaults;
        tables may be given as mappings or bare names.
        """
        data = yaml.safe_load(Path(path).read_text()) or {}
        base = cls.default().model_dump()

        def _table(entry, default_cardinality: str = "many") -> dict:
            if isinstance(entry, str):
                return {"name": entry, "cardinality": default_cardinality}
            return entry

        if "primary" in data:
            base["primary"] = _table(data["primary"], "one")
        if "children" in data:
            base["children"] = [_table(c) for c in data.get("children") or []]
        for key in (
            "primary_filter",
            "row_limit",
            "pacing_seconds",
            "max_workers",
            "max_runtime_seconds",
            "dictionary_dir",
            "snapshot_dir",
            "snapshot_key_columns",
            "output_prefix",
        ):
            if key in data:
                base[key] = data[key]
        return cls.model_validate(base)
