"""JSON output for the raw and enhanced collections."""

import json
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel


def dump_models(models: Iterable[BaseModel]) -> str:
    return json.dumps(
        [m.model_dump(mode="json") for m in models],
        indent=2,
        default=str,
    )


def dump_rows(rows: Iterable[dict[str, Any]]) -> str:
    return json.dumps(list(rows), indent=2, default=str)


def write_batch(raw: Iterable[BaseModel], enhanced: Iterable[BaseModel], output_dir: Path, prefix: str = "vendors") -> tuple[Path, Path]:
    """Write <prefix>.json (raw) and <prefix>_master.json (enhanced). Returns both paths."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    raw_path = output_dir / f"{prefix}.json"
    enhanced_path = output_dir / f"{prefix}_master.json"
    raw_path.write_text(dump_models(raw), encoding="utf-8")
    enhanced_path.write_text(dump_models(enhanced), encoding="utf-8")
    return raw_path, enhanced_path
