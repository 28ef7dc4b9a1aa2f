"""Main CLI entry point."""

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger("partner_master.cli")


def _add_common(parser: argparse.ArgumentParser, *, with_source: bool = True) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Run config YAML (default: built-in vendor master run)",
    )
    if with_source:
        parser.add_argument(
            "--source",
            default="ais",
            choices=["ais", "snapshot"],
            help="Query the remote service (ais) or local .xlsx exports (snapshot)",
        )


def main(argv: list[str] | None = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(
        prog="partner-master",
        description="Build enriched business-partner master records from source tables",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate
    subparsers.add_parser("validate", help="Authenticate and check the remote service connection")

    # list
    list_parser = subparsers.add_parser("list", help="Fetch primary table rows (raw)")
    _add_common(list_parser)
    list_parser.add_argument("--output", type=Path, default=None, help="Write rows to JSON file (default: stdout)")

    # build
    build_parser = subparsers.add_parser("build", help="Build raw and enriched master records for every parent")
    _add_common(build_parser)
    build_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for <prefix>.json and <prefix>_master.json",
    )
    build_parser.add_argument("--prefix", type=str, default=None, help="Output file prefix (default from config)")
    build_parser.add_argument("--row-limit", type=int, default=None, help="Max rows per query")
    build_parser.add_argument("--pacing", type=float, default=None, help="Seconds to wait between parents")
    build_parser.add_argument(
        "--store",
        type=Path,
        default=None,
        metavar="DB_PATH",
        help="Also persist master records to SQLite store at given path",
    )

    # profile
    profile_parser = subparsers.add_parser("profile", help="Build the master record for one parent key")
    _add_common(profile_parser)
    profile_parser.add_argument("parent_key", help="Business-partner identifier, e.g. 4242")
    profile_parser.add_argument("--output", type=Path, default=None, help="Write record to file")

    # describe-field
    describe_parser = subparsers.add_parser("describe-field", help="Look up live metadata for a table field")
    describe_parser.add_argument("table", help="Logical table, e.g. F0101")
    describe_parser.add_argument("field", help="Field alias, e.g. AT1")

    # store
    store_parser = subparsers.add_parser("store", help="Query the master record store")
    store_parser.add_argument(
        "--db",
        type=Path,
        default=Path("partner_master.db"),
        help="Path to SQLite database",
    )
    store_parser.add_argument("action", choices=["list", "count"], help="List records or show count")

    args = parser.parse_args(argv)

    from partner_master.exceptions import PartnerMasterError
    from partner_master.logging_config import configure_logging

    configure_logging(args.log_level)

    try:
        if args.command == "validate":
            _run_validate(args)
        elif args.command == "list":
            _run_list(args)
        elif args.command == "build":
            _run_build(args)
        elif args.command == "profile":
            _run_profile(args)
        elif args.command == "describe-field":
            _run_describe_field(args)
        elif args.command == "store":
            _run_store(args)
        else:
            parser.print_help()
    except PartnerMasterError as e:
        logger.error("%s", e)
        raise SystemExit(1)


def _load_config(args: argparse.Namespace):
    from pydantic import ValidationError

    from partner_master.models.run_config import RunConfig

    if args.config is None:
        return RunConfig.default()
    try:
        return RunConfig.from_yaml(args.config)
    except (OSError, ValidationError) as e:
        raise SystemExit(f"Invalid run config {args.config}: {e}")


def _make_client(args: argparse.Namespace, config):
    from partner_master.connectors.registry import ConnectorRegistry

    if args.source == "snapshot":
        return ConnectorRegistry.get(
            "snapshot",
            data_dir=config.snapshot_dir,
            key_columns=config.snapshot_key_columns,
        )
    return ConnectorRegistry.get("ais")


def _emit(text: str, output: Path | None, summary: str) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        print(summary.format(path=output))
    else:
        print(text)


def _run_validate(args: argparse.Namespace) -> None:
    """Run validate command."""
    from partner_master.connectors.ais import AISClient

    client = AISClient.from_env()
    try:
        version = client.validate_connection()
    finally:
        client.close()
    print(f"Connection OK (service version: {version})")


def _run_list(args: argparse.Namespace) -> None:
    """Run list command."""
    from partner_master.pipeline import fetch_primary_rows
    from partner_master.store import dump_rows

    config = _load_config(args)
    client = _make_client(args, config)
    try:
        client.authenticate()
        rows = fetch_primary_rows(client, config)
    finally:
        client.close()
    _emit(dump_rows(rows), args.output, f"Wrote {len(rows)} {config.primary.name} rows to {{path}}")


def _run_build(args: argparse.Namespace) -> None:
    """Run build command."""
    from partner_master.pipeline import run_batch
    from partner_master.store import write_batch

    config = _load_config(args)
    overrides = {}
    if args.row_limit is not None:
        overrides["row_limit"] = args.row_limit
    if args.pacing is not None:
        overrides["pacing_seconds"] = args.pacing
    if overrides:
        config = config.model_validate({**config.model_dump(), **overrides})

    store = None
    run_record = None
    if args.store is not None:
        from partner_master.store import MasterRecordStore

        store = MasterRecordStore(args.store)
        run_record = store.start_run(args.source)

    client = _make_client(args, config)
    try:
        result = run_batch(client, config)
    except Exception:
        if store and run_record:
            store.finish_run(run_record.id, 0, 0, 0, status="failed")
        raise
    finally:
        client.close()

    raw_path, enhanced_path = write_batch(
        result.raw,
        result.enhanced,
        args.output_dir,
        args.prefix or config.output_prefix,
    )
    print(
        f"Built {len(result.enhanced)} master records from {result.primary_rows} "
        f"{config.primary.name} rows ({len(result.skipped)} skipped)"
    )
    print(f"Wrote {raw_path} and {enhanced_path}")

    if store and run_record:
        items_new = 0
        items_changed = 0
        for raw, master in zip(result.raw, result.enhanced):
            was_new, was_changed = store.upsert(master, raw)
            items_new += was_new
            items_changed += was_changed
        store.finish_run(
            run_record.id,
            items_fetched=len(result.enhanced),
            items_new=items_new,
            items_changed=items_changed,
            items_skipped=len(result.skipped),
            status="stopped" if result.stopped_early else "completed",
        )
        print(f"Store: {len(result.enhanced)} records, {items_new} new, {items_changed} changed")


def _run_profile(args: argparse.Namespace) -> None:
    """Run profile command."""
    from partner_master.pipeline import run_single

    config = _load_config(args)
    client = _make_client(args, config)
    try:
        result = run_single(client, config, args.parent_key)
    finally:
        client.close()
    if result is None:
        print(f"No master record for {args.parent_key}", file=sys.stderr)
        raise SystemExit(1)
    _emit(
        result.master.model_dump_json(indent=2),
        args.output,
        f"Wrote master record {result.master.parent_key} to {{path}}",
    )


def _run_describe_field(args: argparse.Namespace) -> None:
    """Run describe-field command."""
    from partner_master.connectors.ais import AISClient

    client = AISClient.from_env()
    try:
        meta = client.field_metadata(args.table, args.field)
    finally:
        client.close()
    if meta is None:
        print(f"No metadata for {args.table}.{args.field}", file=sys.stderr)
        raise SystemExit(1)
    print(meta.model_dump_json(indent=2))


def _run_store(args: argparse.Namespace) -> None:
    """Run store command."""
    from partner_master.store import MasterRecordStore, dump_models

    store = MasterRecordStore(args.db)
    if args.action == "list":
        print(dump_models(store.get_all()))
    elif args.action == "count":
        print(store.count())


if __name__ == "__main__":
    main()
