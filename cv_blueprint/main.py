"""CLI entry point: merge CV extractions into a subject's blueprint."""

import argparse
import json
import logging
import sys

from cv_blueprint.config import AppConfig, load_config, validate_config
from cv_blueprint.merging.engine import (
    ExtractionValidationError,
    MergeConflictError,
    merge_into_blueprint,
    remove_source_from_blueprint,
)
from cv_blueprint.models import configure_database
from cv_blueprint.storage.database import SqlBlueprintStore
from cv_blueprint.utils.logging_config import setup_logging

logger = logging.getLogger("cv_blueprint")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="CV Blueprint - consolidate repeated CV extractions into one profile",
    )
    parser.add_argument(
        "--config", default="config.yaml",
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--subject", required=True,
        help="Subject (user) identifier owning the blueprint",
    )
    parser.add_argument(
        "--merge", metavar="FILE",
        help="Merge the extraction JSON in FILE into the blueprint",
    )
    parser.add_argument(
        "--source-id",
        help="Source identifier for --merge (default: content hash of the extraction)",
    )
    parser.add_argument(
        "--remove-source", metavar="SOURCE_ID",
        help="Withdraw a previously merged extraction from the blueprint",
    )
    parser.add_argument(
        "--show", action="store_true",
        help="Print the blueprint and exit",
    )
    parser.add_argument(
        "--history", action="store_true",
        help="Print the blueprint change log and exit",
    )
    return parser.parse_args(argv)


def build_store(config: AppConfig) -> SqlBlueprintStore:
    """Open the configured database and make sure the tables exist."""
    configure_database(config.database_url)
    return SqlBlueprintStore()


def load_extraction(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ExtractionValidationError(f"{path} must contain a JSON object")
    return data


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def run(args: argparse.Namespace, config: AppConfig) -> int:
    store = build_store(config)

    if args.history:
        _print_json([record.to_dict() for record in store.list_changes(args.subject)])
        return 0

    if args.show:
        blueprint = store.get_blueprint(args.subject)
        if blueprint is None:
            print(f"No blueprint for subject {args.subject}", file=sys.stderr)
            return 1
        _print_json(blueprint.to_dict())
        return 0

    try:
        if args.remove_source:
            result = remove_source_from_blueprint(store, args.subject, args.remove_source, config.merging)
        elif args.merge:
            extraction = load_extraction(args.merge)
            result = merge_into_blueprint(store, args.subject, extraction, args.source_id, config.merging)
        else:
            print("Nothing to do: pass --merge, --remove-source, --show or --history", file=sys.stderr)
            return 2
    except ExtractionValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except MergeConflictError as e:
        logger.error("%s", e)
        return 3

    _print_json(result.to_dict())
    return 0


def main(argv=None):
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_dir, config.log_level)

    for w in validate_config(config):
        logger.warning("Config: %s", w)

    sys.exit(run(args, config))


if __name__ == "__main__":
    main()
