# main.py
"""Command-line entry point: build a node query and run it (or just print it).

Examples:
    python main.py find --label Person --where name=Alice --limit 5
    python main.py create --label Person --set name=Alice --set age=30
    python main.py destroy --label Person --where "age=[30, 40]" --dry-run
"""

import argparse
import asyncio
import json
import sys
from typing import Any

import structlog

import config
from core.db_manager import connection_registry
from core.exceptions import AdapterError
from core.logging_config import setup_logging
from core.query_gateway import QueryGateway, log_trace_sink
from data_access.cypher_builders.query_builder import NodeQueryBuilder
from models.query_models import QuerySpec

logger = structlog.get_logger(__name__)


def parse_assignment(text: str) -> tuple[str, Any]:
    """Split ``key=value``; the value is JSON-decoded when it parses, else kept as text."""
    key, sep, raw = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {text!r}")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


def parse_sort(text: str) -> tuple[str, str]:
    """Split ``field[:direction]``; the direction defaults to ascending."""
    field_name, _, direction = text.partition(":")
    return field_name, (direction or "ASC")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run parameterized node queries against Neo4j.")
    parser.add_argument("--dry-run", action="store_true", help="Print the query and parameters without connecting")
    parser.add_argument("--log-level", default=None, help=f"Log level (default: {config.LOG_LEVEL_STR})")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_command(name: str, help_text: str, where: bool, assign: bool) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--label", "-l", default=None, help="Node label")
        if where:
            sub.add_argument(
                "--where", "-w", action="append", type=parse_assignment, default=[], metavar="KEY=VALUE"
            )
        if assign:
            sub.add_argument("--set", "-s", action="append", type=parse_assignment, default=[], metavar="KEY=VALUE")
        return sub

    find = add_command("find", "Find nodes", where=True, assign=False)
    find.add_argument("--skip", type=int, default=None)
    find.add_argument("--limit", type=int, default=None)
    find.add_argument("--sort", action="append", type=parse_sort, default=None, metavar="FIELD[:ASC|DESC]")

    add_command("create", "Create one node", where=False, assign=True)
    add_command("update", "Update matching nodes", where=True, assign=True)
    add_command("destroy", "Delete matching nodes", where=True, assign=False)
    return parser


def build_spec(args: argparse.Namespace) -> QuerySpec:
    where = dict(getattr(args, "where", []))
    values = dict(getattr(args, "set", []))

    if args.command == "find":
        return NodeQueryBuilder.build_find(args.label, where, skip=args.skip, limit=args.limit, sort=args.sort)
    if args.command == "create":
        return NodeQueryBuilder.build_create(args.label, values)
    if args.command == "update":
        return NodeQueryBuilder.build_update(args.label, where, values)
    return NodeQueryBuilder.build_destroy(args.label, where)


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "labels") and hasattr(value, "items"):
        return {"labels": sorted(value.labels), "properties": dict(value.items())}
    return str(value)


async def run(args: argparse.Namespace) -> int:
    try:
        spec = build_spec(args)
    except AdapterError as e:
        logger.error("Could not build query", error=str(e))
        return 2

    if args.dry_run:
        print(spec.text)
        print(json.dumps(spec.driver_parameters(), indent=2, default=str))
        return 0

    trace_sink = log_trace_sink if config.settings.DEBUG_QUERIES else None
    gateway = QueryGateway(connection_registry, trace_sink=trace_sink)
    try:
        result = await gateway.execute(spec)
    finally:
        await connection_registry.shutdown()

    if not result.ok:
        logger.error("Query failed", error=str(result.error))
        return 1
    print(json.dumps(list(result.records), indent=2, default=_to_jsonable))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
