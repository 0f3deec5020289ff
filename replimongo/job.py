"""
Job entry point: read a replication job from the environment, run it and
turn the result into a process exit code.

Exit codes:
    0  every replica succeeded, or only a minority failed
    1  critical failure (strictly more than half of the replicas failed)
    2  malformed operation payload, target list or configuration
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Mapping, Optional, Sequence

from .aggregate import AggregateReport
from .config import MongoClientConfig, ReplicationConfig
from .errors import ConfigError, InputError
from .ops.models import OperationDescriptor
from .ops.sanitize import sanitize
from .replica.models import ReplicationOutcome
from .replica.registry import StaticEndpointRegistry
from .replicator import ReplicationRun, Replicator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CRITICAL = 1
EXIT_INPUT = 2

DEVELOPMENT = "development"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def load_config(environ: Mapping[str, str]) -> ReplicationConfig:
    client = MongoClientConfig(
        max_pool_size=_int_env(environ, "MONGO_MAX_POOL_SIZE", 3),
        min_pool_size=_int_env(environ, "MONGO_MIN_POOL_SIZE", 1),
        server_selection_timeout_ms=_int_env(environ, "MONGO_SERVER_SELECTION_TIMEOUT", 5_000),
        connect_timeout_ms=_int_env(environ, "MONGO_CONNECTION_TIMEOUT", 8_000),
    )
    return ReplicationConfig(
        database=environ.get("REPLICATION_DATABASE") or "replica",
        concurrency_limit=_int_env(environ, "MONGO_MAX_CONCURRENT_REPLICATIONS", 5),
        connect_timeout_ms=_int_env(environ, "MONGO_CONNECT_RACE_TIMEOUT", 10_000),
        client=client,
    )


def load_operation(environ: Mapping[str, str]) -> OperationDescriptor:
    raw = environ.get("MONGO_OPERATION")
    if not raw:
        raise InputError("MONGO_OPERATION is not set")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(f"MONGO_OPERATION is not valid JSON: {exc}") from exc
    return OperationDescriptor.from_dict(payload)


def load_targets(environ: Mapping[str, str]) -> list[str]:
    raw = environ.get("REPLICA_TARGETS")
    if not raw:
        return []
    try:
        targets = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(f"REPLICA_TARGETS is not valid JSON: {exc}") from exc
    if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
        raise InputError("REPLICA_TARGETS must be a JSON array of strings")
    return targets


def _preview(value: Any, limit: int = 200) -> str:
    text = json.dumps(value, default=str)
    return text if len(text) <= limit else text[:limit] + "..."


def log_operation(op: OperationDescriptor) -> None:
    """Debug dump of the operation as it will be dispatched."""
    logger.info("Operation: %s on %s", op.label, op.collection)
    parts = (
        ("Filter", op.filter),
        ("Data", op.data),
        ("Pipeline", op.pipeline),
        ("Options", op.options),
    )
    for name, value in parts:
        if value is not None:
            logger.info("%s: %s", name, _preview(value))


def render_table(outcomes: Sequence[ReplicationOutcome]) -> str:
    header = ("Replica", "Status", "Operation", "Collection", "Affected", "Duration (ms)", "Error")
    rows = [
        (
            o.target,
            "ok" if o.success else "error",
            o.operation,
            o.collection,
            str(o.affected_count or 0),
            str(o.duration_ms or 0),
            o.error or "-",
        )
        for o in outcomes
    ]
    widths = [max(len(row[i]) for row in [header, *rows]) for i in range(len(header))]

    def _line(row: Sequence[str]) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()

    lines = [_line(header), _line(["-" * w for w in widths])]
    lines.extend(_line(row) for row in rows)
    return "\n".join(lines)


def render_summary(report: AggregateReport) -> list[str]:
    lines = [
        f"Succeeded: {report.succeeded}/{report.total}",
        f"Failed: {report.failed}/{report.total}",
        f"Total replication time: {report.total_duration_ms or 0}ms",
    ]
    if report.succeeded:
        lines.append(f"Documents affected: {report.affected_total}")
        lines.append(f"Average time per replica: {round(report.duration_avg_ms or 0)}ms")
        lines.append(f"Slowest replica: {report.duration_max_ms}ms")
        lines.append(f"Fastest replica: {report.duration_min_ms}ms")
        if report.estimated_speedup_pct is not None:
            sign = "+" if report.estimated_speedup_pct > 0 else ""
            lines.append(f"Estimated gain vs serial: {sign}{report.estimated_speedup_pct}%")
    return lines


def exit_code(report: AggregateReport) -> int:
    return EXIT_CRITICAL if report.critical_failure else EXIT_OK


def report_run(run: ReplicationRun, out=None) -> int:
    out = out or sys.stdout
    print(render_table(run.outcomes), file=out)
    print("", file=out)
    for line in render_summary(run.report):
        print(line, file=out)

    if run.report.critical_failure:
        logger.error(
            "Critical failure: %d of %d replicas failed", run.report.failed, run.report.total
        )
    elif run.report.failed:
        logger.warning(
            "Partial replication: %d of %d replicas failed", run.report.failed, run.report.total
        )
    return exit_code(run.report)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="replimongo",
        description="Replicate one MongoDB operation to a set of replicas.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("REPLIMONGO_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    # argparse does not check defaults against choices
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level: {args.log_level!r}")
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    environ = os.environ if environ is None else environ

    try:
        config = load_config(environ)
        op = load_operation(environ)
        targets = load_targets(environ)
    except (InputError, ConfigError) as exc:
        logger.error("Invalid replication job: %s", exc)
        return EXIT_INPUT

    timestamp = environ.get("REPLICATION_TIMESTAMP")
    if timestamp:
        logger.info("Operation timestamp: %s", timestamp)

    replicator = Replicator(StaticEndpointRegistry.from_environ(environ), config)

    if environ.get("REPLIMONGO_ENV") == DEVELOPMENT:
        log_operation(sanitize(op, config.stringify_fields))

    try:
        run = asyncio.run(replicator.run(op, targets))
    except Exception:
        logger.exception("Fatal error during replication")
        return EXIT_CRITICAL

    return report_run(run)
