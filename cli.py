"""CLI entry point for the capacity estimator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from analysis import identify_bottleneck, overall_status, recommend_scaling
from config import CapacityConfig, load_config
from engine import estimate
from flow import NonFiniteResultError
from formatting import format_number
from log import setup_logging
from models import EstimateResult, ScalingAnalysis
from scaling import explore_instance_scaling

logger = logging.getLogger("capacity.cli")

# (field name, argparse type, help); the flag is the field name in kebab-case
_WORKLOAD_ARGS: list[tuple[str, type, str]] = [
    ("requests_per_second", float, "Incoming requests per second (default: 0)"),
    ("metrics_per_request", float, "Metrics emitted per request (default: 0)"),
    ("unique_metrics_ratio", float, "Distinct share of metrics, 0-1 (default: 0.2)"),
    ("calculation_complexity", float, "Query/render complexity, >= 1 (default: 1)"),
    ("flush_interval_seconds", float, "Collector flush interval (default: 10)"),
    ("retention_period_days", float, "Days of data to retain (default: 1)"),
]

_RESOURCE_ARGS: list[tuple[str, type, str]] = [
    ("cpu", float, "Available CPU cores (default: 1)"),
    ("memory", float, "Available memory in GB (default: 1)"),
    ("disk_io", float, "Available disk throughput in MB/s (default: 10)"),
    ("network_io", float, "Available network throughput in Mbps (default: 10)"),
    ("storage", float, "Available storage in GB (default: 10)"),
    ("statsd_instances", int, "Collector instance count (default: 1)"),
    ("carbon_instances", int, "Writer instance count (default: 1)"),
]


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    workload = parser.add_argument_group("workload")
    for dest, kind, help_text in _WORKLOAD_ARGS:
        workload.add_argument(
            f"--{dest.replace('_', '-')}",
            dest=dest,
            type=kind,
            default=None,
            help=help_text,
        )
    resources = parser.add_argument_group("resources")
    for dest, kind, help_text in _RESOURCE_ARGS:
        resources.add_argument(
            f"--{dest.replace('_', '-')}",
            dest=dest,
            type=kind,
            default=None,
            help=help_text,
        )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help='JSON file with "workload" and "resources" objects; flags override it',
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file of tuning-constant overrides",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the full result as JSON instead of a summary",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="capacity",
        description="Estimate capacity for a collector/writer metrics pipeline.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging in plain-text format",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write JSON logs to this file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    estimate_parser = subparsers.add_parser(
        "estimate", help="Estimate resource requirements for one configuration"
    )
    _add_input_args(estimate_parser)

    scale_parser = subparsers.add_parser(
        "scale", help="Sweep instance counts and recommend a scaling strategy"
    )
    _add_input_args(scale_parser)

    return parser.parse_args(argv)


def _read_input_file(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        logger.warning("Could not read input file %s; ignoring", path)
        return {}
    if not isinstance(data, dict):
        logger.warning("Input file %s is not a JSON object; ignoring", path)
        return {}
    return data


def build_inputs(args: argparse.Namespace) -> tuple[dict[str, Any], dict[str, Any]]:
    """Merge the ``--input`` file with explicitly-provided flags.

    Only flags the user actually passed are included; the normalizer supplies
    every other default.
    """
    data = _read_input_file(args.input)
    workload: dict[str, Any] = dict(data.get("workload") or {})
    resources: dict[str, Any] = dict(data.get("resources") or {})

    for dest, _kind, _help in _WORKLOAD_ARGS:
        val = getattr(args, dest)
        if val is not None:
            workload[dest] = val
    for dest, _kind, _help in _RESOURCE_ARGS:
        val = getattr(args, dest)
        if val is not None:
            resources[dest] = val
    return workload, resources


def build_config(args: argparse.Namespace) -> CapacityConfig:
    """Load tuning overrides named by ``--config``."""
    return load_config(args.config)


def render_estimate(result: EstimateResult, config: CapacityConfig) -> str:
    """Human-readable summary of a single estimate."""
    flow = result.flow_metrics
    requirements = result.requirements
    lines = [
        f"Metrics/sec: {format_number(flow.total_metrics_per_second)} "
        f"({format_number(flow.unique_metrics_per_second)} unique)",
        "",
    ]
    for kind, resource in requirements.items():
        lines.append(
            f"{kind.value:<11} {format_number(resource.value):>10} {resource.unit:<7} "
            f"{resource.status.value:<8} {resource.utilization * 100:6.1f}%"
        )
        lines.append(f"    {resource.explanation}")
    lines.extend(
        [
            "",
            f"Overall status: {overall_status(requirements).value}",
            identify_bottleneck(requirements, config),
            recommend_scaling(requirements, config),
        ]
    )
    return "\n".join(lines)


def render_scaling(analysis: ScalingAnalysis) -> str:
    """Human-readable summary of an instance scaling sweep."""
    collector = analysis.collector_scaling
    processor = analysis.processor_scaling
    summary = analysis.analysis
    lines = ["Collectors  metrics/inst  cpu-eff  mem-eff  net-ratio"]
    for i, count in enumerate(collector.instances):
        lines.append(
            f"{count:>10}  {format_number(collector.metrics_per_instance[i]):>12}  "
            f"{collector.cpu_efficiency[i]:7.3f}  "
            f"{collector.memory_efficiency[i]:7.3f}  "
            f"{collector.network_overhead[i]:9.3f}"
        )
    lines.append("")
    lines.append("Writers     writes/inst   cpu-eff  mem-eff  disk-ratio")
    for i, count in enumerate(processor.instances):
        lines.append(
            f"{count:>7}  {format_number(processor.writes_per_instance[i]):>14}  "
            f"{processor.cpu_efficiency[i]:7.3f}  "
            f"{processor.memory_efficiency[i]:7.3f}  "
            f"{processor.disk_io_efficiency[i]:10.3f}"
        )
    lines.extend(
        [
            "",
            f"Ideal collectors: {summary.collector_ideal_count} "
            f"({summary.collector_efficiency_gain}% gain)",
            f"Ideal writers: {summary.processor_ideal_count} "
            f"({summary.processor_efficiency_gain}% gain)",
            summary.combined_scaling_recommendation,
        ]
    )
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=level, json_output=not args.verbose, log_file=args.log_file)

    config = build_config(args)
    workload, resources = build_inputs(args)

    try:
        if args.command == "estimate":
            result = estimate(workload, resources, config)
            output = (
                result.model_dump_json(indent=2, by_alias=True)
                if args.json
                else render_estimate(result, config)
            )
        else:
            analysis = explore_instance_scaling(workload, resources, config)
            output = (
                analysis.model_dump_json(indent=2, by_alias=True)
                if args.json
                else render_scaling(analysis)
            )
    except NonFiniteResultError as exc:
        print(f"capacity: {exc}", file=sys.stderr)
        sys.exit(2)

    print(output)


if __name__ == "__main__":
    main()
