"""Per-resource capacity estimators.

Each estimator models the collector tier and the writer tier as horizontally
scalable: the single-instance cost is divided across ``n`` instances and a
small coordination tax proportional to ``n - 1`` is added back. The
visualization (query) tier is a fixed cost independent of instance counts.
"""

from __future__ import annotations

import math

from config import DEFAULT_CONFIG, CapacityConfig
from flow import GIB
from formatting import ceil_to, format_figure, format_quantity, format_rounded
from models import (
    FlowMetrics,
    Resource,
    ResourceStatus,
    UserResources,
    WorkloadParams,
)

MIB = 1024**2


def classify_status(
    required: float, available: float, config: CapacityConfig = DEFAULT_CONFIG
) -> ResourceStatus:
    """Classify ``required / available`` against the configured thresholds."""
    utilization = required / available
    if utilization > config.critical_threshold:
        return ResourceStatus.CRITICAL
    if utilization > config.warning_threshold:
        return ResourceStatus.WARNING
    return ResourceStatus.HEALTHY


def _saturating_cost(load: float, unit: float, multiplier: float) -> float:
    """Superlinear single-instance cost: ``u * (1 + log10(max(1, u))) * k``."""
    units = load / unit
    return units * (1 + math.log10(max(1, units))) * multiplier


def _distribute(cost: float, instances: int, overhead_rate: float) -> float:
    """Spread *cost* over *instances* and add the coordination tax."""
    return cost / instances + cost * overhead_rate * (instances - 1)


def _floored(value: float, floor: float) -> float:
    """``max(floor, value)`` that keeps NaN visible to the engine's checks."""
    if math.isnan(value):
        return value
    return max(floor, value)


def _is_scaled(resources: UserResources) -> bool:
    return resources.statsd_instances > 1 or resources.carbon_instances > 1


# --- CPU ---


def estimate_cpu(
    workload: WorkloadParams,
    resources: UserResources,
    flow: FlowMetrics,
    config: CapacityConfig = DEFAULT_CONFIG,
) -> Resource:
    """Cores needed by the collector, writer, and visualization tiers."""
    statsd = resources.statsd_instances
    carbon = resources.carbon_instances

    collector_single = _saturating_cost(
        flow.total_metrics_per_second,
        config.collector_cpu_unit_load,
        config.collector_cpu_multiplier,
    )
    writer_single = _saturating_cost(
        flow.writes_per_second,
        config.writer_cpu_unit_load,
        config.writer_cpu_multiplier,
    )
    collector_cores = _distribute(
        collector_single, statsd, config.collector_coordination_overhead
    )
    writer_cores = _distribute(
        writer_single, carbon, config.writer_coordination_overhead
    )

    complexity = workload.calculation_complexity
    visualization_cores = (
        (complexity / 5) * (1 + complexity / 10) * config.visualization_cpu_multiplier
    )
    total = _floored(
        collector_cores + writer_cores + visualization_cores, config.min_cpu_cores
    )

    if _is_scaled(resources):
        explanation = (
            f"StatsD ({statsd} inst): {format_rounded(collector_cores)} cores total "
            f"({format_rounded(collector_cores / statsd, 2)}/inst), "
            f"Carbon ({carbon} inst): {format_rounded(writer_cores)} cores total "
            f"({format_rounded(writer_cores / carbon, 2)}/inst), "
            f"Graphite: {format_rounded(visualization_cores)} cores."
        )
    else:
        explanation = (
            f"StatsD: {format_rounded(collector_cores)} cores, "
            f"Carbon: {format_rounded(writer_cores)} cores, "
            f"Graphite: {format_rounded(visualization_cores)} cores. "
            f"Processing {format_quantity(flow.total_metrics_per_second)} metrics/sec."
        )

    return Resource(
        value=ceil_to(total, 1),
        unit="cores",
        status=classify_status(total, resources.cpu, config),
        utilization=total / resources.cpu,
        explanation=explanation,
    )


# --- Memory ---


def estimate_memory(
    workload: WorkloadParams,
    resources: UserResources,
    flow: FlowMetrics,
    config: CapacityConfig = DEFAULT_CONFIG,
) -> Resource:
    """GB resident across collector buffers, writer caches, and the query tier.

    Each scalable tier is ``data / n + fixed * n``; the data share is capped
    at a plateau so very large instance counts stop yielding savings.
    """
    statsd = resources.statsd_instances
    carbon = resources.carbon_instances
    unique = flow.unique_metrics_per_second
    per_metric = config.bytes_per_metric_in_memory

    collector_single = (
        unique
        * workload.flush_interval_seconds
        * per_metric
        * config.collector_memory_factor
        / GIB
    )
    writer_single = unique * config.writer_cache_seconds * per_metric / GIB

    collector_overhead = config.collector_instance_overhead_gb
    writer_overhead = config.writer_instance_overhead_gb

    collector_gb = (
        collector_single * config.memory_efficiency / statsd
        + collector_overhead * statsd
    )
    write_load_factor = min(
        config.write_load_factor_cap,
        1 + (flow.writes_per_instance / 10_000) * config.write_load_factor_slope,
    )
    writer_gb = (
        writer_single * config.memory_efficiency / carbon * write_load_factor
        + writer_overhead * carbon
    )

    plateau = config.memory_plateau_multiplier
    effective_collector = min(
        collector_gb, collector_single * plateau + collector_overhead
    )
    effective_writer = min(writer_gb, writer_single * plateau + writer_overhead)

    visualization_gb = (
        config.visualization_base_memory_gb
        + (workload.calculation_complexity / 5) * (1 + unique / 100_000) * 2
    )
    total = _floored(
        effective_collector + effective_writer + visualization_gb,
        config.min_memory_gb,
    )

    if _is_scaled(resources):
        collector_data = (effective_collector - collector_overhead * statsd) / statsd
        writer_data = (effective_writer - writer_overhead * carbon) / carbon
        explanation = (
            f"StatsD ({statsd} inst): {format_rounded(effective_collector, 2)} GB "
            f"({format_rounded(collector_data, 2)} GB data/inst, "
            f"{format_figure(collector_overhead)} GB fixed/inst). "
            f"Carbon ({carbon} inst): {format_rounded(effective_writer, 2)} GB "
            f"({format_rounded(writer_data, 2)} GB data/inst, "
            f"{format_figure(writer_overhead)} GB fixed/inst). "
            f"Graphite: {format_rounded(visualization_gb, 2)} GB."
        )
    else:
        explanation = (
            f"StatsD: {format_rounded(collector_gb, 2)} GB, "
            f"Carbon: {format_rounded(writer_gb, 2)} GB, "
            f"Graphite: {format_rounded(visualization_gb, 2)} GB. "
            f"Storing {format_quantity(unique)} unique metrics."
        )

    return Resource(
        value=ceil_to(total, 1),
        unit="GB",
        status=classify_status(total, resources.memory, config),
        utilization=total / resources.memory,
        explanation=explanation,
    )


# --- Disk I/O ---


def estimate_disk_io(
    workload: WorkloadParams,
    resources: UserResources,
    flow: FlowMetrics,
    config: CapacityConfig = DEFAULT_CONFIG,
) -> Resource:
    """MB/s of writer-tier disk throughput.

    Every writer owns its own on-disk files, so throughput per instance falls
    almost linearly with the writer count.
    """
    carbon = resources.carbon_instances
    random_io_factor = 1 + (
        flow.unique_metrics_per_second / config.random_io_divisor
    ) * config.random_io_slope
    distribution_factor = (1 / carbon) * (
        1 + config.disk_coordination_overhead * (carbon - 1)
    )
    iops_per_write = config.base_iops_per_write * random_io_factor * distribution_factor

    block = config.block_size_bytes
    bytes_per_operation = (
        math.ceil(config.write_payload_bytes / block) * block * config.metadata_overhead
    )
    iops_required = flow.writes_per_second * iops_per_write
    required = _floored(
        ceil_to(iops_required * bytes_per_operation / MIB, 1),
        config.min_reported_value,
    )

    if carbon > 1:
        explanation = (
            f"Carbon ({carbon} inst): {format_figure(required)} MB/s total "
            f"({format_rounded(required / carbon)} MB/s per instance). "
            f"Processing {format_quantity(flow.writes_per_second)} writes/sec "
            f"({format_quantity(flow.writes_per_instance)} per instance)."
        )
    else:
        explanation = (
            f"Carbon needs ~{format_quantity(iops_required)} IOPS "
            f"({format_figure(required)} MB/s) to write "
            f"{format_quantity(flow.writes_per_second)} metrics/sec to Whisper files."
        )

    return Resource(
        value=required,
        unit="MB/s",
        status=classify_status(required, resources.disk_io, config),
        utilization=required / resources.disk_io,
        explanation=explanation,
    )


# --- Network I/O ---


def estimate_network_io(
    workload: WorkloadParams,
    resources: UserResources,
    flow: FlowMetrics,
    config: CapacityConfig = DEFAULT_CONFIG,
) -> Resource:
    """Mbps at the busiest network segment plus query traffic.

    Per-instance inbound figures only feed the explanation; the reported
    value is the whole-pipeline bandwidth.
    """
    statsd = resources.statsd_instances
    carbon = resources.carbon_instances

    client_traffic = (
        flow.total_metrics_per_second * config.metric_wire_bytes * 8 / MIB
    )
    per_collector_inbound = (client_traffic / statsd) * (
        1 + config.client_balancing_overhead * (statsd - 1)
    )
    inter_tier_traffic = client_traffic * config.aggregation_ratio
    per_writer_inbound = (inter_tier_traffic / carbon) * (
        1 + config.inter_node_overhead * max(1, statsd + carbon - 2)
    )
    query_traffic = (
        client_traffic * config.query_traffic_factor * workload.calculation_complexity
    )
    required = _floored(
        ceil_to(max(client_traffic, inter_tier_traffic) + query_traffic, 1),
        config.min_reported_value,
    )

    if _is_scaled(resources):
        explanation = (
            f"Client traffic: {format_rounded(client_traffic)} Mbps total "
            f"({format_rounded(per_collector_inbound)} Mbps per StatsD), "
            f"Internal: {format_rounded(inter_tier_traffic)} Mbps total "
            f"({format_rounded(per_writer_inbound)} Mbps per Carbon), "
            f"Query: {format_rounded(query_traffic)} Mbps."
        )
    else:
        explanation = (
            f"Inbound: {format_rounded(client_traffic)} Mbps, "
            f"Outbound: {format_rounded(query_traffic)} Mbps. "
            f"Processing {format_quantity(flow.total_metrics_per_second)} "
            "total metrics."
        )

    return Resource(
        value=required,
        unit="Mbps",
        status=classify_status(required, resources.network_io, config),
        utilization=required / resources.network_io,
        explanation=explanation,
    )


# --- Storage ---


def estimate_storage(
    workload: WorkloadParams,
    resources: UserResources,
    flow: FlowMetrics,
    config: CapacityConfig = DEFAULT_CONFIG,
) -> Resource:
    """Daily storage growth; utilization is judged over the retention period."""
    daily = flow.storage_per_day
    retained = flow.total_storage_required

    return Resource(
        value=_floored(ceil_to(daily, 1), config.min_reported_value),
        unit="GB/day",
        status=classify_status(retained, resources.storage, config),
        utilization=retained / resources.storage,
        explanation=(
            f"Daily storage growth: {format_rounded(daily)} GB/day. "
            f"{format_figure(workload.retention_period_days)}-day storage "
            f"requirement: {format_rounded(retained)} GB."
        ),
    )
