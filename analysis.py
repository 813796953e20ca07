"""Bottleneck detection and scaling advice over a set of resource estimates."""

from __future__ import annotations

import logging

from config import DEFAULT_CONFIG, CapacityConfig
from formatting import round_half_up
from models import ResourceRequirements, ResourceStatus

logger = logging.getLogger("capacity.analysis")


def runtime_utilizations(requirements: ResourceRequirements) -> list[tuple[str, float]]:
    """``(display name, utilization)`` for the four runtime resources.

    Storage is excluded: it fills up over the retention period rather than
    saturating under load.
    """
    return [
        ("CPU", requirements.cpu.utilization),
        ("Memory", requirements.memory.utilization),
        ("Disk I/O", requirements.disk_io.utilization),
        ("Network I/O", requirements.network_io.utilization),
    ]


def max_utilization(requirements: ResourceRequirements) -> float:
    """Highest utilization across the runtime resources."""
    return max(util for _, util in runtime_utilizations(requirements))


def identify_bottleneck(
    requirements: ResourceRequirements, config: CapacityConfig = DEFAULT_CONFIG
) -> str:
    """Name the most utilized runtime resource if it is past the warning line."""
    ranked = sorted(
        runtime_utilizations(requirements), key=lambda pair: pair[1], reverse=True
    )
    name, utilization = ranked[0]
    if utilization > config.warning_threshold:
        logger.debug(
            "Bottleneck %s at %.3f", name, utilization, extra={"resource": name}
        )
        percent = int(round_half_up(utilization * 100))
        return f"Primary bottleneck: {name} ({percent}% utilized)"
    return "No significant bottlenecks detected"


def recommend_scaling(
    requirements: ResourceRequirements, config: CapacityConfig = DEFAULT_CONFIG
) -> str:
    """One-line scaling advice keyed off the peak runtime utilization."""
    peak = max_utilization(requirements)
    if peak <= config.growth_threshold:
        return "Current resources are adequate with room for growth."
    if peak <= config.warning_threshold:
        return "Current resources are adequate but approaching capacity."
    if peak <= config.critical_threshold:
        return "Consider scaling the highlighted resources soon."
    return "Immediate scaling recommended for highlighted resources."


def status_counts(requirements: ResourceRequirements) -> dict[ResourceStatus, int]:
    """Count resources in each status, storage included."""
    counts = dict.fromkeys(ResourceStatus, 0)
    for _, resource in requirements.items():
        counts[resource.status] += 1
    return counts


def overall_status(requirements: ResourceRequirements) -> ResourceStatus:
    """Worst status across all five resources."""
    counts = status_counts(requirements)
    if counts[ResourceStatus.CRITICAL]:
        return ResourceStatus.CRITICAL
    if counts[ResourceStatus.WARNING]:
        return ResourceStatus.WARNING
    return ResourceStatus.HEALTHY
