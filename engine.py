"""Estimation entry point: normalize, derive flow, run the five estimators."""

from __future__ import annotations

import logging
from typing import Any

from config import DEFAULT_CONFIG, CapacityConfig
from estimators import (
    estimate_cpu,
    estimate_disk_io,
    estimate_memory,
    estimate_network_io,
    estimate_storage,
)
from flow import check_finite, compute_flow
from models import EstimateResult, FlowMetrics, ResourceRequirements
from normalize import normalize_resources, normalize_workload

logger = logging.getLogger("capacity.engine")


def _check_result(
    requirements: ResourceRequirements, flow_metrics: FlowMetrics
) -> None:
    for name, value in flow_metrics.model_dump().items():
        check_finite(f"flow_metrics.{name}", value)
    for kind, resource in requirements.items():
        check_finite(f"{kind.value}.value", resource.value)
        check_finite(f"{kind.value}.utilization", resource.utilization)


def estimate(
    workload: Any,
    resources: Any,
    config: CapacityConfig | None = None,
) -> EstimateResult:
    """Estimate resource requirements for *workload* on *resources*.

    Accepts ``None``, partial mappings, negative or out-of-range values, and
    already-built models; everything is normalized first. Pure: identical
    inputs always give identical outputs.

    Raises
    ------
    NonFiniteResultError
        If the metric rate or any figure comes out NaN or infinite. Inputs
        are finite after normalization, but very large ones can overflow.
    """
    cfg = config or DEFAULT_CONFIG
    safe_workload = normalize_workload(workload)
    safe_resources = normalize_resources(resources)
    flow_metrics = compute_flow(safe_workload, safe_resources, cfg)

    requirements = ResourceRequirements(
        cpu=estimate_cpu(safe_workload, safe_resources, flow_metrics, cfg),
        memory=estimate_memory(safe_workload, safe_resources, flow_metrics, cfg),
        disk_io=estimate_disk_io(safe_workload, safe_resources, flow_metrics, cfg),
        network_io=estimate_network_io(
            safe_workload, safe_resources, flow_metrics, cfg
        ),
        storage=estimate_storage(safe_workload, safe_resources, flow_metrics, cfg),
    )
    _check_result(requirements, flow_metrics)

    logger.debug(
        "Estimated %s metrics/s on %d collectors / %d writers: "
        "cpu=%.1f mem=%.1f disk=%.1f net=%.1f storage=%.1f",
        flow_metrics.total_metrics_per_second,
        safe_resources.statsd_instances,
        safe_resources.carbon_instances,
        requirements.cpu.value,
        requirements.memory.value,
        requirements.disk_io.value,
        requirements.network_io.value,
        requirements.storage.value,
    )
    return EstimateResult(requirements=requirements, flow_metrics=flow_metrics)
