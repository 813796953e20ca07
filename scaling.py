"""Instance scaling explorer.

Sweeps the collector tier and the writer tier across a range of instance
counts, measures per-unit resource cost relative to a single-instance
baseline, and turns the best counts into a scaling recommendation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from enum import StrEnum
from typing import Any

from analysis import max_utilization
from config import DEFAULT_CONFIG, CapacityConfig
from engine import estimate
from formatting import round_half_up
from models import (
    CollectorSweep,
    EstimateResult,
    ProcessorSweep,
    ScalingAnalysis,
    ScalingSummary,
    UserResources,
    WorkloadParams,
)
from normalize import normalize_resources, normalize_workload

logger = logging.getLogger("capacity.scaling")

# (swept result, single-instance baseline) -> measurement
MetricExtractor = Callable[[EstimateResult, EstimateResult], float]


class Tier(StrEnum):
    """A horizontally scalable tier and the resources field holding its count."""

    COLLECTOR = "statsd_instances"
    PROCESSOR = "carbon_instances"

    @property
    def other(self) -> Tier:
        return Tier.PROCESSOR if self is Tier.COLLECTOR else Tier.COLLECTOR


def _ratio(value: float, baseline: float) -> float:
    """``value / baseline``, or 1.0 when the baseline is zero."""
    if baseline == 0:
        return 1.0
    return value / baseline


def _per_unit_ratio(
    value: float, units: float, baseline_value: float, baseline_units: float
) -> float:
    """Ratio of ``value per unit`` to the baseline's, 1.0 when undefined."""
    if units == 0 or baseline_units == 0:
        return 1.0
    return _ratio(value / units, baseline_value / baseline_units)


def cpu_per_10k_metrics(result: EstimateResult, baseline: EstimateResult) -> float:
    return _per_unit_ratio(
        result.requirements.cpu.value,
        result.flow_metrics.total_metrics_per_second / 10_000,
        baseline.requirements.cpu.value,
        baseline.flow_metrics.total_metrics_per_second / 10_000,
    )


def cpu_per_write(result: EstimateResult, baseline: EstimateResult) -> float:
    return _per_unit_ratio(
        result.requirements.cpu.value,
        result.flow_metrics.writes_per_second,
        baseline.requirements.cpu.value,
        baseline.flow_metrics.writes_per_second,
    )


def memory_per_unique_metric(
    result: EstimateResult, baseline: EstimateResult
) -> float:
    return _per_unit_ratio(
        result.requirements.memory.value,
        result.flow_metrics.unique_metrics_per_second,
        baseline.requirements.memory.value,
        baseline.flow_metrics.unique_metrics_per_second,
    )


def network_ratio(result: EstimateResult, baseline: EstimateResult) -> float:
    return _ratio(
        result.requirements.network_io.value, baseline.requirements.network_io.value
    )


def disk_io_ratio(result: EstimateResult, baseline: EstimateResult) -> float:
    return _ratio(
        result.requirements.disk_io.value, baseline.requirements.disk_io.value
    )


COLLECTOR_METRICS: dict[str, MetricExtractor] = {
    "metrics_per_instance": lambda r, _b: r.flow_metrics.metrics_per_instance,
    "cpu_efficiency": cpu_per_10k_metrics,
    "memory_efficiency": memory_per_unique_metric,
    "network_overhead": network_ratio,
}

PROCESSOR_METRICS: dict[str, MetricExtractor] = {
    "writes_per_instance": lambda r, _b: r.flow_metrics.writes_per_instance,
    "cpu_efficiency": cpu_per_write,
    "memory_efficiency": memory_per_unique_metric,
    "disk_io_efficiency": disk_io_ratio,
}


def single_instance_baseline(
    workload: WorkloadParams,
    resources: UserResources,
    config: CapacityConfig = DEFAULT_CONFIG,
) -> EstimateResult:
    """Estimate with both tiers forced to a single instance."""
    trial = resources.with_overrides(statsd_instances=1, carbon_instances=1)
    return estimate(workload, trial, config)


def sweep(
    workload: WorkloadParams,
    resources: UserResources,
    varied: Tier,
    instance_range: Iterable[int],
    extractors: Mapping[str, MetricExtractor],
    config: CapacityConfig = DEFAULT_CONFIG,
    baseline: EstimateResult | None = None,
) -> dict[str, list[Any]]:
    """Estimate at each count in *instance_range* for the *varied* tier.

    The other tier is held at one instance. Each extractor is called with the
    swept result and the all-ones *baseline* (computed when not supplied);
    the returned mapping holds an ``instances`` column plus one column per
    extractor.
    """
    if baseline is None:
        baseline = single_instance_baseline(workload, resources, config)
    columns: dict[str, list[Any]] = {"instances": []}
    columns.update({name: [] for name in extractors})

    for instances in instance_range:
        trial = resources.with_overrides(
            **{varied.value: instances, varied.other.value: 1}
        )
        result = estimate(workload, trial, config)
        columns["instances"].append(instances)
        for name, extract in extractors.items():
            columns[name].append(extract(result, baseline))
        logger.debug(
            "Swept %s at %d instances",
            varied.name.lower(),
            instances,
            extra={"tier": varied.name.lower(), "instances": instances},
        )
    return columns


def _best_count(instances: list[int], ratios: list[float]) -> tuple[int, float]:
    """Count with the strictly lowest ratio below 1.0, defaulting to one instance."""
    best_ratio = 1.0
    best_count = 1
    for count, ratio in zip(instances, ratios, strict=True):
        if ratio < best_ratio:
            best_ratio = ratio
            best_count = count
    return best_count, best_ratio


def _recommend(
    current: EstimateResult,
    resources: UserResources,
    collector_ideal: int,
    collector_gain: float,
    processor_ideal: int,
    processor_gain: float,
    config: CapacityConfig,
) -> str:
    peak = max_utilization(current.requirements)
    collector_pct = int(round_half_up(collector_gain))
    processor_pct = int(round_half_up(processor_gain))

    if peak < config.growth_threshold:
        return "Current resource allocation is sufficient; no scaling needed."

    if peak < config.warning_threshold:
        if collector_ideal > resources.statsd_instances:
            return (
                f"Consider increasing collector instances to {collector_ideal} "
                f"for better load distribution ({collector_pct}% efficiency gain)."
            )
        if processor_ideal > resources.carbon_instances:
            return (
                f"Consider increasing processor instances to {processor_ideal} "
                f"for better I/O performance ({processor_pct}% efficiency gain)."
            )
        return "Current instance counts are optimal for this workload."

    if peak < config.critical_threshold:
        if current.requirements.network_io.utilization >= config.warning_threshold:
            return (
                f"Scale up collector instances to {collector_ideal} to distribute "
                f"network load ({collector_pct}% improvement)."
            )
        if current.requirements.disk_io.utilization >= config.warning_threshold:
            return (
                f"Increase processor instances to {processor_ideal} to reduce "
                f"I/O pressure ({processor_pct}% improvement)."
            )
        return (
            f"Scale up both collector ({collector_ideal}) and processor "
            f"({processor_ideal}) instances for balanced performance."
        )

    return (
        "Urgent: Increase both hardware capacity and instance counts "
        f"({max(collector_ideal, 2)} collectors, {max(processor_ideal, 2)} processors)."
    )


def explore_instance_scaling(
    workload: Any,
    resources: Any,
    config: CapacityConfig | None = None,
) -> ScalingAnalysis:
    """Sweep both tiers and recommend instance counts.

    The collector tier's ideal count minimizes CPU per 10k metrics; the writer
    tier's minimizes disk throughput. The recommendation is driven by the
    utilization of the configuration as given, not of any swept point.
    """
    cfg = config or DEFAULT_CONFIG
    safe_workload = normalize_workload(workload)
    safe_resources = normalize_resources(resources)
    baseline = single_instance_baseline(safe_workload, safe_resources, cfg)

    collector = sweep(
        safe_workload,
        safe_resources,
        Tier.COLLECTOR,
        cfg.sweep_range,
        COLLECTOR_METRICS,
        cfg,
        baseline,
    )
    processor = sweep(
        safe_workload,
        safe_resources,
        Tier.PROCESSOR,
        cfg.sweep_range,
        PROCESSOR_METRICS,
        cfg,
        baseline,
    )

    collector_ideal, collector_best = _best_count(
        collector["instances"], collector["cpu_efficiency"]
    )
    processor_ideal, processor_best = _best_count(
        processor["instances"], processor["disk_io_efficiency"]
    )
    collector_gain = (1.0 - collector_best) * 100
    processor_gain = (1.0 - processor_best) * 100

    current = estimate(safe_workload, safe_resources, cfg)
    recommendation = _recommend(
        current,
        safe_resources,
        collector_ideal,
        collector_gain,
        processor_ideal,
        processor_gain,
        cfg,
    )
    logger.debug(
        "Ideal counts: %d collectors (%.1f%%), %d writers (%.1f%%)",
        collector_ideal,
        collector_gain,
        processor_ideal,
        processor_gain,
    )

    return ScalingAnalysis(
        collector_scaling=CollectorSweep(**collector),
        processor_scaling=ProcessorSweep(**processor),
        analysis=ScalingSummary(
            collector_ideal_count=collector_ideal,
            processor_ideal_count=processor_ideal,
            collector_efficiency_gain=round_half_up(collector_gain, 1),
            processor_efficiency_gain=round_half_up(processor_gain, 1),
            combined_scaling_recommendation=recommendation,
        ),
    )
