"""Flow model: throughput counters derived from a normalized workload."""

from __future__ import annotations

import logging
import math

from config import DEFAULT_CONFIG, CapacityConfig
from models import FlowMetrics, UserResources, WorkloadParams

logger = logging.getLogger("capacity.flow")

SECONDS_PER_DAY = 86_400
GIB = 1024**3


class NonFiniteResultError(ArithmeticError):
    """An estimate produced NaN or infinity.

    Normalization only guarantees finite inputs. Very large finite inputs
    can still overflow, as can a hand-tuned config value.
    """

    def __init__(self, field: str, value: float) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Non-finite value for {field}: {value!r}")


def check_finite(field: str, value: float) -> None:
    """Log and raise :class:`NonFiniteResultError` unless *value* is finite."""
    if not math.isfinite(value):
        logger.error(
            "Non-finite estimate for %s: %r", field, value, extra={"resource": field}
        )
        raise NonFiniteResultError(field, value)


def daily_storage_gb(
    unique_metrics_per_second: float, config: CapacityConfig = DEFAULT_CONFIG
) -> float:
    """GB written per day at the configured resolution and point size."""
    points_per_metric_per_day = SECONDS_PER_DAY / config.storage_resolution_seconds
    return (
        unique_metrics_per_second
        * points_per_metric_per_day
        * config.bytes_per_stored_point
        / GIB
    )


def compute_flow(
    workload: WorkloadParams,
    resources: UserResources,
    config: CapacityConfig = DEFAULT_CONFIG,
) -> FlowMetrics:
    """Derive steady-state throughput counters.

    Writes per second equal unique metrics per second: each distinct metric
    identity is flushed once per interval and persisted once.

    Raises :class:`NonFiniteResultError` when the metric rate overflows.
    """
    total = workload.requests_per_second * workload.metrics_per_request
    check_finite("flow_metrics.total_metrics_per_second", total)
    unique = math.ceil(total * workload.unique_metrics_ratio)
    writes = unique
    per_day = daily_storage_gb(unique, config)

    return FlowMetrics(
        total_metrics_per_second=total,
        unique_metrics_per_second=unique,
        writes_per_second=writes,
        metrics_per_instance=math.ceil(total / resources.statsd_instances),
        writes_per_instance=math.ceil(writes / resources.carbon_instances),
        storage_per_day=per_day,
        total_storage_required=per_day * workload.retention_period_days,
    )
