"""Data models for the capacity estimator."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Inputs arrive from presentation layers that speak camelCase
# (``requestsPerSecond``); Python callers use snake_case. Both validate.
_VALUE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def _by_field_name(
    model: type[BaseModel], changes: dict[str, Any]
) -> dict[str, Any]:
    """Rekey *changes* from camelCase or alias spellings to field names."""
    names: dict[str, str] = {}
    for name, info in model.model_fields.items():
        names[to_camel(name)] = name
        if info.alias:
            names[info.alias] = name
    return {names.get(key, key): value for key, value in changes.items()}


# --- Inputs ---


class WorkloadParams(BaseModel):
    """Declared workload profile for the metrics pipeline."""

    model_config = _VALUE_CONFIG

    requests_per_second: float = Field(default=0, ge=0)
    metrics_per_request: float = Field(default=0, ge=0)
    unique_metrics_ratio: float = Field(default=0.2, ge=0, le=1)
    calculation_complexity: float = Field(default=1, ge=1)
    flush_interval_seconds: float = Field(default=10, ge=1)
    retention_period_days: float = Field(default=1, ge=1)

    def with_overrides(self, **changes: Any) -> WorkloadParams:
        """Return a copy with *changes* applied and re-normalized."""
        from normalize import normalize_workload

        return normalize_workload(
            {**self.model_dump(), **_by_field_name(WorkloadParams, changes)}
        )


class UserResources(BaseModel):
    """Capacity the operator has available, plus tier instance counts."""

    model_config = _VALUE_CONFIG

    cpu: float = Field(default=1, ge=0.1, description="Cores")
    memory: float = Field(default=1, ge=0.1, description="GB")
    disk_io: float = Field(default=10, ge=1, alias="diskIO", description="MB/s")
    network_io: float = Field(
        default=10, ge=1, alias="networkIO", description="Mbps"
    )
    storage: float = Field(default=10, ge=1, description="GB")
    statsd_instances: int = Field(default=1, ge=1, description="Collector count")
    carbon_instances: int = Field(default=1, ge=1, description="Writer count")

    def with_overrides(self, **changes: Any) -> UserResources:
        """Return a copy with *changes* applied and re-normalized."""
        from normalize import normalize_resources

        return normalize_resources(
            {**self.model_dump(), **_by_field_name(UserResources, changes)}
        )


# --- Derived flow ---


class FlowMetrics(BaseModel):
    """Throughput counters derived from a normalized workload."""

    model_config = _VALUE_CONFIG

    total_metrics_per_second: float = 0
    unique_metrics_per_second: int = 0
    writes_per_second: int = 0
    metrics_per_instance: int = 0
    writes_per_instance: int = 0
    storage_per_day: float = 0  # GB
    total_storage_required: float = 0  # GB over the retention period


# --- Resources ---


class ResourceStatus(StrEnum):
    """Health classification of a single resource."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class Resource(BaseModel):
    """Estimated requirement for one resource kind."""

    model_config = _VALUE_CONFIG

    value: float
    unit: str
    status: ResourceStatus = ResourceStatus.HEALTHY
    utilization: float = 0  # required / available, not clamped
    explanation: str = ""


class ResourceKind(StrEnum):
    """Keys of :class:`ResourceRequirements`."""

    CPU = "cpu"
    MEMORY = "memory"
    DISK_IO = "disk_io"
    NETWORK_IO = "network_io"
    STORAGE = "storage"


class ResourceRequirements(BaseModel):
    """The five resource estimates for one configuration."""

    model_config = _VALUE_CONFIG

    cpu: Resource
    memory: Resource
    disk_io: Resource = Field(alias="diskIO")
    network_io: Resource = Field(alias="networkIO")
    storage: Resource

    def items(self) -> list[tuple[ResourceKind, Resource]]:
        """Return ``(kind, resource)`` pairs in declaration order."""
        return [(kind, getattr(self, kind.value)) for kind in ResourceKind]


class EstimateResult(BaseModel):
    """Output of a single estimation call."""

    model_config = _VALUE_CONFIG

    requirements: ResourceRequirements
    flow_metrics: FlowMetrics


# --- Instance scaling ---


class CollectorSweep(BaseModel):
    """Per-count measurements while varying collector instances."""

    model_config = _VALUE_CONFIG

    instances: list[int] = Field(default_factory=list)
    metrics_per_instance: list[int] = Field(default_factory=list)
    cpu_efficiency: list[float] = Field(default_factory=list)
    memory_efficiency: list[float] = Field(default_factory=list)
    network_overhead: list[float] = Field(default_factory=list)


class ProcessorSweep(BaseModel):
    """Per-count measurements while varying writer instances."""

    model_config = _VALUE_CONFIG

    instances: list[int] = Field(default_factory=list)
    writes_per_instance: list[int] = Field(default_factory=list)
    cpu_efficiency: list[float] = Field(default_factory=list)
    memory_efficiency: list[float] = Field(default_factory=list)
    disk_io_efficiency: list[float] = Field(default_factory=list)


class ScalingSummary(BaseModel):
    """Ideal instance counts and the combined recommendation."""

    model_config = _VALUE_CONFIG

    collector_ideal_count: int = 1
    processor_ideal_count: int = 1
    collector_efficiency_gain: float = 0  # percent
    processor_efficiency_gain: float = 0  # percent
    combined_scaling_recommendation: str = ""


class ScalingAnalysis(BaseModel):
    """Result of sweeping both tiers across instance counts."""

    model_config = _VALUE_CONFIG

    collector_scaling: CollectorSweep = Field(default_factory=CollectorSweep)
    processor_scaling: ProcessorSweep = Field(default_factory=ProcessorSweep)
    analysis: ScalingSummary = Field(default_factory=ScalingSummary)
