"""Capacity estimator tuning configuration via Pydantic."""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger("capacity.config")

# (field_name, env_var, default) tuples consulted by ``resolve_env_overrides``.
_ENV_FLOAT_OVERRIDES: list[tuple[str, str, float]] = [
    ("warning_threshold", "CAPACITY_WARNING_THRESHOLD", 0.7),
    ("critical_threshold", "CAPACITY_CRITICAL_THRESHOLD", 0.9),
    ("memory_plateau_multiplier", "CAPACITY_MEMORY_PLATEAU_MULTIPLIER", 0.4),
]

_ENV_INT_OVERRIDES: list[tuple[str, str, int]] = [
    ("sweep_max_instances", "CAPACITY_SWEEP_MAX_INSTANCES", 8),
]


class CapacityConfig(BaseModel):
    """Heuristic coefficients used by the estimators.

    None of these are derived from measurements; they are fixed heuristics
    kept here so they can be inspected and overridden without touching the
    arithmetic.
    """

    model_config = ConfigDict(frozen=True)

    # CPU
    collector_cpu_unit_load: float = Field(
        default=10_000, gt=0, description="Collector metrics/s per load unit"
    )
    collector_cpu_multiplier: float = Field(
        default=0.6, ge=0, description="Cores per collector load unit"
    )
    writer_cpu_unit_load: float = Field(
        default=5_000, gt=0, description="Writer writes/s per load unit"
    )
    writer_cpu_multiplier: float = Field(
        default=1.2, ge=0, description="Cores per writer load unit"
    )
    collector_coordination_overhead: float = Field(
        default=0.015, ge=0, description="CPU tax per additional collector"
    )
    writer_coordination_overhead: float = Field(
        default=0.01, ge=0, description="CPU tax per additional writer"
    )
    visualization_cpu_multiplier: float = Field(
        default=0.4, ge=0, description="Cores per unit of query complexity curve"
    )
    min_cpu_cores: float = Field(default=0.1, gt=0, description="CPU floor")

    # Memory
    bytes_per_metric_in_memory: float = Field(
        default=150, gt=0, description="Resident bytes per aggregated metric"
    )
    collector_memory_factor: float = Field(
        default=1.2, ge=0, description="Collector hash/bucket overhead factor"
    )
    writer_cache_seconds: float = Field(
        default=10, ge=0, description="Seconds of writes held in the writer cache"
    )
    memory_efficiency: float = Field(
        default=0.85,
        gt=0,
        le=1,
        description="Share of data memory still needed once distributed",
    )
    memory_plateau_multiplier: float = Field(
        default=0.4,
        gt=0,
        le=1,
        description="Cap on distributed data memory as a share of one instance",
    )
    collector_instance_overhead_gb: float = Field(
        default=0.05, ge=0, description="Fixed GB per collector process"
    )
    writer_instance_overhead_gb: float = Field(
        default=0.075, ge=0, description="Fixed GB per writer process"
    )
    write_load_factor_cap: float = Field(
        default=1.2, ge=1, description="Ceiling on the writer cache load factor"
    )
    write_load_factor_slope: float = Field(
        default=0.2, ge=0, description="Load factor growth per 10k writes/instance"
    )
    visualization_base_memory_gb: float = Field(
        default=0.5, ge=0, description="Base GB for the query/render tier"
    )
    min_memory_gb: float = Field(default=0.5, gt=0, description="Memory floor")

    # Disk I/O
    base_iops_per_write: float = Field(default=2.5, gt=0)
    random_io_divisor: float = Field(
        default=6_000, gt=0, description="Unique metrics/s per random I/O step"
    )
    random_io_slope: float = Field(default=0.4, ge=0)
    disk_coordination_overhead: float = Field(
        default=0.005, ge=0, description="I/O tax per additional writer"
    )
    block_size_bytes: int = Field(default=4096, gt=0)
    write_payload_bytes: int = Field(default=100, gt=0)
    metadata_overhead: float = Field(
        default=1.15, ge=1, description="Filesystem metadata multiplier"
    )

    # Network I/O
    metric_wire_bytes: float = Field(
        default=50, gt=0, description="Bytes per metric on the wire"
    )
    client_balancing_overhead: float = Field(
        default=0.01, ge=0, description="Load-balancer tax per additional collector"
    )
    aggregation_ratio: float = Field(
        default=0.3,
        ge=0,
        le=1,
        description="Collector->writer traffic as a share of client traffic",
    )
    inter_node_overhead: float = Field(
        default=0.005, ge=0, description="Tax per combined additional instance"
    )
    query_traffic_factor: float = Field(
        default=0.05, ge=0, description="Query traffic per unit complexity"
    )

    # Storage
    storage_resolution_seconds: float = Field(default=10, gt=0)
    bytes_per_stored_point: float = Field(default=12, gt=0)

    # Reported values for disk, network, and storage never drop below this
    min_reported_value: float = Field(default=0.1, gt=0)

    # Classification
    warning_threshold: float = Field(default=0.7, gt=0)
    critical_threshold: float = Field(default=0.9, gt=0)
    growth_threshold: float = Field(
        default=0.5, gt=0, description="Utilization below which there is headroom"
    )

    # Scaling sweep
    sweep_min_instances: int = Field(default=1, ge=1, le=64)
    sweep_max_instances: int = Field(default=8, ge=1, le=64)

    @model_validator(mode="before")
    @classmethod
    def resolve_env_overrides(cls, data: Any) -> Any:
        """Apply ``CAPACITY_*`` environment overrides to unset fields.

        Explicit values always win; unparseable env values are ignored.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field_name, env_key, _default in _ENV_FLOAT_OVERRIDES:
            env_val = os.environ.get(env_key)
            if env_val is not None and field_name not in data:
                with contextlib.suppress(ValueError):
                    data[field_name] = float(env_val)
        for field_name, env_key, _default in _ENV_INT_OVERRIDES:
            env_val = os.environ.get(env_key)
            if env_val is not None and field_name not in data:
                with contextlib.suppress(ValueError):
                    data[field_name] = int(env_val)
        return data

    @model_validator(mode="after")
    def check_ordering(self) -> CapacityConfig:
        """Reject threshold and sweep ranges that are out of order."""
        if self.critical_threshold <= self.warning_threshold:
            msg = (
                f"critical_threshold ({self.critical_threshold}) must exceed "
                f"warning_threshold ({self.warning_threshold})"
            )
            raise ValueError(msg)
        if self.sweep_max_instances < self.sweep_min_instances:
            msg = (
                f"sweep_max_instances ({self.sweep_max_instances}) must be >= "
                f"sweep_min_instances ({self.sweep_min_instances})"
            )
            raise ValueError(msg)
        return self

    @property
    def sweep_range(self) -> range:
        """Instance counts visited by the scaling explorer."""
        return range(self.sweep_min_instances, self.sweep_max_instances + 1)


# Built without validators so the defaults never pick up CAPACITY_* env vars.
DEFAULT_CONFIG = CapacityConfig.model_construct()


def load_config_file(path: Path | None) -> dict[str, Any]:
    """Load tuning overrides from a JSON file.

    Returns an empty dict if the file doesn't exist or is invalid.
    """
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text())
        if isinstance(data, dict):
            return data
        logger.warning("Config file %s is not a JSON object; ignoring", path)
        return {}
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        logger.warning("Could not read config file %s; using defaults", path)
        return {}


def load_config(path: Path | None = None, **overrides: Any) -> CapacityConfig:
    """Build a :class:`CapacityConfig` from *path* and keyword *overrides*."""
    values = load_config_file(path)
    unknown = sorted(set(values) - set(CapacityConfig.model_fields))
    if unknown:
        logger.warning(
            "Ignoring unknown config keys in %s: %s", path, ", ".join(unknown)
        )
    values.update(overrides)
    return CapacityConfig(**values)
