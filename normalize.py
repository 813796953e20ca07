"""Input normalization: the single point where raw inputs become valid models."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from models import UserResources, WorkloadParams

logger = logging.getLogger("capacity.normalize")

# field -> (default when missing or zero, lower bound, upper bound or None)
_WORKLOAD_RULES: dict[str, tuple[float, float, float | None]] = {
    "requests_per_second": (0, 0, None),
    "metrics_per_request": (0, 0, None),
    "unique_metrics_ratio": (0.2, 0, 1),
    "calculation_complexity": (1, 1, None),
    "flush_interval_seconds": (10, 1, None),
    "retention_period_days": (1, 1, None),
}

_RESOURCE_RULES: dict[str, tuple[float, float, float | None]] = {
    "cpu": (1, 0.1, None),
    "memory": (1, 0.1, None),
    "disk_io": (10, 1, None),
    "network_io": (10, 1, None),
    "storage": (10, 1, None),
    "statsd_instances": (1, 1, None),
    "carbon_instances": (1, 1, None),
}

_INTEGER_FIELDS = frozenset({"statsd_instances", "carbon_instances"})

# Alternate spellings accepted on input besides snake_case and to_camel().
_EXTRA_ALIASES = {"diskIO": "disk_io", "networkIO": "network_io"}


def _coerce_number(value: Any) -> float | None:
    """Return *value* as a finite float, or ``None`` if it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_mapping(raw: Any) -> dict[str, Any]:
    """Turn ``None``, a mapping, or a model into a snake_case dict."""
    if raw is None:
        return {}
    if isinstance(raw, BaseModel):
        return raw.model_dump()
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring non-mapping input of type %s", type(raw).__name__)
        return {}
    return dict(raw)


def _lookup(data: Mapping[str, Any], field: str) -> Any:
    if field in data:
        return data[field]
    camel = to_camel(field)
    if camel in data:
        return data[camel]
    for alias, target in _EXTRA_ALIASES.items():
        if target == field and alias in data:
            return data[alias]
    return None


def _apply_rules(
    data: Mapping[str, Any], rules: dict[str, tuple[float, float, float | None]]
) -> dict[str, Any]:
    clean: dict[str, Any] = {}
    for field, (default, lower, upper) in rules.items():
        number = _coerce_number(_lookup(data, field))
        value = max(lower, number or default)
        if upper is not None:
            value = min(upper, value)
        clean[field] = int(value) if field in _INTEGER_FIELDS else value
    return clean


def normalize_workload(raw: Any) -> WorkloadParams:
    """Default and clamp a raw workload record.

    Missing, zero, non-numeric, and non-finite fields take their default;
    everything is then clamped into range. Never raises.
    """
    return WorkloadParams(**_apply_rules(_as_mapping(raw), _WORKLOAD_RULES))


def normalize_resources(raw: Any) -> UserResources:
    """Default and clamp a raw resources record. Never raises."""
    return UserResources(**_apply_rules(_as_mapping(raw), _RESOURCE_RULES))
