"""Tests for normalize.py."""

from __future__ import annotations

import math

import pytest

from models import UserResources, WorkloadParams
from normalize import normalize_resources, normalize_workload

# ---------------------------------------------------------------------------
# normalize_workload
# ---------------------------------------------------------------------------


class TestNormalizeWorkload:
    """Tests for normalize_workload()."""

    def test_none_gives_all_defaults(self) -> None:
        result = normalize_workload(None)

        assert result == WorkloadParams(
            requests_per_second=0,
            metrics_per_request=0,
            unique_metrics_ratio=0.2,
            calculation_complexity=1,
            flush_interval_seconds=10,
            retention_period_days=1,
        )

    def test_partial_record_fills_missing_fields(self) -> None:
        result = normalize_workload({"requests_per_second": 250})

        assert result.requests_per_second == 250
        assert result.unique_metrics_ratio == 0.2
        assert result.flush_interval_seconds == 10

    def test_negative_values_clamp_to_lower_bound(self) -> None:
        result = normalize_workload(
            {
                "requests_per_second": -100,
                "metrics_per_request": -1,
                "calculation_complexity": -3,
                "flush_interval_seconds": -10,
                "retention_period_days": -7,
            }
        )

        assert result.requests_per_second == 0
        assert result.metrics_per_request == 0
        assert result.calculation_complexity == 1
        assert result.flush_interval_seconds == 1
        assert result.retention_period_days == 1

    def test_zero_takes_the_default(self) -> None:
        result = normalize_workload(
            {"unique_metrics_ratio": 0, "flush_interval_seconds": 0}
        )

        assert result.unique_metrics_ratio == 0.2
        assert result.flush_interval_seconds == 10

    def test_ratio_is_clamped_to_one(self) -> None:
        result = normalize_workload({"unique_metrics_ratio": 1.5})
        assert result.unique_metrics_ratio == 1

    def test_complexity_below_one_is_raised(self) -> None:
        result = normalize_workload({"calculation_complexity": 0.5})
        assert result.calculation_complexity == 1

    @pytest.mark.parametrize("bad", ["abc", None, True, math.nan, math.inf, [1]])
    def test_unusable_values_take_the_default(self, bad: object) -> None:
        result = normalize_workload({"flush_interval_seconds": bad})
        assert result.flush_interval_seconds == 10

    def test_numeric_strings_are_accepted(self) -> None:
        result = normalize_workload({"requests_per_second": "12"})
        assert result.requests_per_second == 12

    def test_camel_case_keys_are_accepted(self) -> None:
        result = normalize_workload(
            {"requestsPerSecond": 500, "uniqueMetricsRatio": 0.5}
        )

        assert result.requests_per_second == 500
        assert result.unique_metrics_ratio == 0.5

    def test_non_mapping_input_gives_defaults(self) -> None:
        assert normalize_workload([1, 2, 3]) == normalize_workload(None)

    def test_model_input_is_renormalized(self) -> None:
        model = WorkloadParams(requests_per_second=42)
        assert normalize_workload(model) == model

    def test_is_idempotent(self) -> None:
        once = normalize_workload(
            {"requests_per_second": -5, "unique_metrics_ratio": 3}
        )
        assert normalize_workload(once) == once


# ---------------------------------------------------------------------------
# normalize_resources
# ---------------------------------------------------------------------------


class TestNormalizeResources:
    """Tests for normalize_resources()."""

    def test_none_gives_all_defaults(self) -> None:
        assert normalize_resources(None) == UserResources()

    def test_defaults(self) -> None:
        result = normalize_resources({})

        assert result.cpu == 1
        assert result.memory == 1
        assert result.disk_io == 10
        assert result.network_io == 10
        assert result.storage == 10
        assert result.statsd_instances == 1
        assert result.carbon_instances == 1

    def test_tiny_values_clamp_to_lower_bound(self) -> None:
        result = normalize_resources(
            {"cpu": 0.01, "memory": 0.05, "disk_io": 0.5, "storage": -3}
        )

        assert result.cpu == 0.1
        assert result.memory == 0.1
        assert result.disk_io == 1
        assert result.storage == 1

    def test_instance_counts_are_truncated_integers(self) -> None:
        result = normalize_resources({"statsd_instances": 2.7, "carbon_instances": 0})

        assert result.statsd_instances == 2
        assert isinstance(result.statsd_instances, int)
        assert result.carbon_instances == 1

    def test_negative_instance_count_becomes_one(self) -> None:
        assert normalize_resources({"carbon_instances": -4}).carbon_instances == 1

    def test_io_aliases_are_accepted(self) -> None:
        result = normalize_resources({"diskIO": 50, "networkIO": 75})

        assert result.disk_io == 50
        assert result.network_io == 75

    def test_camel_case_instance_keys_are_accepted(self) -> None:
        result = normalize_resources({"statsdInstances": 3, "carbonInstances": 4})

        assert result.statsd_instances == 3
        assert result.carbon_instances == 4

    def test_snake_case_wins_over_alias(self) -> None:
        assert normalize_resources({"disk_io": 20, "diskIO": 99}).disk_io == 20

    def test_never_raises_on_garbage(self) -> None:
        result = normalize_resources({"cpu": object(), "memory": "lots"})

        assert result.cpu == 1
        assert result.memory == 1
