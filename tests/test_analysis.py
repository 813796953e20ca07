"""Tests for analysis.py."""

from __future__ import annotations

import pytest

from analysis import (
    identify_bottleneck,
    max_utilization,
    overall_status,
    recommend_scaling,
    runtime_utilizations,
    status_counts,
)
from config import CapacityConfig
from models import ResourceStatus
from tests.helpers import make_requirements

# ---------------------------------------------------------------------------
# runtime_utilizations / max_utilization
# ---------------------------------------------------------------------------


class TestUtilizations:
    """Tests for the runtime utilization helpers."""

    def test_storage_is_excluded(self) -> None:
        requirements = make_requirements(storage=5.0)

        names = [name for name, _ in runtime_utilizations(requirements)]

        assert names == ["CPU", "Memory", "Disk I/O", "Network I/O"]
        assert max_utilization(requirements) == pytest.approx(0.1)

    def test_max_picks_highest(self) -> None:
        requirements = make_requirements(memory=0.4, disk_io=0.65)
        assert max_utilization(requirements) == pytest.approx(0.65)


# ---------------------------------------------------------------------------
# identify_bottleneck
# ---------------------------------------------------------------------------


class TestIdentifyBottleneck:
    """Tests for identify_bottleneck()."""

    def test_names_the_most_utilized_resource(self) -> None:
        requirements = make_requirements(cpu=0.75, network_io=0.82)

        assert (
            identify_bottleneck(requirements)
            == "Primary bottleneck: Network I/O (82% utilized)"
        )

    def test_memory_bottleneck(self) -> None:
        result = identify_bottleneck(make_requirements(memory=0.8))

        assert "Memory" in result
        assert "80%" in result

    def test_percent_can_exceed_one_hundred(self) -> None:
        requirements = make_requirements(disk_io=2.55)

        assert (
            identify_bottleneck(requirements)
            == "Primary bottleneck: Disk I/O (255% utilized)"
        )

    def test_at_warning_threshold_is_not_a_bottleneck(self) -> None:
        requirements = make_requirements(memory=0.7)

        assert identify_bottleneck(requirements) == (
            "No significant bottlenecks detected"
        )

    def test_storage_never_reported(self) -> None:
        requirements = make_requirements(storage=3.0)

        assert identify_bottleneck(requirements) == (
            "No significant bottlenecks detected"
        )

    def test_honours_configured_threshold(self) -> None:
        config = CapacityConfig(warning_threshold=0.3, critical_threshold=0.6)
        requirements = make_requirements(cpu=0.35)

        assert identify_bottleneck(requirements, config) == (
            "Primary bottleneck: CPU (35% utilized)"
        )


# ---------------------------------------------------------------------------
# recommend_scaling
# ---------------------------------------------------------------------------


class TestRecommendScaling:
    """Tests for recommend_scaling()."""

    @pytest.mark.parametrize(
        ("peak", "expected"),
        [
            (0.2, "Current resources are adequate with room for growth."),
            (0.5, "Current resources are adequate with room for growth."),
            (0.6, "Current resources are adequate but approaching capacity."),
            (0.7, "Current resources are adequate but approaching capacity."),
            (0.8, "Consider scaling the highlighted resources soon."),
            (0.9, "Consider scaling the highlighted resources soon."),
            (0.95, "Immediate scaling recommended for highlighted resources."),
        ],
    )
    def test_bands_are_inclusive_at_upper_edge(
        self, peak: float, expected: str
    ) -> None:
        assert recommend_scaling(make_requirements(cpu=peak)) == expected

    def test_storage_does_not_drive_advice(self) -> None:
        requirements = make_requirements(storage=10.0)

        assert recommend_scaling(requirements) == (
            "Current resources are adequate with room for growth."
        )


# ---------------------------------------------------------------------------
# status_counts / overall_status
# ---------------------------------------------------------------------------


class TestOverallStatus:
    """Tests for status_counts() and overall_status()."""

    def test_all_healthy(self) -> None:
        requirements = make_requirements()

        assert status_counts(requirements) == {
            ResourceStatus.HEALTHY: 5,
            ResourceStatus.WARNING: 0,
            ResourceStatus.CRITICAL: 0,
        }
        assert overall_status(requirements) == ResourceStatus.HEALTHY

    def test_warning_wins_over_healthy(self) -> None:
        requirements = make_requirements(statuses={"memory": ResourceStatus.WARNING})
        assert overall_status(requirements) == ResourceStatus.WARNING

    def test_critical_storage_counts(self) -> None:
        requirements = make_requirements(
            statuses={
                "cpu": ResourceStatus.WARNING,
                "storage": ResourceStatus.CRITICAL,
            }
        )

        assert status_counts(requirements)[ResourceStatus.CRITICAL] == 1
        assert overall_status(requirements) == ResourceStatus.CRITICAL
