"""Shared test helpers for capacity estimator tests."""

from __future__ import annotations

from models import (
    Resource,
    ResourceRequirements,
    ResourceStatus,
    UserResources,
    WorkloadParams,
)


class WorkloadFactory:
    """Factory for WorkloadParams instances."""

    @staticmethod
    def create(
        *,
        requests_per_second: float = 1000,
        metrics_per_request: float = 10,
        unique_metrics_ratio: float = 0.2,
        calculation_complexity: float = 1,
        flush_interval_seconds: float = 10,
        retention_period_days: float = 1,
    ) -> WorkloadParams:
        return WorkloadParams(
            requests_per_second=requests_per_second,
            metrics_per_request=metrics_per_request,
            unique_metrics_ratio=unique_metrics_ratio,
            calculation_complexity=calculation_complexity,
            flush_interval_seconds=flush_interval_seconds,
            retention_period_days=retention_period_days,
        )


class ResourcesFactory:
    """Factory for UserResources instances."""

    @staticmethod
    def create(
        *,
        cpu: float = 1,
        memory: float = 1,
        disk_io: float = 10,
        network_io: float = 10,
        storage: float = 10,
        statsd_instances: int = 1,
        carbon_instances: int = 1,
    ) -> UserResources:
        return UserResources(
            cpu=cpu,
            memory=memory,
            disk_io=disk_io,
            network_io=network_io,
            storage=storage,
            statsd_instances=statsd_instances,
            carbon_instances=carbon_instances,
        )

    @staticmethod
    def roomy(**overrides: float) -> UserResources:
        """Enough headroom that the reference workload is healthy everywhere."""
        values = {
            "cpu": 4,
            "memory": 4,
            "disk_io": 100,
            "network_io": 100,
            "storage": 10,
        }
        values.update(overrides)
        return ResourcesFactory.create(**values)  # type: ignore[arg-type]


def make_resource(
    utilization: float,
    status: ResourceStatus = ResourceStatus.HEALTHY,
    value: float = 1,
    unit: str = "x",
) -> Resource:
    return Resource(value=value, unit=unit, status=status, utilization=utilization)


def make_requirements(
    *,
    cpu: float = 0.1,
    memory: float = 0.1,
    disk_io: float = 0.1,
    network_io: float = 0.1,
    storage: float = 0.1,
    statuses: dict[str, ResourceStatus] | None = None,
) -> ResourceRequirements:
    """Build requirements where only the utilizations (and statuses) matter."""
    statuses = statuses or {}
    utils = {
        "cpu": cpu,
        "memory": memory,
        "disk_io": disk_io,
        "network_io": network_io,
        "storage": storage,
    }
    return ResourceRequirements(
        **{
            name: make_resource(util, statuses.get(name, ResourceStatus.HEALTHY))
            for name, util in utils.items()
        }
    )
