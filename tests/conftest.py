"""Shared fixtures for capacity estimator tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure the flat modules are importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.helpers import ResourcesFactory, WorkloadFactory  # noqa: E402
from models import UserResources, WorkloadParams  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_capacity_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CAPACITY_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("CAPACITY_"):
            monkeypatch.delenv(key)


@pytest.fixture
def workload() -> WorkloadParams:
    """10k metrics/s with 2k unique: the reference workload."""
    return WorkloadFactory.create()


@pytest.fixture
def resources() -> UserResources:
    """The default single-instance machine."""
    return ResourcesFactory.create()
