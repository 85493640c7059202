"""Shared fixtures for health check tests."""

import pytest

from avdcheck.core.config import get_settings
from tests.fixtures.inventory import (
    FakeInventory,
    make_host,
    make_package,
    make_pool,
    make_scaling_plan,
    make_workspace,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def empty_inventory():
    """Inventory with no resources at all."""
    return FakeInventory()


@pytest.fixture
def healthy_inventory():
    """Fully deployed estate: every check should pass."""
    pool = make_pool("hp-prod")
    hosts = [make_host(pool, f"avd-prod-{i}") for i in range(2)]
    workspace = make_workspace("ws-prod")
    return FakeInventory(
        host_pools=[pool],
        session_hosts=hosts,
        workspaces=[workspace],
        scaling_plans=[make_scaling_plan("sp-weekday")],
        packages=[make_package(pool, "office-apps")],
        diagnostics={pool.id, workspace.id, *(h.id for h in hosts)},
    )


@pytest.fixture
def mixed_inventory():
    """Two pools: one healthy with three hosts, one empty without diagnostics.

    One scaling plan, no workspaces and no image packages.
    """
    covered = make_pool("hp-covered")
    bare = make_pool("hp-bare")
    hosts = [make_host(covered, f"avd-covered-{i}") for i in range(3)]
    return FakeInventory(
        host_pools=[covered, bare],
        session_hosts=hosts,
        scaling_plans=[make_scaling_plan("sp-weekday")],
        diagnostics={covered.id, *(h.id for h in hosts)},
    )
