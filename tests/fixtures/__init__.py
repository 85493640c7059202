"""Test fixtures for AVD health checks."""

from .inventory import (
    SUBSCRIPTION_ID,
    FakeInventory,
    make_host,
    make_package,
    make_pool,
    make_scaling_plan,
    make_workspace,
)

__all__ = [
    "SUBSCRIPTION_ID",
    "FakeInventory",
    "make_host",
    "make_package",
    "make_pool",
    "make_scaling_plan",
    "make_workspace",
]
