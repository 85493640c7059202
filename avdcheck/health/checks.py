"""Health check implementations and the check registry.

Each check is independent of the others: it reads from the inventory and
returns one CheckResult. A check with nothing to evaluate passes with
``resources_evaluated=0``, except the existence checks, where finding
nothing is the failure under test.
"""

import logging
from typing import TYPE_CHECKING

from avdcheck.health.base import BaseHealthCheck, ExistenceCheck
from avdcheck.health.models import (
    AvailabilityStatus,
    CheckResult,
    ResourceRef,
    ResourceType,
    SessionHost,
)

if TYPE_CHECKING:
    from avdcheck.services.inventory import ResourceInventory

logger = logging.getLogger(__name__)

# Resource types that must carry diagnostic settings
DIAGNOSTIC_RESOURCE_TYPES = [
    ResourceType.HOST_POOL,
    ResourceType.SESSION_HOST,
    ResourceType.WORKSPACE,
]


async def _list_all_session_hosts(
    check: BaseHealthCheck, inventory: "ResourceInventory"
) -> list[SessionHost]:
    """List session hosts across every host pool."""
    hosts: list[SessionHost] = []
    for pool in await check._fetch_or_empty(inventory.list_host_pools()):
        hosts.extend(await check._fetch_or_empty(inventory.list_session_hosts(pool)))
    return hosts


# ============================================================================
# EXISTENCE CHECKS
# ============================================================================


class HostPoolExistenceCheck(ExistenceCheck):
    """Verify at least one host pool is deployed."""

    def __init__(self):
        super().__init__(
            check_name="HostPoolExistence",
            resource_label="host pools",
            description="Verify at least one host pool exists in the subscription",
        )

    async def list_resources(self, inventory: "ResourceInventory") -> list:
        return await inventory.list_host_pools()


class ScalingPlanExistenceCheck(ExistenceCheck):
    """Verify at least one scaling plan is deployed."""

    def __init__(self):
        super().__init__(
            check_name="ScalingPlanExistence",
            resource_label="scaling plans",
            description="Verify at least one scaling plan exists in the subscription",
        )

    async def list_resources(self, inventory: "ResourceInventory") -> list:
        return await inventory.list_scaling_plans()


class WorkspaceExistenceCheck(ExistenceCheck):
    """Verify at least one workspace is deployed."""

    def __init__(self):
        super().__init__(
            check_name="WorkspaceExistence",
            resource_label="workspaces",
            description="Verify at least one workspace exists in the subscription",
        )

    async def list_resources(self, inventory: "ResourceInventory") -> list:
        return await inventory.list_workspaces()


class ImagePackageExistenceCheck(ExistenceCheck):
    """Verify at least one MSIX image package is registered.

    Estates that do not use MSIX app attach are valid, so a Fail here is
    advisory and does not block a deployment gate.
    """

    def __init__(self):
        super().__init__(
            check_name="ImagePackageExistence",
            resource_label="image packages",
            description="Verify at least one MSIX app attach package is registered",
            advisory=True,
        )

    async def list_resources(self, inventory: "ResourceInventory") -> list:
        return await inventory.list_image_packages()


# ============================================================================
# PER-RESOURCE CHECKS
# ============================================================================


class SessionHostExistenceCheck(BaseHealthCheck):
    """Verify every host pool has at least one session host."""

    def __init__(self):
        super().__init__(
            check_name="SessionHostExistence",
            description="Verify each host pool contains at least one session host",
        )

    async def evaluate(self, inventory: "ResourceInventory") -> CheckResult:
        pools = await self._fetch_or_empty(inventory.list_host_pools())
        if not pools:
            return self.passed("No host pools found; nothing to inspect")

        empty_pools = []
        total_hosts = 0
        for pool in pools:
            hosts = await self._fetch_or_empty(inventory.list_session_hosts(pool))
            total_hosts += len(hosts)
            if not hosts:
                empty_pools.append(pool.name)

        if empty_pools:
            return self.failed(
                f"Host pools with no session hosts: {', '.join(empty_pools)}",
                resources_evaluated=len(pools),
            )

        return self.passed(
            f"All {len(pools)} host pools have session hosts ({total_hosts} total)",
            resources_evaluated=len(pools),
        )


class DiagnosticsCoverageCheck(BaseHealthCheck):
    """Verify diagnostic settings are attached to pools, hosts and workspaces.

    A missing attachment is a finding, not an inventory error.
    """

    def __init__(self):
        super().__init__(
            check_name="DiagnosticsCoverage",
            description="Verify diagnostic settings are configured on AVD resources",
        )

    async def evaluate(self, inventory: "ResourceInventory") -> CheckResult:
        resources: list[ResourceRef] = []
        for resource_type in DIAGNOSTIC_RESOURCE_TYPES:
            resources.extend(
                await self._fetch_or_empty(inventory.list_resources_by_type(resource_type))
            )

        if not resources:
            return self.passed("No host pools, session hosts or workspaces found")

        missing = []
        for resource in resources:
            attachment = await inventory.get_diagnostic_attachment(resource)
            if attachment is None or attachment.is_empty:
                missing.append(resource.name)

        if missing:
            return self.failed(
                f"Resources without diagnostic settings: {', '.join(missing)}",
                resources_evaluated=len(resources),
            )

        return self.passed(
            f"All {len(resources)} resources have diagnostic settings",
            resources_evaluated=len(resources),
        )


class HostAvailabilityCheck(BaseHealthCheck):
    """Verify every session host reports Available."""

    def __init__(self):
        super().__init__(
            check_name="HostAvailability",
            description="Verify all session hosts are available for connections",
        )

    async def evaluate(self, inventory: "ResourceInventory") -> CheckResult:
        hosts = await _list_all_session_hosts(self, inventory)
        if not hosts:
            return self.passed("No session hosts found; nothing to inspect")

        unavailable = [
            f"{host.name} ({host.state.status_detail or host.state.availability_status.value})"
            for host in hosts
            if host.state.availability_status != AvailabilityStatus.AVAILABLE
        ]

        if unavailable:
            return self.failed(
                f"Unavailable session hosts: {', '.join(unavailable)}",
                resources_evaluated=len(hosts),
            )

        return self.passed(
            f"All {len(hosts)} session hosts are available",
            resources_evaluated=len(hosts),
        )


class HostDrainModeCheck(BaseHealthCheck):
    """Report the drain mode of every session host.

    Drain mode is an operational state, so this check always passes.
    """

    def __init__(self):
        super().__init__(
            check_name="HostDrainMode",
            description="Report which session hosts are in drain mode",
        )

    @staticmethod
    def _describe(host: SessionHost) -> str:
        drain_mode = host.state.drain_mode
        if drain_mode is None:
            return f"{host.name}: drain mode UNKNOWN"
        return f"{host.name}: drain mode {'ON' if drain_mode else 'OFF'}"

    async def evaluate(self, inventory: "ResourceInventory") -> CheckResult:
        hosts = await _list_all_session_hosts(self, inventory)
        if not hosts:
            return self.passed("No session hosts found; nothing to inspect")

        return self.passed(
            "; ".join(self._describe(host) for host in hosts),
            resources_evaluated=len(hosts),
        )


# ============================================================================
# REGISTRY
# ============================================================================

CHECK_CLASSES: list[type[BaseHealthCheck]] = [
    HostPoolExistenceCheck,
    SessionHostExistenceCheck,
    DiagnosticsCoverageCheck,
    ScalingPlanExistenceCheck,
    WorkspaceExistenceCheck,
    ImagePackageExistenceCheck,
    HostAvailabilityCheck,
    HostDrainModeCheck,
]


def get_all_checks() -> list[BaseHealthCheck]:
    """Get fresh instances of every registered check, in registration order."""
    return [check_class() for check_class in CHECK_CLASSES]


def get_checks(names: list[str] | None = None) -> list[BaseHealthCheck]:
    """Get registered checks by name, preserving registration order.

    Args:
        names: Check names to select. If None, all checks are returned.

    Returns:
        List of check instances

    Raises:
        ValueError: If an unknown check name is requested
    """
    checks = get_all_checks()
    if names is None:
        return checks

    known = {check.check_name for check in checks}
    unknown = [name for name in names if name not in known]
    if unknown:
        raise ValueError(
            f"Unknown check(s): {', '.join(unknown)}. "
            f"Available checks: {', '.join(sorted(known))}"
        )

    wanted = set(names)
    return [check for check in checks if check.check_name in wanted]
