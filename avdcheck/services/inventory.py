"""Read-only resource inventory over the AVD control plane.

``ResourceInventory`` is the query surface the health checks depend on.
``AzureResourceInventory`` implements it with the Azure management SDKs and
converts every SDK object into a typed record at this boundary.

The client performs no retries. SDK failures are translated into the
health check error taxonomy:

- 404 responses raise ``NotFoundError`` (a valid, empty result)
- authentication, transport and other HTTP failures raise ``TransientFetchError``
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestError,
)

from avdcheck.health.errors import NotFoundError, TransientFetchError
from avdcheck.health.models import (
    AvailabilityStatus,
    DiagnosticAttachment,
    HostPool,
    MsixPackage,
    ResourceRef,
    ResourceType,
    ScalingPlan,
    SessionHost,
    SessionHostState,
    Workspace,
)
from avdcheck.services.azure_client import AzureSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ARM resource types for top-level AVD objects
ARM_RESOURCE_TYPES = {
    ResourceType.HOST_POOL: "Microsoft.DesktopVirtualization/hostpools",
    ResourceType.WORKSPACE: "Microsoft.DesktopVirtualization/workspaces",
    ResourceType.SCALING_PLAN: "Microsoft.DesktopVirtualization/scalingplans",
}


class ResourceInventory(ABC):
    """Read-only query surface used by health checks."""

    @abstractmethod
    async def list_host_pools(self) -> list[HostPool]:
        ...

    @abstractmethod
    async def list_session_hosts(self, host_pool: HostPool) -> list[SessionHost]:
        ...

    @abstractmethod
    async def list_resources_by_type(
        self, resource_type: ResourceType
    ) -> list[ResourceRef]:
        ...

    @abstractmethod
    async def get_diagnostic_attachment(
        self, resource: ResourceRef
    ) -> DiagnosticAttachment | None:
        ...

    @abstractmethod
    async def list_scaling_plans(self) -> list[ScalingPlan]:
        ...

    @abstractmethod
    async def list_workspaces(self) -> list[Workspace]:
        ...

    @abstractmethod
    async def list_image_packages(self) -> list[MsixPackage]:
        ...


def _enum_value(value: Any) -> str | None:
    """Return the string value of an SDK enum, or the value itself."""
    if value is None:
        return None
    return str(getattr(value, "value", value))


def _resource_group_from_id(resource_id: str) -> str:
    """Extract the resource group from an ARM ID.

    Format: /subscriptions/{sub}/resourceGroups/{rg}/providers/...
    """
    parts = resource_id.split("/")
    for i, part in enumerate(parts):
        if part.lower() == "resourcegroups" and i + 1 < len(parts):
            return parts[i + 1]
    return ""


def _short_name(name: str | None) -> str:
    """Strip the parent prefix from child resource names ("pool/host")."""
    if not name:
        return ""
    return name.rsplit("/", 1)[-1]


class AzureResourceInventory(ResourceInventory):
    """Resource inventory backed by the Azure management SDKs."""

    def __init__(self, session: AzureSession):
        self._session = session
        self._avd_client = session.get_desktop_virtualization_client()
        self._monitor_client = session.get_monitor_client()
        self._resource_client = session.get_resource_client()

    async def _fetch(self, description: str, call: Callable[[], Iterable[T]]) -> list[T]:
        """Run a blocking SDK listing in a worker thread and translate errors."""

        def _materialize() -> list[T]:
            return list(call())

        try:
            return await asyncio.to_thread(_materialize)
        except ResourceNotFoundError as e:
            raise NotFoundError(f"No {description} found", details={"error": str(e)}) from e
        except ClientAuthenticationError as e:
            raise TransientFetchError(
                f"Authentication failed while listing {description}",
                details={"error_type": type(e).__name__},
            ) from e
        except ServiceRequestError as e:
            raise TransientFetchError(
                f"Could not reach Azure while listing {description}",
                details={"error_type": type(e).__name__},
            ) from e
        except HttpResponseError as e:
            raise TransientFetchError(
                f"Azure returned {e.status_code} while listing {description}",
                details={"status_code": e.status_code},
            ) from e

    # =========================================================================
    # Host pools and session hosts
    # =========================================================================

    async def list_host_pools(self) -> list[HostPool]:
        pools = await self._fetch("host pools", self._avd_client.host_pools.list)
        logger.debug(f"Listed {len(pools)} host pools in {self._session.subscription_id}")
        return [
            HostPool(
                id=pool.id,
                name=pool.name,
                resource_group=_resource_group_from_id(pool.id),
                location=pool.location,
                host_pool_type=_enum_value(getattr(pool, "host_pool_type", None)),
                load_balancer_type=_enum_value(getattr(pool, "load_balancer_type", None)),
            )
            for pool in pools
        ]

    async def list_session_hosts(self, host_pool: HostPool) -> list[SessionHost]:
        hosts = await self._fetch(
            f"session hosts in {host_pool.name}",
            lambda: self._avd_client.session_hosts.list(
                resource_group_name=host_pool.resource_group,
                host_pool_name=host_pool.name,
            ),
        )
        records = []
        for host in hosts:
            status = _enum_value(getattr(host, "status", None))
            records.append(
                SessionHost(
                    id=host.id,
                    name=_short_name(host.name),
                    host_pool_id=host_pool.id,
                    host_pool_name=host_pool.name,
                    state=SessionHostState(
                        availability_status=AvailabilityStatus.from_sdk_status(status),
                        allow_new_session=getattr(host, "allow_new_session", None),
                        status_detail=status,
                    ),
                    vm_resource_id=getattr(host, "resource_id", None),
                )
            )
        return records

    async def _list_all_session_hosts(self) -> list[SessionHost]:
        hosts: list[SessionHost] = []
        for pool in await self.list_host_pools():
            try:
                hosts.extend(await self.list_session_hosts(pool))
            except NotFoundError:
                logger.debug(f"Host pool {pool.name} has no session hosts")
        return hosts

    # =========================================================================
    # Generic resource listing and diagnostics
    # =========================================================================

    async def list_resources_by_type(
        self, resource_type: ResourceType
    ) -> list[ResourceRef]:
        if resource_type == ResourceType.SESSION_HOST:
            return [host.to_ref() for host in await self._list_all_session_hosts()]

        if resource_type == ResourceType.MSIX_PACKAGE:
            return [
                ResourceRef(
                    resource_id=package.id,
                    name=package.name,
                    resource_type=ResourceType.MSIX_PACKAGE,
                )
                for package in await self.list_image_packages()
            ]

        arm_type = ARM_RESOURCE_TYPES[resource_type]
        resources = await self._fetch(
            f"{resource_type.value} resources",
            lambda: self._resource_client.resources.list(
                filter=f"resourceType eq '{arm_type}'"
            ),
        )
        return [
            ResourceRef(resource_id=r.id, name=r.name, resource_type=resource_type)
            for r in resources
        ]

    async def get_diagnostic_attachment(
        self, resource: ResourceRef
    ) -> DiagnosticAttachment | None:
        def _list_settings() -> Iterable[Any]:
            response = self._monitor_client.diagnostic_settings.list(
                resource_uri=resource.resource_id
            )
            # Older SDK versions wrap the settings in a collection object
            return getattr(response, "value", None) or response

        try:
            settings = await self._fetch(
                f"diagnostic settings for {resource.name}", _list_settings
            )
        except NotFoundError:
            return None

        if not settings:
            return None
        return DiagnosticAttachment(
            resource_id=resource.resource_id,
            setting_names=[s.name for s in settings if getattr(s, "name", None)],
        )

    # =========================================================================
    # Workspaces, scaling plans and packages
    # =========================================================================

    async def list_scaling_plans(self) -> list[ScalingPlan]:
        plans = await self._fetch(
            "scaling plans", self._avd_client.scaling_plans.list_by_subscription
        )
        return [
            ScalingPlan(
                id=plan.id,
                name=plan.name,
                location=plan.location,
                host_pool_ids=[
                    ref.host_pool_arm_path
                    for ref in (getattr(plan, "host_pool_references", None) or [])
                    if getattr(ref, "host_pool_arm_path", None)
                ],
            )
            for plan in plans
        ]

    async def list_workspaces(self) -> list[Workspace]:
        workspaces = await self._fetch(
            "workspaces", self._avd_client.workspaces.list_by_subscription
        )
        return [
            Workspace(
                id=ws.id,
                name=ws.name,
                location=ws.location,
                application_group_ids=list(
                    getattr(ws, "application_group_references", None) or []
                ),
            )
            for ws in workspaces
        ]

    async def list_image_packages(self) -> list[MsixPackage]:
        packages: list[MsixPackage] = []
        for pool in await self.list_host_pools():
            try:
                pool_packages = await self._fetch(
                    f"MSIX packages in {pool.name}",
                    lambda pool=pool: self._avd_client.msix_packages.list(
                        resource_group_name=pool.resource_group,
                        host_pool_name=pool.name,
                    ),
                )
            except NotFoundError:
                continue
            packages.extend(
                MsixPackage(
                    id=package.id,
                    name=_short_name(package.name),
                    host_pool_name=pool.name,
                    display_name=getattr(package, "display_name", None),
                    is_active=getattr(package, "is_active", None),
                )
                for package in pool_packages
            )
        return packages
