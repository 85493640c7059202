"""Pydantic models for AVD health checks.

Inventory records are validated at the inventory client boundary so that
checks never touch duck-typed SDK objects. Missing SDK fields become
explicit ``None`` values.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class CheckOutcome(str, Enum):
    """Enumeration of possible check outcomes."""

    PASS = "Pass"
    FAIL = "Fail"
    ERROR = "Error"


class ResourceType(str, Enum):
    """Control-plane resource types inspected by the checks."""

    HOST_POOL = "HostPool"
    SESSION_HOST = "SessionHost"
    WORKSPACE = "Workspace"
    SCALING_PLAN = "ScalingPlan"
    MSIX_PACKAGE = "MsixPackage"


class AvailabilityStatus(str, Enum):
    """Normalized session host availability."""

    AVAILABLE = "Available"
    UNAVAILABLE = "Unavailable"
    UNKNOWN = "Unknown"

    @classmethod
    def from_sdk_status(cls, status: str | None) -> "AvailabilityStatus":
        """Map a raw session host status to an availability status.

        The SDK reports many states (Shutdown, NoHeartbeat, Upgrading, ...);
        anything other than Available is treated as unavailable.
        """
        if not status:
            return cls.UNKNOWN
        if status.lower() == "available":
            return cls.AVAILABLE
        return cls.UNAVAILABLE


# ============================================================================
# INVENTORY RECORDS
# ============================================================================


class ResourceRef(BaseModel):
    """Reference to a single control-plane resource."""

    resource_id: str = Field(..., description="Full ARM resource ID")
    name: str = Field(..., description="Short resource name")
    resource_type: ResourceType
    parent_id: str | None = Field(
        None, description="ARM ID of the owning host pool (session hosts only)"
    )

    model_config = {"frozen": True}


class HostPool(BaseModel):
    """AVD host pool."""

    id: str
    name: str
    resource_group: str
    location: str | None = None
    host_pool_type: str | None = None
    load_balancer_type: str | None = None

    model_config = {"frozen": True}

    def to_ref(self) -> ResourceRef:
        return ResourceRef(
            resource_id=self.id,
            name=self.name,
            resource_type=ResourceType.HOST_POOL,
        )


class SessionHostState(BaseModel):
    """Availability and drain state of a session host."""

    availability_status: AvailabilityStatus = AvailabilityStatus.UNKNOWN
    allow_new_session: bool | None = Field(
        None, description="False means drain mode is engaged"
    )
    status_detail: str | None = Field(
        None, description="Raw status string reported by the service"
    )

    model_config = {"frozen": True}

    @property
    def drain_mode(self) -> bool | None:
        """Whether drain mode is on, or None if the service did not say."""
        if self.allow_new_session is None:
            return None
        return not self.allow_new_session


class SessionHost(BaseModel):
    """Session host belonging to exactly one host pool."""

    id: str
    name: str
    host_pool_id: str
    host_pool_name: str
    state: SessionHostState = Field(default_factory=SessionHostState)
    vm_resource_id: str | None = Field(
        None, description="ARM ID of the backing virtual machine"
    )

    model_config = {"frozen": True}

    def to_ref(self) -> ResourceRef:
        return ResourceRef(
            resource_id=self.vm_resource_id or self.id,
            name=self.name,
            resource_type=ResourceType.SESSION_HOST,
            parent_id=self.host_pool_id,
        )


class Workspace(BaseModel):
    """AVD workspace."""

    id: str
    name: str
    location: str | None = None
    application_group_ids: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def to_ref(self) -> ResourceRef:
        return ResourceRef(
            resource_id=self.id,
            name=self.name,
            resource_type=ResourceType.WORKSPACE,
        )


class ScalingPlan(BaseModel):
    """Schedule-driven capacity policy."""

    id: str
    name: str
    location: str | None = None
    host_pool_ids: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class MsixPackage(BaseModel):
    """MSIX app attach package registered on a host pool."""

    id: str
    name: str
    host_pool_name: str | None = None
    display_name: str | None = None
    is_active: bool | None = None

    model_config = {"frozen": True}


class DiagnosticAttachment(BaseModel):
    """Diagnostic settings bound to a resource."""

    resource_id: str
    setting_names: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.setting_names


# ============================================================================
# RESULTS
# ============================================================================


class CheckResult(BaseModel):
    """Result of a single health check. Immutable once produced."""

    check_name: str = Field(..., description="Name of the check that produced this")
    outcome: CheckOutcome
    detail: str = Field("", description="Human-readable description of the result")
    resources_evaluated: int = Field(0, ge=0)
    advisory: bool = Field(
        False, description="A Fail from this check is informational only"
    )
    duration_ms: float = Field(0, description="Execution time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    model_config = {"frozen": True}

    def is_pass(self) -> bool:
        return self.outcome == CheckOutcome.PASS

    def is_fail(self) -> bool:
        return self.outcome == CheckOutcome.FAIL

    def is_error(self) -> bool:
        return self.outcome == CheckOutcome.ERROR

    def is_blocking(self) -> bool:
        """Check if this result should fail a deployment gate."""
        if self.outcome == CheckOutcome.ERROR:
            return True
        return self.outcome == CheckOutcome.FAIL and not self.advisory


class RunSummary(BaseModel):
    """Outcome tallies for a run."""

    pass_count: int = 0
    fail_count: int = 0
    error_count: int = 0

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        return self.pass_count + self.fail_count + self.error_count


class RunReport(BaseModel):
    """Ordered results of one health check run, one entry per registered check."""

    id: str = Field(..., description="Unique identifier for this run")
    subscription_id: str | None = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None
    results: list[CheckResult] = Field(default_factory=list)

    model_config = {"frozen": True}

    def get_result(self, check_name: str) -> CheckResult | None:
        """Get the result for a check by name."""
        for result in self.results:
            if result.check_name == check_name:
                return result
        return None

    def get_blocking_results(self) -> list[CheckResult]:
        """Get all results that should fail a deployment gate."""
        return [r for r in self.results if r.is_blocking()]

    @property
    def is_success(self) -> bool:
        """Check if no blocking failures or errors occurred."""
        return not self.get_blocking_results()

    @property
    def total_duration_ms(self) -> float:
        return sum(r.duration_ms for r in self.results)

    def get_summary(self) -> dict[str, Any]:
        """Get a serializable summary of the report."""
        return {
            "id": self.id,
            "subscription_id": self.subscription_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "passed": sum(1 for r in self.results if r.is_pass()),
            "failed": sum(1 for r in self.results if r.is_fail()),
            "errors": sum(1 for r in self.results if r.is_error()),
            "total": len(self.results),
            "duration_ms": self.total_duration_ms,
            "is_success": self.is_success,
        }
