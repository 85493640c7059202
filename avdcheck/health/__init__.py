"""Health check engine for AVD deployments.

Validates that host pools, session hosts, workspaces, scaling plans and
MSIX packages exist, that diagnostic settings are attached, and that
session hosts are available.

   >>> from avdcheck.health import HealthCheckRunner, get_all_checks
   >>> runner = HealthCheckRunner(max_parallel_checks=4)
   >>> report = await runner.run(get_all_checks(), inventory)
"""

from avdcheck.health.base import BaseHealthCheck, ExistenceCheck
from avdcheck.health.checks import (
    DiagnosticsCoverageCheck,
    HostAvailabilityCheck,
    HostDrainModeCheck,
    HostPoolExistenceCheck,
    ImagePackageExistenceCheck,
    ScalingPlanExistenceCheck,
    SessionHostExistenceCheck,
    WorkspaceExistenceCheck,
    get_all_checks,
    get_checks,
)
from avdcheck.health.errors import (
    CheckFault,
    CredentialError,
    HealthCheckError,
    NotFoundError,
    TransientFetchError,
)
from avdcheck.health.models import (
    CheckOutcome,
    CheckResult,
    RunReport,
    RunSummary,
)
from avdcheck.health.reports import HealthReporter, ReportGenerator, generate_report, summarize
from avdcheck.health.runner import HealthCheckRunner

__all__ = [
    # Base classes
    "BaseHealthCheck",
    "ExistenceCheck",
    # Checks
    "HostPoolExistenceCheck",
    "SessionHostExistenceCheck",
    "DiagnosticsCoverageCheck",
    "ScalingPlanExistenceCheck",
    "WorkspaceExistenceCheck",
    "ImagePackageExistenceCheck",
    "HostAvailabilityCheck",
    "HostDrainModeCheck",
    "get_all_checks",
    "get_checks",
    # Errors
    "HealthCheckError",
    "TransientFetchError",
    "NotFoundError",
    "CheckFault",
    "CredentialError",
    # Models
    "CheckOutcome",
    "CheckResult",
    "RunReport",
    "RunSummary",
    # Orchestration and reporting
    "HealthCheckRunner",
    "HealthReporter",
    "ReportGenerator",
    "generate_report",
    "summarize",
]
