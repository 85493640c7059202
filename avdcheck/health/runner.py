"""Health check runner - executes every registered check in a fault boundary.

Checks run concurrently on a bounded pool under one run-scoped deadline.
Any fault raised by a check becomes an ``Error`` result, so the returned
RunReport always holds exactly one result per check, in registration order.
"""

import asyncio
import logging
import re
import time
import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from avdcheck.core.config import get_settings
from avdcheck.health.base import BaseHealthCheck
from avdcheck.health.errors import CheckFault, TransientFetchError
from avdcheck.health.models import CheckOutcome, CheckResult, RunReport

if TYPE_CHECKING:
    from avdcheck.services.inventory import ResourceInventory

logger = logging.getLogger(__name__)

# Names whose assigned values are credential material
SENSITIVE_PATTERNS = [
    "password",
    "secret",
    "token",
    "key",
    "credential",
    "connectionstring",
]

# "client_secret=abc", "AccountKey: abc", but not "KeyError:" or "hp-monkey"
_SECRET_ASSIGNMENT = re.compile(
    r"(?<![\w-])([A-Za-z]*_?(?:" + "|".join(SENSITIVE_PATTERNS) + r"))(\s*[=:]\s*)([^\s;,]+)",
    re.IGNORECASE,
)
_BEARER_TOKEN = re.compile(r"\b(bearer\s+)\S+", re.IGNORECASE)

REDACTED = "[REDACTED]"


def _sanitize_message(message: str) -> str:
    """Redact credential values from an error message, keeping the rest."""
    message = _SECRET_ASSIGNMENT.sub(rf"\1\2{REDACTED}", message)
    return _BEARER_TOKEN.sub(rf"\1{REDACTED}", message)


def _describe_fault(error: BaseException) -> str:
    """Render a fault as '<ExceptionType>: <sanitized message>'."""
    return f"{type(error).__name__}: {_sanitize_message(str(error))}"


class HealthCheckRunner:
    """Runs health checks with per-check fault isolation."""

    def __init__(
        self,
        max_parallel_checks: int | None = None,
        run_timeout_seconds: float | None = None,
    ):
        """Initialize the runner.

        Args:
            max_parallel_checks: Concurrency bound; 1 runs checks sequentially.
            run_timeout_seconds: Deadline for the whole run. Checks still
                pending when it passes are recorded as Error.
        """
        settings = get_settings()
        self.max_parallel_checks = (
            settings.max_parallel_checks if max_parallel_checks is None else max_parallel_checks
        )
        self.run_timeout_seconds = (
            settings.run_timeout_seconds if run_timeout_seconds is None else run_timeout_seconds
        )

        if self.max_parallel_checks < 1:
            raise ValueError("max_parallel_checks must be at least 1")
        if self.run_timeout_seconds <= 0:
            raise ValueError("run_timeout_seconds must be positive")

    async def run(
        self,
        checks: Sequence[BaseHealthCheck],
        inventory: "ResourceInventory",
        subscription_id: str | None = None,
    ) -> RunReport:
        """Run every check against the inventory.

        Args:
            checks: Checks to execute, in registration order
            inventory: Resource inventory for this run
            subscription_id: Subscription being validated, for the report

        Returns:
            RunReport with one result per check, in the order given
        """
        started_at = datetime.utcnow()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.run_timeout_seconds
        semaphore = asyncio.Semaphore(self.max_parallel_checks)

        logger.info(
            f"Running {len(checks)} health checks "
            f"(parallel={self.max_parallel_checks}, timeout={self.run_timeout_seconds}s)"
        )

        results = await asyncio.gather(
            *(
                self._run_single_check(check, inventory, semaphore, deadline)
                for check in checks
            )
        )

        report = RunReport(
            id=str(uuid.uuid4()),
            subscription_id=subscription_id,
            started_at=started_at,
            completed_at=datetime.utcnow(),
            results=list(results),
        )

        summary = report.get_summary()
        logger.info(
            f"Health checks completed: {summary['passed']} passed, "
            f"{summary['failed']} failed, {summary['errors']} errors"
        )
        return report

    def run_sync(
        self,
        checks: Sequence[BaseHealthCheck],
        inventory: "ResourceInventory",
        subscription_id: str | None = None,
    ) -> RunReport:
        """Run checks from synchronous code."""
        return asyncio.run(self.run(checks, inventory, subscription_id))

    async def _run_single_check(
        self,
        check: BaseHealthCheck,
        inventory: "ResourceInventory",
        semaphore: asyncio.Semaphore,
        deadline: float,
    ) -> CheckResult:
        """Run a single check inside the fault boundary, with timing."""
        async with semaphore:
            start = time.perf_counter()
            result = await self._evaluate(check, inventory, deadline)
            duration_ms = (time.perf_counter() - start) * 1000

        logger.debug(
            f"Check {check.check_name} completed: {result.outcome.value} "
            f"({duration_ms:.2f}ms)"
        )
        return result.model_copy(update={"duration_ms": duration_ms})

    async def _evaluate(
        self,
        check: BaseHealthCheck,
        inventory: "ResourceInventory",
        deadline: float,
    ) -> CheckResult:
        if deadline <= asyncio.get_running_loop().time():
            return self._timeout_result(check)

        deadline_scope = asyncio.timeout_at(deadline)
        try:
            async with deadline_scope:
                result = await check.evaluate(inventory)

        except TimeoutError as e:
            if deadline_scope.expired():
                return self._timeout_result(check)
            # Raised by the check itself, e.g. a socket timeout
            return self._fault_result(check, e)

        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            return self._fault_result(check, e)

        except TransientFetchError as e:
            detail = _sanitize_message(str(e))
            logger.warning(f"Check {check.check_name} could not fetch inventory: {detail}")
            return self._error_result(check, detail)

        except Exception as e:
            return self._fault_result(check, e)

        if not isinstance(result, CheckResult):
            fault = CheckFault(
                check.check_name,
                TypeError(f"evaluate returned {type(result).__name__}, not CheckResult"),
            )
            logger.error(f"Check {check.check_name} returned an invalid result")
            return self._error_result(check, str(fault))

        if result.check_name != check.check_name:
            result = result.model_copy(update={"check_name": check.check_name})
        return result

    def _fault_result(self, check: BaseHealthCheck, error: BaseException) -> CheckResult:
        detail = _describe_fault(error)
        logger.error(f"Check {check.check_name} failed with exception: {detail}")
        return self._error_result(check, detail)

    def _timeout_result(self, check: BaseHealthCheck) -> CheckResult:
        logger.warning(
            f"Check {check.check_name} timed out after {self.run_timeout_seconds}s"
        )
        return self._error_result(
            check, f"Check timed out after {self.run_timeout_seconds}s run deadline"
        )

    @staticmethod
    def _error_result(check: BaseHealthCheck, detail: str) -> CheckResult:
        return CheckResult(
            check_name=check.check_name,
            outcome=CheckOutcome.ERROR,
            detail=detail,
            advisory=check.advisory,
        )
