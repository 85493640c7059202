"""Abstract base class for health checks.

A check is a named, stateless validation unit. Its only side effects are
read calls against the resource inventory.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

from avdcheck.health.errors import NotFoundError
from avdcheck.health.models import CheckOutcome, CheckResult

if TYPE_CHECKING:
    from avdcheck.services.inventory import ResourceInventory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseHealthCheck(ABC):
    """Abstract base class for all health checks.

    Subclasses must implement ``evaluate`` to define the check logic.
    """

    def __init__(
        self,
        check_name: str,
        description: str = "",
        advisory: bool = False,
    ):
        """Initialize a health check.

        Args:
            check_name: Unique name for this check, used in results and log lines
            description: What this check verifies
            advisory: Whether a Fail from this check is informational only
        """
        self.check_name = check_name
        self.description = description
        self.advisory = advisory

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.check_name})>"

    @abstractmethod
    async def evaluate(self, inventory: "ResourceInventory") -> CheckResult:
        """Evaluate the check against the inventory.

        Args:
            inventory: Read-only resource inventory for the run

        Returns:
            CheckResult with the check outcome
        """
        pass

    async def _fetch_or_empty(self, fetch: Awaitable[list[T]]) -> list[T]:
        """Await an inventory listing, treating NotFoundError as no resources."""
        try:
            return await fetch
        except NotFoundError as e:
            logger.debug(f"{self.check_name}: {e}")
            return []

    def _result(
        self,
        outcome: CheckOutcome,
        detail: str,
        resources_evaluated: int = 0,
    ) -> CheckResult:
        """Create a CheckResult stamped with this check's name."""
        return CheckResult(
            check_name=self.check_name,
            outcome=outcome,
            detail=detail,
            resources_evaluated=resources_evaluated,
            advisory=self.advisory,
        )

    def passed(self, detail: str, resources_evaluated: int = 0) -> CheckResult:
        return self._result(CheckOutcome.PASS, detail, resources_evaluated)

    def failed(self, detail: str, resources_evaluated: int = 0) -> CheckResult:
        return self._result(CheckOutcome.FAIL, detail, resources_evaluated)


class ExistenceCheck(BaseHealthCheck):
    """Pass when at least one resource of a kind exists.

    Zero resources is the failure condition under test, not an empty pass.
    """

    def __init__(
        self,
        check_name: str,
        resource_label: str,
        description: str = "",
        advisory: bool = False,
    ):
        super().__init__(check_name, description=description, advisory=advisory)
        self.resource_label = resource_label

    @abstractmethod
    async def list_resources(self, inventory: "ResourceInventory") -> list:
        """List the resources whose existence is being verified."""
        pass

    async def evaluate(self, inventory: "ResourceInventory") -> CheckResult:
        resources = await self._fetch_or_empty(self.list_resources(inventory))

        if not resources:
            return self.failed(f"no {self.resource_label}")

        names = ", ".join(r.name for r in resources)
        return self.passed(
            f"Found {len(resources)} {self.resource_label}: {names}",
            resources_evaluated=len(resources),
        )
