"""Azure credential provider and SDK client factory.

Builds an authenticated ``AzureSession`` for a tenant/subscription pair.
Credential material is resolved here and never reaches the health checks:

1. Explicit service principal (tenant, client id, client secret)
2. Settings values (AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET)
3. ``DefaultAzureCredential`` when no client secret is available
"""

import logging
from dataclasses import dataclass, field

from azure.core.credentials import TokenCredential
from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.desktopvirtualization import DesktopVirtualizationMgmtClient
from azure.mgmt.monitor import MonitorManagementClient
from azure.mgmt.resource import ResourceManagementClient

from avdcheck.core.config import get_settings
from avdcheck.health.errors import CredentialError

logger = logging.getLogger(__name__)


@dataclass
class AzureSession:
    """Authenticated handle for one subscription. Never persisted."""

    credential: TokenCredential = field(repr=False)
    subscription_id: str
    tenant_id: str | None = None

    def get_desktop_virtualization_client(self) -> DesktopVirtualizationMgmtClient:
        """Get AVD management client."""
        return DesktopVirtualizationMgmtClient(self.credential, self.subscription_id)

    def get_monitor_client(self) -> MonitorManagementClient:
        """Get monitor client for diagnostic settings."""
        return MonitorManagementClient(self.credential, self.subscription_id)

    def get_resource_client(self) -> ResourceManagementClient:
        """Get resource management client."""
        return ResourceManagementClient(self.credential, self.subscription_id)


class AzureCredentialProvider:
    """Produces ``AzureSession`` handles from service principal material."""

    def __init__(
        self,
        tenant_id: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> None:
        settings = get_settings()
        self._tenant_id = tenant_id or settings.azure_tenant_id
        self._client_id = client_id or settings.azure_client_id
        self._client_secret = client_secret or settings.azure_client_secret

    def _resolve_credential(self) -> TokenCredential:
        """Resolve a credential for the configured tenant.

        Raises:
            CredentialError: If a partial service principal is configured
        """
        if self._client_secret:
            if not self._tenant_id or not self._client_id:
                raise CredentialError(
                    "A client secret was supplied without a tenant ID and client ID",
                    details={
                        "tenant_id_configured": bool(self._tenant_id),
                        "client_id_configured": bool(self._client_id),
                    },
                )
            logger.debug(
                f"Using service principal {self._client_id[:8]}... "
                f"for tenant {self._tenant_id}"
            )
            return ClientSecretCredential(
                tenant_id=self._tenant_id,
                client_id=self._client_id,
                client_secret=self._client_secret,
            )

        logger.debug("No client secret configured, using DefaultAzureCredential")
        return DefaultAzureCredential()

    def get_session(self, subscription_id: str | None = None) -> AzureSession:
        """Create a session for a subscription.

        Args:
            subscription_id: Target subscription; defaults to settings

        Returns:
            AzureSession bound to the subscription

        Raises:
            CredentialError: If no subscription or credential can be resolved
        """
        subscription_id = subscription_id or get_settings().azure_subscription_id
        if not subscription_id:
            raise CredentialError(
                "No subscription ID supplied; set AZURE_SUBSCRIPTION_ID or pass one"
            )

        return AzureSession(
            credential=self._resolve_credential(),
            subscription_id=subscription_id,
            tenant_id=self._tenant_id,
        )
