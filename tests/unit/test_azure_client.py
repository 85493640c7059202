"""Tests for the Azure credential provider."""

from unittest.mock import MagicMock, patch

import pytest

from avdcheck.health.errors import CredentialError
from avdcheck.services.azure_client import AzureCredentialProvider, AzureSession


@pytest.fixture(autouse=True)
def clear_azure_env(monkeypatch):
    for var in (
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "AZURE_SUBSCRIPTION_ID",
    ):
        monkeypatch.delenv(var, raising=False)


class TestAzureCredentialProvider:
    """Test suite for credential resolution."""

    @patch("avdcheck.services.azure_client.ClientSecretCredential")
    def test_service_principal_credential(self, mock_credential):
        """Test an explicit service principal produces a ClientSecretCredential."""
        provider = AzureCredentialProvider(
            tenant_id="tenant-1", client_id="client-1", client_secret="secret"
        )

        session = provider.get_session("sub-1")

        mock_credential.assert_called_once_with(
            tenant_id="tenant-1", client_id="client-1", client_secret="secret"
        )
        assert session.credential is mock_credential.return_value
        assert session.subscription_id == "sub-1"
        assert session.tenant_id == "tenant-1"

    @patch("avdcheck.services.azure_client.ClientSecretCredential")
    def test_settings_fallback(self, mock_credential, monkeypatch):
        """Test missing arguments are read from the environment."""
        monkeypatch.setenv("AZURE_TENANT_ID", "env-tenant")
        monkeypatch.setenv("AZURE_CLIENT_ID", "env-client")
        monkeypatch.setenv("AZURE_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "env-sub")

        session = AzureCredentialProvider().get_session()

        assert session.subscription_id == "env-sub"
        mock_credential.assert_called_once_with(
            tenant_id="env-tenant", client_id="env-client", client_secret="env-secret"
        )

    @patch("avdcheck.services.azure_client.DefaultAzureCredential")
    def test_default_credential_without_secret(self, mock_default):
        session = AzureCredentialProvider().get_session("sub-1")

        mock_default.assert_called_once_with()
        assert session.credential is mock_default.return_value

    def test_secret_without_tenant_raises(self):
        provider = AzureCredentialProvider(client_id="client-1", client_secret="secret")

        with pytest.raises(CredentialError) as exc_info:
            provider.get_session("sub-1")

        assert exc_info.value.details["tenant_id_configured"] is False

    def test_missing_subscription_raises(self):
        with pytest.raises(CredentialError, match="subscription"):
            AzureCredentialProvider().get_session()

    def test_secret_not_in_repr(self):
        """Test the session repr never includes the credential."""
        credential = MagicMock()
        credential.__repr__ = lambda self: "SECRET-CREDENTIAL"

        session = AzureSession(credential=credential, subscription_id="sub-1")

        assert "SECRET-CREDENTIAL" not in repr(session)


class TestAzureSession:
    """Test suite for SDK client construction."""

    @patch("avdcheck.services.azure_client.MonitorManagementClient")
    @patch("avdcheck.services.azure_client.ResourceManagementClient")
    @patch("avdcheck.services.azure_client.DesktopVirtualizationMgmtClient")
    def test_clients_bound_to_subscription(self, mock_avd, mock_resource, mock_monitor):
        credential = MagicMock()
        session = AzureSession(credential=credential, subscription_id="sub-1")

        session.get_desktop_virtualization_client()
        session.get_resource_client()
        session.get_monitor_client()

        mock_avd.assert_called_once_with(credential, "sub-1")
        mock_resource.assert_called_once_with(credential, "sub-1")
        mock_monitor.assert_called_once_with(credential, "sub-1")
