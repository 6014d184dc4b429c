"""Tests for Kubernetes event utilities."""

from __future__ import annotations

from unittest.mock import patch

from vault_operator.utils.events import (
    emit_approle_exported,
    emit_cleanup_failed,
    emit_event,
    emit_finalizer_removed,
    emit_reconcile_failed,
    emit_synchronized,
    emit_vault_initialized,
    emit_vault_unsealed,
)

BODY = {
    "apiVersion": "vault.ops.community.dev/v1alpha1",
    "kind": "AppRole",
    "metadata": {"name": "test-resource", "namespace": "default"},
}


class TestEmitEvent:
    """Test cases for emit_event function."""

    @patch("vault_operator.utils.events.kopf.event")
    def test_emit_event_normal(self, mock_event):
        """Test emitting normal event."""
        emit_event(BODY, "TestReason", "Test message")

        mock_event.assert_called_once_with(
            BODY,
            reason="TestReason",
            message="Test message",
            type="Normal",
        )

    @patch("vault_operator.utils.events.kopf.event")
    def test_emit_event_warning(self, mock_event):
        """Test emitting warning event."""
        emit_event(BODY, "ErrorReason", "Error occurred", type_="Warning")

        mock_event.assert_called_once_with(
            BODY,
            reason="ErrorReason",
            message="Error occurred",
            type="Warning",
        )


class TestLifecycleEvents:
    """Test cases for lifecycle events."""

    @patch("vault_operator.utils.events.kopf.event")
    def test_emit_reconcile_failed(self, mock_event):
        """Test emitting reconcile failed event."""
        emit_reconcile_failed(BODY, "Failed to enable auth method")

        call_args = mock_event.call_args
        assert call_args[1]["reason"] == "ReconcileFailed"
        assert call_args[1]["type"] == "Warning"

    @patch("vault_operator.utils.events.kopf.event")
    def test_emit_synchronized(self, mock_event):
        """Test emitting synchronized event."""
        emit_synchronized(BODY, "Sync")

        call_args = mock_event.call_args
        assert call_args[1]["reason"] == "Synchronized"
        assert call_args[1]["type"] == "Normal"

    @patch("vault_operator.utils.events.kopf.event")
    def test_emit_cleanup_events(self, mock_event):
        """Test emitting finalizer removal and cleanup failure events."""
        emit_finalizer_removed(BODY)
        emit_cleanup_failed(BODY, "Cleanup failed")

        reasons = [call[1]["reason"] for call in mock_event.call_args_list]
        assert reasons == ["FinalizerRemoved", "CleanupFailed"]

    @patch("vault_operator.utils.events.kopf.event")
    def test_emit_bootstrap_events(self, mock_event):
        """Test emitting initialization and unseal events."""
        emit_vault_initialized(BODY)
        emit_vault_unsealed(BODY)

        reasons = [call[1]["reason"] for call in mock_event.call_args_list]
        assert reasons == ["VaultInitialized", "VaultUnsealed"]

    @patch("vault_operator.utils.events.kopf.event")
    def test_emit_approle_exported(self, mock_event):
        """Test emitting AppRole exported event."""
        emit_approle_exported(BODY, "ns-b", "approle-test-resource-secret")

        call_args = mock_event.call_args
        assert call_args[1]["reason"] == "AppRoleExported"
        assert "ns-b/approle-test-resource-secret" in call_args[1]["message"]
