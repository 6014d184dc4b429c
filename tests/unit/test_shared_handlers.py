"""Tests for shared handler utilities."""

from __future__ import annotations

import functools
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import kopf
import pytest

from vault_operator.constants import ERROR_REQUEUE_SECONDS, FINALIZER_SECRET, KIND_SECRET, PLURAL_SECRET
from vault_operator.handlers.base import ReconcileResult
from vault_operator.handlers.secret import SecretReconciler, handle_secret_delete, handle_secret_event
from vault_operator.handlers.shared import needs_reconcile, requeue_due, run_reconcile
from vault_operator.utils.conditions import set_ready_condition
from vault_operator.utils.errors import OperationFailedError, TransportError

from conftest import add_vault_server, make_object

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _status(ready: bool, seconds_ago: int) -> dict:
    return {
        "lastUpdateTime": (NOW - timedelta(seconds=seconds_ago)).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "conditions": set_ready_condition([], ready, "msg"),
    }


class TestNeedsReconcile:
    """Test cases for needs_reconcile function."""

    def test_missing_finalizer(self):
        """Test a fresh object needs its finalizer."""
        assert needs_reconcile("ADDED", {"generation": 1}, {}, FINALIZER_SECRET) is True

    def test_deleting(self):
        """Test a deleting object is left to the delete handler."""
        meta = {"generation": 1, "finalizers": [FINALIZER_SECRET], "deletionTimestamp": "2025-01-01T00:00:00Z"}
        assert needs_reconcile("MODIFIED", meta, {"observedGeneration": 1}, FINALIZER_SECRET) is False

    def test_new_generation(self):
        """Test a spec change is picked up."""
        meta = {"generation": 2, "finalizers": [FINALIZER_SECRET]}
        assert needs_reconcile("MODIFIED", meta, {"observedGeneration": 1}, FINALIZER_SECRET) is True

    def test_caught_up(self):
        """Test a status-only update does not loop."""
        meta = {"generation": 2, "finalizers": [FINALIZER_SECRET]}
        assert needs_reconcile("MODIFIED", meta, {"observedGeneration": 2}, FINALIZER_SECRET) is False

    def test_deleted_event(self):
        """Test the final DELETED event is ignored."""
        assert needs_reconcile("DELETED", {"generation": 1}, {}, FINALIZER_SECRET) is False


class TestRequeueDue:
    """Test cases for requeue_due function."""

    def test_never_written(self):
        """Test an object without status is due immediately."""
        assert requeue_due({}, now=NOW) is True

    def test_success_waits_long_interval(self):
        """Test a Ready object waits five minutes."""
        assert requeue_due(_status(True, 120), now=NOW) is False
        assert requeue_due(_status(True, 300), now=NOW) is True

    def test_failure_waits_short_interval(self):
        """Test a failed object is retried after a minute."""
        assert requeue_due(_status(False, 30), now=NOW) is False
        assert requeue_due(_status(False, 60), now=NOW) is True


class TestRunReconcile:
    """Test cases for run_reconcile function."""

    @patch("vault_operator.handlers.shared.KubernetesObjectStore")
    def test_runs_reconciler_with_fresh_store(self, mock_store_cls):
        """Test a new store and reconciler are built per call."""
        reconciler_cls = MagicMock()
        reconciler_cls.return_value.reconcile.return_value = ReconcileResult(300)

        result = run_reconcile(reconciler_cls, "default", "app")

        reconciler_cls.assert_called_once_with(mock_store_cls.return_value)
        reconciler_cls.return_value.reconcile.assert_called_once_with("default", "app")
        assert result == ReconcileResult(300)

    @patch("vault_operator.handlers.shared.KubernetesObjectStore")
    def test_failure_raises_temporary_error(self, mock_store_cls):
        """Test a failed pass asks kopf to retry after the requested delay."""
        error = TransportError("connection refused")
        reconciler_cls = MagicMock()
        reconciler_cls.return_value.kind = "Secret"
        reconciler_cls.return_value.reconcile.return_value = ReconcileResult(60, error)

        with pytest.raises(kopf.TemporaryError) as exc_info:
            run_reconcile(reconciler_cls, "default", "app")

        assert exc_info.value.delay == 60
        assert "connection refused" in str(exc_info.value)


class TestSecretHandlers:
    """Test cases for the Secret kopf entry points."""

    SPEC = {"vaultOperator": {"name": "vault"}, "mountPath": "secret", "path": "app", "name": "db", "data": {}}

    @pytest.fixture(autouse=True)
    def wired(self, store, vault):
        """Route the handlers to the in-memory store and Vault."""
        reconciler = functools.partial(SecretReconciler, provider_factory=lambda endpoint: vault)
        with patch("vault_operator.handlers.shared.KubernetesObjectStore", return_value=store), patch(
            "vault_operator.handlers.secret.SecretReconciler", reconciler
        ):
            yield

    def _add_secret(self, store, deleting=False):
        store.add(
            PLURAL_SECRET,
            make_object(KIND_SECRET, "app", self.SPEC, finalizers=[FINALIZER_SECRET], deleting=deleting),
        )

    def test_failed_cleanup_is_retried(self, store, vault):
        """Test a failed Vault delete keeps the finalizer and schedules a retry."""
        add_vault_server(store)
        self._add_secret(store, deleting=True)
        vault.kv[("secret", "app/db")] = {"user": "admin"}
        vault.fail["kv_v2_delete"] = TransportError("connection refused")

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handle_secret_delete(namespace="default", name="app")

        assert exc_info.value.delay == ERROR_REQUEUE_SECONDS
        assert store.stored(PLURAL_SECRET, "default", "app")["metadata"]["finalizers"] == [FINALIZER_SECRET]
        assert ("secret", "app/db") in vault.kv

    def test_cleanup_releases_object(self, store, vault):
        """Test a successful delete removes the secret and the finalizer."""
        add_vault_server(store)
        self._add_secret(store, deleting=True)
        vault.kv[("secret", "app/db")] = {"user": "admin"}

        handle_secret_delete(namespace="default", name="app")

        assert ("secret", "app/db") not in vault.kv
        assert "finalizers" not in store.stored(PLURAL_SECRET, "default", "app")["metadata"]

    def test_unresolvable_server_during_deletion(self, store, vault):
        """Test a missing server delays the deletion retry and its status write does not re-trigger."""
        self._add_secret(store, deleting=True)

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handle_secret_delete(namespace="default", name="app")

        assert exc_info.value.delay == ERROR_REQUEUE_SECONDS
        stored = store.stored(PLURAL_SECRET, "default", "app")
        assert stored["status"]["synchronized"] == "false"
        assert needs_reconcile("MODIFIED", stored["metadata"], stored["status"], FINALIZER_SECRET) is False

    def test_failed_sync_raises(self, store, vault):
        """Test a failed write surfaces as a temporary error."""
        add_vault_server(store)
        self._add_secret(store)
        vault.fail["kv_v2_write"] = OperationFailedError("permission denied", status_code=403)

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handle_secret_event(namespace="default", name="app")

        assert exc_info.value.delay == ERROR_REQUEUE_SECONDS
        assert "permission denied" in str(exc_info.value)
