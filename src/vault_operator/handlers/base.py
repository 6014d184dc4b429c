"""Base reconciler with the lifecycle shared by all CRD kinds."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from .. import metrics
from ..builders.server import OperatorClient, ProviderFactory, create_vault_provider, resolve_operator_client
from ..constants import CONTROLLER_NAME, DEFAULT_REQUEUE_SECONDS, ERROR_REQUEUE_SECONDS
from ..logging import log_resource_event
from ..services.kubernetes.base import ObjectStore
from ..tracing import set_span_status, trace_span
from ..utils.conditions import is_ready
from ..utils.errors import NotFoundError, VaultOperatorError, sanitize_exception
from ..utils.events import (
    emit_cleanup_failed,
    emit_finalizer_removed,
    emit_reconcile_failed,
    emit_synchronized,
)
from ..utils.status import write_status


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation: when to come back, and what went wrong."""

    requeue_after: float = 0
    error: Exception | None = None


def has_finalizer(obj: dict[str, Any], finalizer: str) -> bool:
    return finalizer in (obj.get("metadata", {}).get("finalizers") or [])


def add_finalizer(store: ObjectStore, plural: str, obj: dict[str, Any], finalizer: str) -> None:
    """Merge-patch finalizer into the object's finalizer list."""
    meta = obj.get("metadata", {})
    finalizers = list(meta.get("finalizers") or [])
    if finalizer in finalizers:
        return
    finalizers.append(finalizer)
    store.patch_object(plural, meta.get("namespace"), meta.get("name"), {"metadata": {"finalizers": finalizers}})


def remove_finalizer(store: ObjectStore, plural: str, obj: dict[str, Any], finalizer: str) -> None:
    """Merge-patch finalizer out of the object's finalizer list."""
    meta = obj.get("metadata", {})
    finalizers = list(meta.get("finalizers") or [])
    if finalizer not in finalizers:
        return
    finalizers.remove(finalizer)
    store.patch_object(
        plural,
        meta.get("namespace"),
        meta.get("name"),
        {"metadata": {"finalizers": finalizers if finalizers else None}},
    )


class BaseReconciler:
    """Base class for per-kind reconcilers.

    One invocation handles one object: resolve the referenced server, branch
    on deletion, ensure the finalizer, run the kind body and record the
    outcome in status. Subclasses provide ``sync`` and ``delete_external``.
    """

    kind = ""
    plural = ""
    finalizer = ""

    def __init__(self, store: ObjectStore, provider_factory: ProviderFactory = create_vault_provider):
        """Initialize the reconciler.

        Args:
            store: Object store for desired-state and credential objects
            provider_factory: Builds a Vault provider for an endpoint
        """
        self.store = store
        self.provider_factory = provider_factory
        self.logger = logging.getLogger(self.__class__.__module__)

    # Logging helpers

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message."""
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            **kwargs,
        )

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        ctx = self._get_resource_context(meta)
        log_data = kwargs.copy()

        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__

        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=logging.ERROR,
            **log_data,
        )

    # Kind hooks

    def resolve(self, obj: dict[str, Any]) -> OperatorClient | None:
        """Resolve the Vault server this object targets."""
        return resolve_operator_client(
            self.store,
            obj.get("spec", {}),
            obj.get("metadata", {}).get("namespace", "default"),
            provider_factory=self.provider_factory,
        )

    def sync(self, obj: dict[str, Any], client: OperatorClient | None) -> str:
        """Converge Vault towards the object's spec.

        Returns:
            Status message describing the success
        """
        raise NotImplementedError

    def delete_external(self, obj: dict[str, Any], client: OperatorClient | None) -> None:
        """Remove what this object created in Vault."""
        raise NotImplementedError

    def failure_message(self, obj: dict[str, Any], error: Exception) -> str:
        return sanitize_exception(error)

    def status_fields(self, ready: bool, error: Exception | None = None) -> dict[str, Any]:
        return {"synchronized": "true" if ready else "false"}

    def status_reason(self, ready: bool, error: Exception | None = None) -> str | None:
        return None

    # Lifecycle

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Reconcile one object by identity.

        Never raises: every failure is recorded in status and/or returned in
        the result together with the interval after which to retry.
        """
        try:
            obj = self.store.get_object(self.plural, namespace, name)
        except NotFoundError:
            self.logger.debug(f"{self.kind} {namespace}/{name} not found, nothing to reconcile")
            return ReconcileResult()
        except VaultOperatorError as e:
            self.logger.error(f"Failed to get {self.kind} {namespace}/{name}: {sanitize_exception(e)}")
            return ReconcileResult(ERROR_REQUEUE_SECONDS, e)

        start_time = time.time()
        with trace_span(
            f"reconcile_{self.kind.lower()}",
            kind=self.kind,
            attributes={"resource.name": name, "resource.namespace": namespace},
        ):
            try:
                result = self._reconcile(obj)
            finally:
                duration = time.time() - start_time
                metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)
            set_span_status(result.error is None, str(result.error) if result.error else None)

        if result.error is not None:
            metrics.error_total.labels(kind=self.kind, error_type=type(result.error).__name__).inc()
            metrics.reconcile_total.labels(kind=self.kind, result="failed").inc()
        else:
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        return result

    def _reconcile(self, obj: dict[str, Any]) -> ReconcileResult:
        meta = obj.get("metadata", {})

        try:
            client = self.resolve(obj)
        except Exception as e:
            message = f"Failed to get vault operator client: {sanitize_exception(e)}"
            self.log_error(meta, message, error=e, reason="ServerResolutionFailed")
            return self._record_failure(obj, message, e)

        if meta.get("deletionTimestamp"):
            return self.finalize(obj, client)

        if not has_finalizer(obj, self.finalizer):
            try:
                add_finalizer(self.store, self.plural, obj, self.finalizer)
            except NotFoundError:
                return ReconcileResult()
            except VaultOperatorError as e:
                message = f"Failed to add finalizer: {sanitize_exception(e)}"
                self.log_error(meta, message, error=e, reason="FinalizerFailed")
                return self._record_failure(obj, message, e)
            self.log_info(meta, "Finalizer added", event="finalizer", reason="FinalizerAdded")
            # The patch produces a watch event that triggers the next pass
            return ReconcileResult()

        try:
            message = self.sync(obj, client)
        except Exception as e:
            message = self.failure_message(obj, e)
            self.log_error(meta, "Reconciliation failed", error=e, reason="ReconciliationFailed")
            return self._record_failure(obj, message, e)

        self.log_info(meta, message, event="reconcile", reason="Synchronized")
        status_error = self._write_status(obj, True, message)
        if status_error is not None:
            return ReconcileResult(ERROR_REQUEUE_SECONDS, status_error)
        if not is_ready((obj.get("status") or {}).get("conditions") or []):
            emit_synchronized(obj, message)
        return ReconcileResult(DEFAULT_REQUEUE_SECONDS)

    def finalize(self, obj: dict[str, Any], client: OperatorClient | None) -> ReconcileResult:
        """Clean up externally, then release the object by removing the finalizer."""
        meta = obj.get("metadata", {})
        if not has_finalizer(obj, self.finalizer):
            return ReconcileResult()

        self.log_info(meta, f"Handling deletion of {self.kind}", event="delete", reason="Deleting")
        try:
            self.delete_external(obj, client)
        except Exception as e:
            self.log_error(meta, "External cleanup failed", error=e, reason="CleanupFailed")
            emit_cleanup_failed(obj, f"Cleanup failed: {sanitize_exception(e)}")
            return ReconcileResult(ERROR_REQUEUE_SECONDS, e)

        try:
            remove_finalizer(self.store, self.plural, obj, self.finalizer)
        except NotFoundError:
            return ReconcileResult()
        except VaultOperatorError as e:
            self.log_error(meta, "Failed to remove finalizer", error=e, reason="FinalizerFailed")
            return ReconcileResult(ERROR_REQUEUE_SECONDS, e)

        emit_finalizer_removed(obj)
        self.log_info(meta, "Finalizer removed", event="delete", reason="FinalizerRemoved")
        return ReconcileResult()

    def _record_failure(self, obj: dict[str, Any], message: str, error: Exception) -> ReconcileResult:
        emit_reconcile_failed(obj, message)
        status_error = self._write_status(obj, False, message, error)
        return ReconcileResult(ERROR_REQUEUE_SECONDS, status_error or error)

    def _write_status(
        self,
        obj: dict[str, Any],
        ready: bool,
        message: str,
        error: Exception | None = None,
    ) -> Exception | None:
        meta = obj.get("metadata", {})
        try:
            write_status(
                self.store,
                self.kind,
                self.plural,
                meta.get("namespace"),
                meta.get("name"),
                self.status_fields(ready, error),
                ready,
                message,
                reason=self.status_reason(ready, error),
            )
        except VaultOperatorError as e:
            self.log_error(meta, "Failed to update status", error=e, reason="StatusUpdateFailed")
            return e
        return None
