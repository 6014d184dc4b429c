"""Shared kopf glue for handlers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import kopf

from ..constants import DEFAULT_REQUEUE_SECONDS, ERROR_REQUEUE_SECONDS
from ..services.kubernetes.client import KubernetesObjectStore
from ..utils.conditions import is_ready
from ..utils.errors import sanitize_exception
from ..utils.status import parse_timestamp
from .base import BaseReconciler, ReconcileResult

logger = logging.getLogger(__name__)


def needs_reconcile(
    type: str | None,
    meta: dict[str, Any],
    status: dict[str, Any],
    finalizer: str,
) -> bool:
    """Decide whether a watch event calls for a reconciliation.

    True when the finalizer is missing or the status has not caught up with
    the latest generation. Deleting objects are left to the delete handlers,
    which kopf retries with a delay.
    """
    if type == "DELETED" or meta.get("deletionTimestamp"):
        return False
    if finalizer not in (meta.get("finalizers") or []):
        return True
    return status.get("observedGeneration") != meta.get("generation")


def requeue_due(status: dict[str, Any], now: datetime | None = None) -> bool:
    """Decide whether the requeue interval implied by the last status has elapsed.

    After a success the long interval applies, after a failure the short one.
    """
    last_update = parse_timestamp(status.get("lastUpdateTime"))
    if last_update is None:
        return True
    interval = DEFAULT_REQUEUE_SECONDS if is_ready(status.get("conditions") or []) else ERROR_REQUEUE_SECONDS
    now = now or datetime.now(timezone.utc)
    return (now - last_update).total_seconds() >= interval


def run_reconcile(reconciler_cls: type[BaseReconciler], namespace: str, name: str) -> ReconcileResult:
    """Run one reconciliation with a fresh object store.

    Raises:
        kopf.TemporaryError: If the pass failed, delayed by the interval the
            reconciler asked for
    """
    reconciler = reconciler_cls(KubernetesObjectStore())
    result = reconciler.reconcile(namespace, name)
    if result.error is not None:
        error_msg = f"{reconciler.kind} {namespace}/{name} reconciliation failed: {sanitize_exception(result.error)}"
        logger.warning(f"{error_msg}, retrying in {result.requeue_after:.0f}s")
        raise kopf.TemporaryError(error_msg, delay=result.requeue_after)
    return result
