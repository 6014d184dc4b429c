"""Secret CRD handler."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.server import OperatorClient
from ..constants import (
    API_GROUP_VERSION,
    ERROR_REQUEUE_SECONDS,
    FINALIZER_SECRET,
    KIND_SECRET,
    PLURAL_SECRET,
)
from ..operators import KVSecretOperator, SecretEngineOperator
from ..utils.errors import sanitize_exception
from .base import BaseReconciler
from .shared import needs_reconcile, requeue_due, run_reconcile

KV_V2_ENGINE = "kv-v2"


class SecretReconciler(BaseReconciler):
    """Create-once KV-v2 secrets, with random value materialization."""

    kind = KIND_SECRET
    plural = PLURAL_SECRET
    finalizer = FINALIZER_SECRET

    def sync(self, obj: dict[str, Any], client: OperatorClient | None) -> str:
        spec = obj.get("spec", {})
        mount_path = spec.get("mountPath", "")

        if spec.get("kvV2"):
            SecretEngineOperator(client.provider).enable_mount(mount_path, KV_V2_ENGINE, client.token)

        KVSecretOperator(client.provider).create_or_update(
            mount_path,
            spec.get("path", ""),
            spec.get("name", ""),
            spec.get("data") or {},
            client.token,
        )
        return "Sync"

    def delete_external(self, obj: dict[str, Any], client: OperatorClient | None) -> None:
        spec = obj.get("spec", {})
        KVSecretOperator(client.provider).delete_secret(
            spec.get("mountPath", ""),
            spec.get("path", ""),
            spec.get("name", ""),
            client.token,
        )

    def failure_message(self, obj: dict[str, Any], error: Exception) -> str:
        path = obj.get("spec", {}).get("path", "")
        return f"Not possible to create/update secret at path: {path}: {sanitize_exception(error)}"


@kopf.on.event(
    API_GROUP_VERSION,
    PLURAL_SECRET,
    when=lambda type, meta, status, **_: needs_reconcile(type, meta, status, FINALIZER_SECRET),
)
def handle_secret_event(namespace: str, name: str, **_: Any) -> None:
    """Reconcile a Secret on watch events that need attention."""
    run_reconcile(SecretReconciler, namespace, name)


@kopf.on.delete(API_GROUP_VERSION, PLURAL_SECRET)
def handle_secret_delete(namespace: str, name: str, **_: Any) -> None:
    """Clean up a deleting Secret; a failure is retried after the error requeue delay."""
    run_reconcile(SecretReconciler, namespace, name)


@kopf.timer(
    API_GROUP_VERSION,
    PLURAL_SECRET,
    interval=ERROR_REQUEUE_SECONDS,
    when=lambda status, **_: requeue_due(status),
)
def requeue_secret(namespace: str, name: str, **_: Any) -> None:
    """Re-run the Secret reconciler once its requeue interval has elapsed."""
    run_reconcile(SecretReconciler, namespace, name)
