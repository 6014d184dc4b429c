"""AuthMethod CRD handler."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.server import OperatorClient
from ..constants import (
    API_GROUP_VERSION,
    ERROR_REQUEUE_SECONDS,
    FINALIZER_AUTH_METHOD,
    KIND_AUTH_METHOD,
    PLURAL_AUTH_METHOD,
)
from ..operators import AuthMethodOperator
from ..utils.errors import sanitize_exception
from .base import BaseReconciler
from .shared import needs_reconcile, requeue_due, run_reconcile


class AuthMethodReconciler(BaseReconciler):
    kind = KIND_AUTH_METHOD
    plural = PLURAL_AUTH_METHOD
    finalizer = FINALIZER_AUTH_METHOD

    def sync(self, obj: dict[str, Any], client: OperatorClient | None) -> str:
        spec = obj.get("spec", {})
        AuthMethodOperator(client.provider).enable(spec.get("path", ""), spec.get("type", ""), client.token)
        return "Auth method synchronized successfully"

    def delete_external(self, obj: dict[str, Any], client: OperatorClient | None) -> None:
        AuthMethodOperator(client.provider).disable(obj.get("spec", {}).get("path", ""), client.token)

    def failure_message(self, obj: dict[str, Any], error: Exception) -> str:
        return f"Failed to enable auth method: {sanitize_exception(error)}"


@kopf.on.event(
    API_GROUP_VERSION,
    PLURAL_AUTH_METHOD,
    when=lambda type, meta, status, **_: needs_reconcile(type, meta, status, FINALIZER_AUTH_METHOD),
)
def handle_auth_method_event(namespace: str, name: str, **_: Any) -> None:
    """Reconcile an AuthMethod on watch events that need attention."""
    run_reconcile(AuthMethodReconciler, namespace, name)


@kopf.on.delete(API_GROUP_VERSION, PLURAL_AUTH_METHOD)
def handle_auth_method_delete(namespace: str, name: str, **_: Any) -> None:
    """Clean up a deleting AuthMethod; a failure is retried after the error requeue delay."""
    run_reconcile(AuthMethodReconciler, namespace, name)


@kopf.timer(
    API_GROUP_VERSION,
    PLURAL_AUTH_METHOD,
    interval=ERROR_REQUEUE_SECONDS,
    when=lambda status, **_: requeue_due(status),
)
def requeue_auth_method(namespace: str, name: str, **_: Any) -> None:
    run_reconcile(AuthMethodReconciler, namespace, name)
