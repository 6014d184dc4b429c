"""UserPass CRD handler."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.server import OperatorClient
from ..constants import (
    API_GROUP_VERSION,
    ERROR_REQUEUE_SECONDS,
    FINALIZER_USER_PASS,
    KIND_USER_PASS,
    PLURAL_USER_PASS,
)
from ..operators import UserPassOperator
from ..utils.errors import sanitize_exception
from .base import BaseReconciler
from .shared import needs_reconcile, requeue_due, run_reconcile


class UserPassReconciler(BaseReconciler):
    """Userpass accounts. Existing accounts are never resynchronized."""

    kind = KIND_USER_PASS
    plural = PLURAL_USER_PASS
    finalizer = FINALIZER_USER_PASS

    def sync(self, obj: dict[str, Any], client: OperatorClient | None) -> str:
        spec = obj.get("spec", {})
        UserPassOperator(client.provider).create_user(
            spec.get("mountPath", ""),
            spec.get("name", ""),
            spec.get("password", ""),
            list(spec.get("policies") or []),
            client.token,
        )
        return "User synchronized successfully"

    def delete_external(self, obj: dict[str, Any], client: OperatorClient | None) -> None:
        spec = obj.get("spec", {})
        UserPassOperator(client.provider).delete_user(spec.get("mountPath", ""), spec.get("name", ""), client.token)

    def failure_message(self, obj: dict[str, Any], error: Exception) -> str:
        return f"Failed to create/update user: {sanitize_exception(error)}"


@kopf.on.event(
    API_GROUP_VERSION,
    PLURAL_USER_PASS,
    when=lambda type, meta, status, **_: needs_reconcile(type, meta, status, FINALIZER_USER_PASS),
)
def handle_user_pass_event(namespace: str, name: str, **_: Any) -> None:
    """Reconcile a UserPass on watch events that need attention."""
    run_reconcile(UserPassReconciler, namespace, name)


@kopf.on.delete(API_GROUP_VERSION, PLURAL_USER_PASS)
def handle_user_pass_delete(namespace: str, name: str, **_: Any) -> None:
    """Clean up a deleting UserPass; a failure is retried after the error requeue delay."""
    run_reconcile(UserPassReconciler, namespace, name)


@kopf.timer(
    API_GROUP_VERSION,
    PLURAL_USER_PASS,
    interval=ERROR_REQUEUE_SECONDS,
    when=lambda status, **_: requeue_due(status),
)
def requeue_user_pass(namespace: str, name: str, **_: Any) -> None:
    run_reconcile(UserPassReconciler, namespace, name)
