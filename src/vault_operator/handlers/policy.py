"""Policy CRD handler."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.server import OperatorClient
from ..constants import (
    API_GROUP_VERSION,
    ERROR_REQUEUE_SECONDS,
    FINALIZER_POLICY,
    KIND_POLICY,
    PLURAL_POLICY,
)
from ..operators import PolicyOperator
from ..utils.errors import ValidationError, sanitize_exception
from .base import BaseReconciler
from .shared import needs_reconcile, requeue_due, run_reconcile


def validate_policy_spec(spec: dict[str, Any]) -> None:
    """Validate a Policy spec.

    Raises:
        ValidationError: If the name is empty or no rule is given
    """
    if not spec.get("name"):
        raise ValidationError("policy.name cannot be empty")
    if not spec.get("rules"):
        raise ValidationError("policy.rules needs to contains at least 1 rule")


class PolicyReconciler(BaseReconciler):
    """ACL policies, overwritten on every pass."""

    kind = KIND_POLICY
    plural = PLURAL_POLICY
    finalizer = FINALIZER_POLICY

    def sync(self, obj: dict[str, Any], client: OperatorClient | None) -> str:
        spec = obj.get("spec", {})
        validate_policy_spec(spec)
        PolicyOperator(client.provider).create_or_update(spec["name"], list(spec["rules"]), client.token)
        return "Sync"

    def delete_external(self, obj: dict[str, Any], client: OperatorClient | None) -> None:
        name = obj.get("spec", {}).get("name")
        if not name:
            # Nothing was ever written for a policy without a name
            return
        PolicyOperator(client.provider).delete(name, client.token)

    def failure_message(self, obj: dict[str, Any], error: Exception) -> str:
        name = obj.get("spec", {}).get("name", "")
        if isinstance(error, ValidationError):
            return f"Failed to sync policy {name}: {error}"
        return f"Not possible to create/update policy: {name}: {sanitize_exception(error)}"


@kopf.on.event(
    API_GROUP_VERSION,
    PLURAL_POLICY,
    when=lambda type, meta, status, **_: needs_reconcile(type, meta, status, FINALIZER_POLICY),
)
def handle_policy_event(namespace: str, name: str, **_: Any) -> None:
    """Reconcile a Policy on watch events that need attention."""
    run_reconcile(PolicyReconciler, namespace, name)


@kopf.on.delete(API_GROUP_VERSION, PLURAL_POLICY)
def handle_policy_delete(namespace: str, name: str, **_: Any) -> None:
    """Clean up a deleting Policy; a failure is retried after the error requeue delay."""
    run_reconcile(PolicyReconciler, namespace, name)


@kopf.timer(
    API_GROUP_VERSION,
    PLURAL_POLICY,
    interval=ERROR_REQUEUE_SECONDS,
    when=lambda status, **_: requeue_due(status),
)
def requeue_policy(namespace: str, name: str, **_: Any) -> None:
    run_reconcile(PolicyReconciler, namespace, name)
