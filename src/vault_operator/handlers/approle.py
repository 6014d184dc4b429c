"""AppRole CRD handler."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.server import OperatorClient
from ..constants import (
    API_GROUP_VERSION,
    DEFAULT_APPROLE_POLICIES,
    DEFAULT_SECRET_ID_TTL,
    ERROR_REQUEUE_SECONDS,
    FINALIZER_APP_ROLE,
    KIND_APP_ROLE,
    PLURAL_APP_ROLE,
    ROLE_ID_KEY,
    SECRET_ID_KEY,
)
from ..operators import AppRoleOperator
from ..utils.errors import VaultOperatorError
from ..utils.events import emit_approle_exported
from ..utils.secrets import approle_secret_name
from .base import BaseReconciler
from .shared import needs_reconcile, requeue_due, run_reconcile


class AppRoleStepError(VaultOperatorError):
    """Failure of one AppRole step, carrying the status message prefix."""

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause


class AppRoleReconciler(BaseReconciler):
    """AppRole roles, optionally exporting role_id/secret_id to a namespace."""

    kind = KIND_APP_ROLE
    plural = PLURAL_APP_ROLE
    finalizer = FINALIZER_APP_ROLE

    def sync(self, obj: dict[str, Any], client: OperatorClient | None) -> str:
        spec = obj.get("spec", {})
        mount_path = spec.get("mount_path", "")
        role_name = spec.get("name", "")
        approles = AppRoleOperator(client.provider)

        try:
            approles.create_or_update(
                mount_path,
                role_name,
                spec.get("secret_id_ttl") or DEFAULT_SECRET_ID_TTL,
                list(spec.get("policies") or DEFAULT_APPROLE_POLICIES),
                client.token,
            )
        except Exception as e:
            raise AppRoleStepError("Failed to create or update AppRole in Vault", e) from e

        export_namespace = (spec.get("export") or {}).get("namespace")
        if export_namespace:
            self.export_credentials(obj, approles, client, export_namespace)

        return "AppRole successfully synchronized"

    def export_credentials(
        self,
        obj: dict[str, Any],
        approles: AppRoleOperator,
        client: OperatorClient,
        namespace: str,
    ) -> None:
        """Materialize the role_id and a freshly minted secret_id into namespace."""
        spec = obj.get("spec", {})
        mount_path = spec.get("mount_path", "")
        role_name = spec.get("name", "")

        try:
            role_id = approles.get_role_id(mount_path, role_name, client.token)
        except Exception as e:
            raise AppRoleStepError("Failed to get AppRole RoleId", e) from e

        try:
            secret_id = approles.generate_secret_id(mount_path, role_name, client.token)
        except Exception as e:
            raise AppRoleStepError("Failed to generate AppRole SecretId", e) from e

        secret_name = approle_secret_name(obj["metadata"]["name"])
        try:
            self.store.apply_secret(namespace, secret_name, {ROLE_ID_KEY: role_id, SECRET_ID_KEY: secret_id})
        except Exception as e:
            raise AppRoleStepError("Failed to export AppRole secret", e) from e

        emit_approle_exported(obj, namespace, secret_name)
        self.log_info(
            obj.get("metadata", {}),
            f"Exported AppRole credentials to {namespace}/{secret_name}",
            event="export",
            reason="AppRoleExported",
        )

    def delete_external(self, obj: dict[str, Any], client: OperatorClient | None) -> None:
        spec = obj.get("spec", {})
        AppRoleOperator(client.provider).delete_approle(spec.get("mount_path", ""), spec.get("name", ""), client.token)


@kopf.on.event(
    API_GROUP_VERSION,
    PLURAL_APP_ROLE,
    when=lambda type, meta, status, **_: needs_reconcile(type, meta, status, FINALIZER_APP_ROLE),
)
def handle_approle_event(namespace: str, name: str, **_: Any) -> None:
    """Reconcile an AppRole on watch events that need attention."""
    run_reconcile(AppRoleReconciler, namespace, name)


@kopf.on.delete(API_GROUP_VERSION, PLURAL_APP_ROLE)
def handle_approle_delete(namespace: str, name: str, **_: Any) -> None:
    """Clean up a deleting AppRole; a failure is retried after the error requeue delay."""
    run_reconcile(AppRoleReconciler, namespace, name)


@kopf.timer(
    API_GROUP_VERSION,
    PLURAL_APP_ROLE,
    interval=ERROR_REQUEUE_SECONDS,
    when=lambda status, **_: requeue_due(status),
)
def requeue_approle(namespace: str, name: str, **_: Any) -> None:
    run_reconcile(AppRoleReconciler, namespace, name)
