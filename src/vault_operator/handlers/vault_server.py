"""VaultServer CRD handler: reachability, initialization and unsealing."""

from __future__ import annotations

from typing import Any

import kopf

from .. import metrics
from ..builders.server import OperatorClient, build_endpoint, validate_server_spec
from ..constants import (
    API_GROUP_VERSION,
    ERROR_REQUEUE_SECONDS,
    FINALIZER_VAULT_SERVER,
    KIND_VAULT_SERVER,
    PHASE_DATA_NOT_VALIDATED,
    PHASE_INITIALIZATION_UNKNOWN,
    PHASE_NOT_INITIALIZED,
    PHASE_NOT_REACHABLE,
    PHASE_READ_SECRET_FAILED,
    PHASE_SAVE_SECRET_FAILED,
    PHASE_SEAL_STATUS_UNKNOWN,
    PHASE_UNSEAL_ERROR,
    PHASE_UNSEALED,
    PLURAL_VAULT_SERVER,
)
from ..operators import SystemOperator
from ..tracing import trace_span
from ..utils.errors import PhaseError, ValidationError, sanitize_exception
from ..utils.events import emit_vault_initialized, emit_vault_unsealed
from ..utils.secrets import build_root_credentials, credential_secret_name, extract_unseal_keys
from .base import BaseReconciler
from .shared import needs_reconcile, requeue_due, run_reconcile


def controller_owner_reference(obj: dict[str, Any]) -> dict[str, Any]:
    """Owner reference making obj the controller of a dependent object."""
    meta = obj.get("metadata", {})
    return {
        "apiVersion": obj.get("apiVersion", API_GROUP_VERSION),
        "kind": obj.get("kind", KIND_VAULT_SERVER),
        "name": meta.get("name"),
        "uid": meta.get("uid"),
        "controller": True,
        "blockOwnerDeletion": True,
    }


class VaultServerReconciler(BaseReconciler):
    """Drive a Vault server through reachability, initialization and unsealing.

    Every failure is attributed to a phase which is recorded in status.
    """

    kind = KIND_VAULT_SERVER
    plural = PLURAL_VAULT_SERVER
    finalizer = FINALIZER_VAULT_SERVER

    def resolve(self, obj: dict[str, Any]) -> OperatorClient | None:
        # A VaultServer is its own server; the bootstrap builds its provider.
        return None

    def delete_external(self, obj: dict[str, Any], client: OperatorClient | None) -> None:
        # The credential object is garbage-collected through its owner reference.
        return None

    def sync(self, obj: dict[str, Any], client: OperatorClient | None) -> str:
        spec = obj.get("spec", {})
        server = spec.get("server") or {}

        try:
            validate_server_spec(server)
        except ValidationError as e:
            raise PhaseError(PHASE_DATA_NOT_VALIDATED, str(e)) from e

        system = SystemOperator(self.provider_factory(build_endpoint(server)))

        with trace_span("vault_ping", kind=self.kind):
            try:
                system.ping()
            except Exception as e:
                raise PhaseError(PHASE_NOT_REACHABLE, "vault not reachable", e) from e

        if spec.get("init", True):
            self.ensure_initialized(obj, system)

        if spec.get("autoUnlock", True):
            self.ensure_unsealed(obj, system)

        metrics.server_phase_total.labels(phase=PHASE_UNSEALED).inc()
        return "Vault is operational"

    def ensure_initialized(self, obj: dict[str, Any], system: SystemOperator) -> None:
        """Initialize Vault if needed and persist the root token and key shares."""
        meta = obj.get("metadata", {})
        with trace_span("vault_initialize", kind=self.kind):
            try:
                initialized = system.is_initialized()
            except Exception as e:
                raise PhaseError(PHASE_INITIALIZATION_UNKNOWN, "failed to check initialization status", e) from e

            if initialized:
                return

            self.log_info(meta, "Initializing Vault", event="bootstrap", reason="Initializing")
            try:
                init_data = system.initialize()
            except Exception as e:
                raise PhaseError(PHASE_NOT_INITIALIZED, "failed to initialize vault", e) from e

            try:
                if not init_data.get("root_token"):
                    raise ValueError("root_token not found or invalid type in init data")
                self.store.apply_secret(
                    meta.get("namespace"),
                    credential_secret_name(meta.get("name")),
                    build_root_credentials(init_data["root_token"], init_data.get("keys", [])),
                    owner_references=[controller_owner_reference(obj)],
                )
            except Exception as e:
                raise PhaseError(PHASE_SAVE_SECRET_FAILED, "failed to save init data", e) from e

        emit_vault_initialized(obj)
        self.log_info(meta, "Vault initialized successfully", event="bootstrap", reason="VaultInitialized")

    def ensure_unsealed(self, obj: dict[str, Any], system: SystemOperator) -> None:
        """Unseal Vault with the persisted key shares if it is sealed."""
        meta = obj.get("metadata", {})
        with trace_span("vault_unseal", kind=self.kind):
            try:
                sealed = system.is_sealed()
            except Exception as e:
                raise PhaseError(PHASE_SEAL_STATUS_UNKNOWN, "failed to check seal status", e) from e

            if not sealed:
                return

            self.log_info(meta, "Vault is sealed, attempting to unseal", event="bootstrap", reason="Unsealing")
            try:
                data = self.store.read_secret(meta.get("namespace"), credential_secret_name(meta.get("name")))
                keys = extract_unseal_keys(data)
            except Exception as e:
                raise PhaseError(PHASE_READ_SECRET_FAILED, "failed to retrieve unseal keys", e) from e

            try:
                system.unseal(keys)
            except Exception as e:
                raise PhaseError(PHASE_UNSEAL_ERROR, "failed to unseal vault", e) from e

        emit_vault_unsealed(obj)
        self.log_info(meta, "Vault unsealed successfully", event="bootstrap", reason="VaultUnsealed")

    def failure_message(self, obj: dict[str, Any], error: Exception) -> str:
        metrics.server_phase_total.labels(phase=self._phase_of(error)).inc()
        return sanitize_exception(error)

    def status_fields(self, ready: bool, error: Exception | None = None) -> dict[str, Any]:
        return {"phase": PHASE_UNSEALED if ready else self._phase_of(error)}

    def status_reason(self, ready: bool, error: Exception | None = None) -> str | None:
        return PHASE_UNSEALED if ready else self._phase_of(error)

    @staticmethod
    def _phase_of(error: Exception | None) -> str:
        if isinstance(error, PhaseError):
            return error.phase
        return PHASE_DATA_NOT_VALIDATED


@kopf.on.event(
    API_GROUP_VERSION,
    PLURAL_VAULT_SERVER,
    when=lambda type, meta, status, **_: needs_reconcile(type, meta, status, FINALIZER_VAULT_SERVER),
)
def handle_vault_server_event(namespace: str, name: str, **_: Any) -> None:
    """Reconcile a VaultServer on watch events that need attention."""
    run_reconcile(VaultServerReconciler, namespace, name)


@kopf.on.delete(API_GROUP_VERSION, PLURAL_VAULT_SERVER)
def handle_vault_server_delete(namespace: str, name: str, **_: Any) -> None:
    """Clean up a deleting VaultServer; a failure is retried after the error requeue delay."""
    run_reconcile(VaultServerReconciler, namespace, name)


@kopf.timer(
    API_GROUP_VERSION,
    PLURAL_VAULT_SERVER,
    interval=ERROR_REQUEUE_SECONDS,
    when=lambda status, **_: requeue_due(status),
)
def requeue_vault_server(namespace: str, name: str, **_: Any) -> None:
    run_reconcile(VaultServerReconciler, namespace, name)
