"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_APPROLE_EXPORTED,
    EVENT_REASON_CLEANUP_FAILED,
    EVENT_REASON_FINALIZER_REMOVED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_SYNCHRONIZED,
    EVENT_REASON_VAULT_INITIALIZED,
    EVENT_REASON_VAULT_UNSEALED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body (apiVersion, kind and metadata are used)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_synchronized(body: dict[str, Any], message: str) -> None:
    """Emit synchronized event."""
    emit_event(body, EVENT_REASON_SYNCHRONIZED, message)


def emit_finalizer_removed(body: dict[str, Any]) -> None:
    """Emit finalizer removed event."""
    emit_event(body, EVENT_REASON_FINALIZER_REMOVED, "External resources cleaned up, finalizer removed")


def emit_cleanup_failed(body: dict[str, Any], message: str) -> None:
    """Emit cleanup failed event."""
    emit_event(body, EVENT_REASON_CLEANUP_FAILED, message, type_="Warning")


def emit_vault_initialized(body: dict[str, Any]) -> None:
    """Emit vault initialized event."""
    emit_event(body, EVENT_REASON_VAULT_INITIALIZED, "Vault initialized, credentials stored")


def emit_vault_unsealed(body: dict[str, Any]) -> None:
    """Emit vault unsealed event."""
    emit_event(body, EVENT_REASON_VAULT_UNSEALED, "Vault unsealed")


def emit_approle_exported(body: dict[str, Any], namespace: str, secret_name: str) -> None:
    """Emit AppRole credentials exported event."""
    emit_event(body, EVENT_REASON_APPROLE_EXPORTED, f"AppRole credentials exported to {namespace}/{secret_name}")
