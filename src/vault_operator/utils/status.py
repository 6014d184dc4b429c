"""Optimistic-concurrency status writer."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .. import metrics
from ..constants import (
    STATUS_UPDATE_BACKOFF_SECONDS,
    STATUS_UPDATE_MAX_ATTEMPTS,
    STATUS_UPDATE_MAX_BACKOFF_SECONDS,
)
from ..services.kubernetes.base import ObjectStore
from .conditions import set_ready_condition
from .errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def now_timestamp() -> str:
    """Current time in the RFC 3339 form the API server stores."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored RFC 3339 timestamp, returning None when absent or malformed."""
    if not value:
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def apply_status(
    obj: dict[str, Any],
    fields: dict[str, Any],
    ready: bool,
    message: str,
    reason: str | None = None,
) -> dict[str, Any]:
    """Apply a status outcome to an object copy in place.

    Args:
        obj: Latest copy of the object
        fields: Kind-specific status fields (``synchronized`` or ``phase``)
        ready: Whether the outcome is a success
        message: Human-readable outcome
        reason: Optional Ready condition reason

    Returns:
        The mutated object
    """
    generation = obj.get("metadata", {}).get("generation")
    status = dict(obj.get("status") or {})
    status.update(fields)
    status["message"] = message
    status["lastUpdateTime"] = now_timestamp()
    if generation is not None:
        status["observedGeneration"] = generation
    status["conditions"] = set_ready_condition(
        list(status.get("conditions") or []),
        ready,
        message,
        observed_generation=generation,
        reason=reason,
    )
    obj["status"] = status
    return obj


def write_status(
    store: ObjectStore,
    kind: str,
    plural: str,
    namespace: str,
    name: str,
    fields: dict[str, Any],
    ready: bool,
    message: str,
    reason: str | None = None,
    max_attempts: int = STATUS_UPDATE_MAX_ATTEMPTS,
) -> dict[str, Any] | None:
    """Write a status outcome, re-fetching and retrying on conflicting writes.

    Every attempt starts from a fresh copy of the object so the write carries
    the latest resourceVersion.

    Returns:
        The stored object, or None if the object no longer exists

    Raises:
        ConflictError: If every attempt lost the race to another writer
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=STATUS_UPDATE_BACKOFF_SECONDS, max=STATUS_UPDATE_MAX_BACKOFF_SECONDS),
        retry=retry_if_exception_type(ConflictError),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            try:
                latest = store.get_object(plural, namespace, name)
            except NotFoundError:
                logger.debug(f"{kind} {namespace}/{name} is gone, skipping status update")
                return None

            apply_status(latest, fields, ready, message, reason)
            try:
                return store.replace_status(plural, namespace, name, latest)
            except ConflictError:
                metrics.status_conflicts_total.labels(kind=kind).inc()
                raise
    return None
