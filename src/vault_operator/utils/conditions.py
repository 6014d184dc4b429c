"""Ready condition bookkeeping for desired-state status."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import COND_READY

REASON_SYNCHRONIZED = "Synchronized"
REASON_NOT_SYNCHRONIZED = "NotSynchronized"


def find_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    return next((cond for cond in conditions if cond.get("type") == condition_type), None)


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Replace the condition of ``condition_type``, keeping every other entry.

    Args:
        conditions: Current conditions
        condition_type: Type of condition
        status: "True", "False" or "Unknown"
        reason: CamelCase reason
        message: Human-readable message
        observed_generation: Generation the condition was computed for

    Returns:
        New conditions list; ``lastTransitionTime`` is carried over unless the
        status flips
    """
    previous = find_condition(conditions, condition_type)
    transition_time = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    if previous is not None and previous.get("status") == status:
        transition_time = previous.get("lastTransitionTime", transition_time)

    condition: dict[str, Any] = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": transition_time,
    }
    if observed_generation is not None:
        condition["observedGeneration"] = observed_generation

    return [cond for cond in conditions if cond.get("type") != condition_type] + [condition]


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
    reason: str | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition from a reconcile outcome."""
    return update_condition(
        conditions,
        COND_READY,
        "True" if status else "False",
        reason or (REASON_SYNCHRONIZED if status else REASON_NOT_SYNCHRONIZED),
        message,
        observed_generation,
    )


def is_ready(conditions: list[dict[str, Any]]) -> bool:
    ready = find_condition(conditions, COND_READY)
    return ready is not None and ready.get("status") == "True"
