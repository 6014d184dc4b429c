"""Utility functions for the Vault Operator."""

from .conditions import is_ready, set_ready_condition, update_condition
from .errors import (
    ConflictError,
    NotFoundError,
    OperationFailedError,
    PhaseError,
    TransportError,
    ValidationError,
    VaultOperatorError,
)
from .events import emit_event
from .secrets import (
    approle_secret_name,
    build_root_credentials,
    credential_secret_name,
    extract_unseal_keys,
    generate_random_string,
    randomize,
)
from .status import write_status

__all__ = [
    "update_condition",
    "set_ready_condition",
    "is_ready",
    "VaultOperatorError",
    "ValidationError",
    "NotFoundError",
    "TransportError",
    "ConflictError",
    "OperationFailedError",
    "PhaseError",
    "emit_event",
    "credential_secret_name",
    "approle_secret_name",
    "build_root_credentials",
    "extract_unseal_keys",
    "generate_random_string",
    "randomize",
    "write_status",
]
