"""Error taxonomy and sanitization utilities for the Vault Operator."""

from __future__ import annotations

import re
from typing import Any


class VaultOperatorError(Exception):
    """Base class for every error raised by the operator."""


class ValidationError(VaultOperatorError):
    """Desired-state spec is invalid."""


class NotFoundError(VaultOperatorError):
    """Requested resource does not exist."""

    def __init__(self, message: str, status_code: int = 404, errors: list[str] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = list(errors or [])


class TransportError(VaultOperatorError):
    """Network failure or timeout while talking to a remote API."""


class ConflictError(VaultOperatorError):
    """Write was rejected because the copy it was based on is stale."""


class OperationFailedError(VaultOperatorError):
    """Remote API answered with an error status other than not-found."""

    def __init__(self, message: str, status_code: int | None = None, errors: list[str] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = list(errors or [])


class PhaseError(VaultOperatorError):
    """Bootstrap step failure attributed to a VaultServer phase."""

    def __init__(self, phase: str, message: str, cause: Exception | None = None):
        super().__init__(f"{message}: {cause}" if cause is not None else message)
        self.phase = phase
        self.message = message
        self.cause = cause


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(hv[sbr]\.)[A-Za-z0-9_\-]+",
    r"(s\.)[A-Za-z0-9]{24}",
    r"(X-Vault-Token[:\s]+)\S+",
    r"(Bearer\s+)\S+",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "root_token",
    "secret_id",
    "password",
    "token",
    "keys",
    "keys_base64",
    "unseal_key",
}

# Fields whose "field: value" occurrences are redacted inside free text
SENSITIVE_MESSAGE_FIELDS = {"root_token", "secret_id", "password", "token", "unseal_key"}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1[REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_MESSAGE_FIELDS:
        sanitized = re.sub(
            rf"\b{field}\s*[:=]\s*([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        if key.lower() in all_sensitive:
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
