"""Utilities for credential objects and generated secret values."""

from __future__ import annotations

import random
import secrets
import string
from typing import Any

from ..constants import RANDOM_VALUE_LENGTH, RANDOM_VALUE_SENTINEL, ROOT_TOKEN_KEY
from .errors import NotFoundError

ALPHABET = string.ascii_letters + string.digits


def credential_secret_name(server_name: str) -> str:
    """Name of the object holding a server's root token and unseal keys."""
    return f"{server_name}-secret"


def approle_secret_name(approle_name: str) -> str:
    """Name of the object an AppRole exports its role_id/secret_id to."""
    return f"approle-{approle_name}-secret"


def build_root_credentials(root_token: str, keys: list[str]) -> dict[str, str]:
    """Lay out init output as ``root_token`` plus ``"1".."N"`` key shares.

    Args:
        root_token: Root token returned by initialization
        keys: Unseal key shares, in share order

    Returns:
        Credential object data
    """
    data = {ROOT_TOKEN_KEY: root_token}
    for index, key in enumerate(keys, start=1):
        data[str(index)] = key
    return data


def extract_unseal_keys(data: dict[str, str]) -> list[str]:
    """Return unseal key shares ordered by their numeric key.

    Keys other than the root token that do not parse as integers are skipped.

    Raises:
        NotFoundError: If the object holds no key shares
    """
    indexed: list[tuple[int, str]] = []
    for key, value in data.items():
        if key == ROOT_TOKEN_KEY:
            continue
        try:
            index = int(key)
        except ValueError:
            continue
        indexed.append((index, value))

    if not indexed:
        raise NotFoundError("no unseal keys found in secret", errors=[])

    indexed.sort(key=lambda item: item[0])
    return [value for _, value in indexed]


def generate_random_string(length: int = RANDOM_VALUE_LENGTH) -> str:
    """Generate an alphanumeric string from a cryptographically strong source."""
    try:
        return "".join(secrets.choice(ALPHABET) for _ in range(length))
    except NotImplementedError:
        # No OS entropy source available
        return "".join(random.choice(ALPHABET) for _ in range(length))


def randomize(data: dict[str, Any], length: int = RANDOM_VALUE_LENGTH) -> dict[str, Any]:
    """Replace every sentinel value with a freshly generated random string."""
    return {
        key: generate_random_string(length) if value == RANDOM_VALUE_SENTINEL else value
        for key, value in data.items()
    }
