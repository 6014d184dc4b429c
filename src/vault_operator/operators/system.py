"""Initialization and seal-state operator."""

from __future__ import annotations

from typing import Any

from ..constants import SECRET_SHARES, SECRET_THRESHOLD
from .base import BaseOperator


class SystemOperator(BaseOperator):
    """Reachability, initialization and unsealing of a Vault server."""

    family = "system"

    def ping(self) -> None:
        """Probe the health endpoint; raises if the server cannot be reached."""
        with self.track("ping"):
            self.provider.read_health_status()

    def is_initialized(self) -> bool:
        with self.track("is_initialized"):
            response = self.provider.read_initialization_status()
        return bool(response.get("initialized"))

    def initialize(self) -> dict[str, Any]:
        """Initialize Vault with a 3-of-3 key share scheme.

        Returns:
            Init output containing ``root_token`` and the ordered ``keys``
        """
        with self.track("initialize"):
            response = self.provider.initialize(SECRET_SHARES, SECRET_THRESHOLD)
        self.logger.info(f"Vault initialized with {SECRET_SHARES} key shares, threshold {SECRET_THRESHOLD}")
        return {
            "root_token": response.get("root_token", ""),
            "keys": list(response.get("keys", [])),
        }

    def is_sealed(self) -> bool:
        with self.track("is_sealed"):
            response = self.provider.read_seal_status()
        return bool(response.get("sealed"))

    def unseal(self, keys: list[str]) -> None:
        """Submit unseal key shares one at a time, in the given order."""
        with self.track("unseal"):
            for key in keys:
                self.provider.submit_unseal_key(key)
        self.logger.info(f"Submitted {len(keys)} unseal key shares")
