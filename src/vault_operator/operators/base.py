"""Common plumbing shared by the Vault operators."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .. import metrics
from ..services.vault.base import VaultProvider


class BaseOperator:
    """Base class binding an operator to a Vault provider."""

    family = "vault"

    def __init__(self, provider: VaultProvider):
        self.provider = provider
        self.logger = logging.getLogger(self.__class__.__module__)

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """Count the outcome of one operator verb."""
        try:
            yield
        except Exception:
            metrics.vault_operations_total.labels(family=self.family, operation=operation, result="error").inc()
            raise
        metrics.vault_operations_total.labels(family=self.family, operation=operation, result="success").inc()
