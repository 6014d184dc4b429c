"""KV-v2 secret operator."""

from __future__ import annotations

from typing import Any

from ..utils.errors import NotFoundError
from ..utils.secrets import randomize
from .base import BaseOperator


def join_secret_path(path: str, name: str) -> str:
    """Join a logical path and a secret name with single slashes."""
    return "/".join(part.strip("/") for part in (path, name) if part and part.strip("/"))


class KVSecretOperator(BaseOperator):
    """Create-once KV-v2 secrets.

    An existing secret is never overwritten: once a path holds a value,
    later reconciliations leave it untouched whatever the desired data says.
    """

    family = "kv_v2"

    def secret_exists(self, mount_path: str, path: str, name: str, token: str) -> bool:
        secret_path = join_secret_path(path, name)
        with self.track("secret_exists"):
            try:
                self.provider.kv_v2_read(mount_path, secret_path, token)
            except NotFoundError:
                return False
        return True

    def create_or_update(
        self,
        mount_path: str,
        path: str,
        name: str,
        data: dict[str, Any],
        token: str,
    ) -> bool:
        """Write the secret if the path is still empty.

        Values equal to the random sentinel are replaced with freshly
        generated strings before the write.

        Returns:
            True if the secret was written by this call
        """
        secret_path = join_secret_path(path, name)
        if self.secret_exists(mount_path, path, name, token):
            self.logger.info(f"Secret {mount_path}/{secret_path} already exists, leaving it untouched")
            return False

        with self.track("create_or_update"):
            self.provider.kv_v2_write(mount_path, secret_path, randomize(data), token)
        self.logger.info(f"Created secret {mount_path}/{secret_path}")
        return True

    def delete_secret(self, mount_path: str, path: str, name: str, token: str) -> None:
        """Delete the latest version of a secret; an absent secret is a no-op."""
        secret_path = join_secret_path(path, name)
        with self.track("delete_secret"):
            try:
                self.provider.kv_v2_delete(mount_path, secret_path, token)
            except NotFoundError:
                self.logger.debug(f"Secret {mount_path}/{secret_path} already absent")
                return
        self.logger.info(f"Deleted secret {mount_path}/{secret_path}")
