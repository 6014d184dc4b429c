"""Secret engine mount operator."""

from __future__ import annotations

from ..utils.errors import NotFoundError
from .base import BaseOperator


def normalize_mount_path(path: str) -> str:
    """Return a mount path with exactly one trailing slash."""
    return path.strip("/") + "/"


class SecretEngineOperator(BaseOperator):
    """Enable and disable secret engine mounts."""

    family = "secret_engine"

    def is_mount_enabled(self, path: str, token: str) -> bool:
        with self.track("is_mount_enabled"):
            mounts = self.provider.list_mounts(token)
        wanted = normalize_mount_path(path)
        return any(normalize_mount_path(mounted) == wanted for mounted in mounts)

    def enable_mount(self, path: str, engine_type: str, token: str) -> bool:
        """Enable a secret engine at path unless something is already mounted there.

        Returns:
            True if the mount was enabled by this call
        """
        if self.is_mount_enabled(path, token):
            self.logger.debug(f"Secret engine already mounted at {path}")
            return False
        with self.track("enable_mount"):
            self.provider.enable_mount(path, engine_type, token)
        self.logger.info(f"Enabled {engine_type} secret engine at {path}")
        return True

    def disable_mount(self, path: str, token: str) -> None:
        with self.track("disable_mount"):
            try:
                self.provider.disable_mount(path, token)
            except NotFoundError:
                self.logger.debug(f"No secret engine mounted at {path}")
