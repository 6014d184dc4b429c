"""Auth method operator."""

from __future__ import annotations

from .base import BaseOperator


class AuthMethodOperator(BaseOperator):
    """Enable and disable auth methods."""

    family = "auth_method"

    def is_enabled(self, path: str, token: str) -> bool:
        with self.track("is_enabled"):
            methods = self.provider.list_auth_methods(token)
        return f"{path.rstrip('/')}/" in methods

    def enable(self, path: str, method_type: str, token: str) -> bool:
        """Enable an auth method unless the path is already in use.

        Returns:
            True if the method was enabled by this call
        """
        if self.is_enabled(path, token):
            self.logger.debug(f"Auth method already enabled at {path}")
            return False
        with self.track("enable"):
            self.provider.enable_auth_method(path, method_type, token)
        self.logger.info(f"Enabled {method_type} auth method at {path}")
        return True

    def disable(self, path: str, token: str) -> None:
        # Vault answers success for paths with nothing mounted
        with self.track("disable"):
            self.provider.disable_auth_method(path, token)
        self.logger.info(f"Disabled auth method at {path}")
