"""Base Vault provider interface."""

from __future__ import annotations

from typing import Any, Protocol


class VaultProvider(Protocol):
    """Protocol defining the Vault HTTP capabilities the operators rely on.

    Every verb raises ``NotFoundError`` when Vault answers 404,
    ``TransportError`` on network failures and ``OperationFailedError`` for
    any other error status.
    """

    # System

    def read_health_status(self) -> dict[str, Any]:
        """Probe the health endpoint."""
        ...

    def read_initialization_status(self) -> dict[str, Any]:
        """Read the initialization status."""
        ...

    def initialize(self, secret_shares: int, secret_threshold: int) -> dict[str, Any]:
        """Initialize Vault and return the root token and unseal keys."""
        ...

    def read_seal_status(self) -> dict[str, Any]:
        """Read the seal status."""
        ...

    def submit_unseal_key(self, key: str) -> dict[str, Any]:
        """Submit one unseal key share."""
        ...

    # Secret engines

    def list_mounts(self, token: str) -> dict[str, Any]:
        """List mounted secret engines keyed by path with trailing slash."""
        ...

    def enable_mount(self, path: str, engine_type: str, token: str) -> None:
        """Mount a secret engine at the given path."""
        ...

    def disable_mount(self, path: str, token: str) -> None:
        """Unmount the secret engine at the given path."""
        ...

    # KV v2

    def kv_v2_read(self, mount_path: str, path: str, token: str) -> dict[str, Any]:
        """Read the latest version of a KV-v2 secret."""
        ...

    def kv_v2_write(self, mount_path: str, path: str, data: dict[str, Any], token: str) -> None:
        """Write a new version of a KV-v2 secret."""
        ...

    def kv_v2_delete(self, mount_path: str, path: str, token: str) -> None:
        """Delete the latest version of a KV-v2 secret."""
        ...

    # Policies

    def write_acl_policy(self, name: str, policy: str, token: str) -> None:
        """Create or overwrite an ACL policy."""
        ...

    def delete_acl_policy(self, name: str, token: str) -> None:
        """Delete an ACL policy."""
        ...

    # Auth methods

    def list_auth_methods(self, token: str) -> dict[str, Any]:
        """List enabled auth methods keyed by path with trailing slash."""
        ...

    def enable_auth_method(self, path: str, method_type: str, token: str) -> None:
        """Enable an auth method at the given path."""
        ...

    def disable_auth_method(self, path: str, token: str) -> None:
        """Disable the auth method at the given path."""
        ...

    # Userpass

    def list_userpass_users(self, mount_path: str, token: str) -> list[str]:
        """List usernames under a userpass mount."""
        ...

    def write_userpass_user(
        self,
        mount_path: str,
        username: str,
        password: str,
        policies: list[str],
        token: str,
    ) -> None:
        """Create or update a userpass account."""
        ...

    def delete_userpass_user(self, mount_path: str, username: str, token: str) -> None:
        """Delete a userpass account."""
        ...

    # AppRole

    def write_approle_role(
        self,
        mount_path: str,
        role_name: str,
        policies: list[str],
        secret_id_ttl: str,
        token: str,
    ) -> None:
        """Create or overwrite an AppRole role configuration."""
        ...

    def read_approle_role_id(self, mount_path: str, role_name: str, token: str) -> str:
        """Read the role-id of an AppRole role."""
        ...

    def generate_approle_secret_id(self, mount_path: str, role_name: str, token: str) -> str:
        """Mint a new secret-id for an AppRole role."""
        ...

    def delete_approle_role(self, mount_path: str, role_name: str, token: str) -> None:
        """Delete an AppRole role."""
        ...
