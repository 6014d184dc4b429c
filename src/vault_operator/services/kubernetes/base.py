"""Control-plane object store interface."""

from __future__ import annotations

from typing import Any, Protocol


class ObjectStore(Protocol):
    """Protocol defining the object store operations reconcilers need.

    Implementations raise ``NotFoundError`` for absent objects,
    ``ConflictError`` for stale writes and ``TransportError`` when the API
    server cannot be reached.
    """

    def get_object(self, plural: str, namespace: str, name: str) -> dict[str, Any]:
        """Fetch a desired-state object."""
        ...

    def patch_object(self, plural: str, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        """Apply a JSON merge-patch to a desired-state object."""
        ...

    def replace_status(self, plural: str, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        """Replace the status subresource, guarded by body's resourceVersion."""
        ...

    def read_secret(self, namespace: str, name: str) -> dict[str, str]:
        """Read a credential object's decoded data."""
        ...

    def apply_secret(
        self,
        namespace: str,
        name: str,
        data: dict[str, str],
        owner_references: list[dict[str, Any]] | None = None,
    ) -> None:
        """Create a credential object, or replace its data if it exists."""
        ...
