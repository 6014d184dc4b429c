"""Builders for Vault endpoints and per-reconciliation operator clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from ..constants import DEFAULT_VAULT_PORT, PLURAL_VAULT_SERVER, ROOT_TOKEN_KEY, VAULT_REQUEST_TIMEOUT_SECONDS
from ..services.kubernetes.base import ObjectStore
from ..services.vault.base import VaultProvider
from ..services.vault.client import HvacVaultProvider
from ..utils.errors import NotFoundError, ValidationError
from ..utils.secrets import credential_secret_name

ProviderFactory = Callable[[str], VaultProvider]


@dataclass
class OperatorClient:
    """Vault access resolved for a single reconciliation.

    Never cached across reconciliations: the root token may rotate.
    """

    provider: VaultProvider
    token: str
    endpoint: str
    name: str
    namespace: str


def validate_server_spec(server: dict[str, Any]) -> None:
    """Validate a VaultServer's ``spec.server`` block.

    Raises:
        ValidationError: If the service name is empty or the port is out of range
    """
    if not server.get("serviceName"):
        raise ValidationError("server.serviceName cannot be empty")
    port = server.get("port", DEFAULT_VAULT_PORT)
    if not isinstance(port, int) or isinstance(port, bool) or port < 1 or port > 65535:
        raise ValidationError("server.port must be between 1 and 65535")


def build_endpoint(server: dict[str, Any]) -> str:
    """Build the in-cluster URL of a Vault service.

    ``http://<serviceName>[.<namespace>.svc.cluster.local][:<port>]``; the
    namespace segment is omitted when empty and the port when zero.
    """
    url = f"http://{server.get('serviceName', '')}"
    namespace = server.get("namespace")
    if namespace:
        url += f".{namespace}.svc.cluster.local"
    port = server.get("port", DEFAULT_VAULT_PORT) or 0
    if port:
        url += f":{port}"
    return url


def create_vault_provider(endpoint: str) -> VaultProvider:
    """Create a Vault provider for an endpoint with the default request timeout."""
    return HvacVaultProvider(endpoint, timeout=VAULT_REQUEST_TIMEOUT_SECONDS)


def resolve_server_reference(spec: dict[str, Any], default_namespace: str) -> tuple[str, str]:
    """Return the (name, namespace) of the VaultServer a resource points at.

    The namespace falls back to the referencing resource's own namespace.
    """
    ref = spec.get("vaultOperator") or {}
    name = ref.get("name")
    if not name:
        raise ValidationError("vaultOperator.name cannot be empty")
    return name, ref.get("namespace") or default_namespace


def resolve_operator_client(
    store: ObjectStore,
    spec: dict[str, Any],
    default_namespace: str,
    provider_factory: ProviderFactory = create_vault_provider,
) -> OperatorClient:
    """Resolve the referenced VaultServer into a ready-to-use operator client.

    Args:
        store: Object store used for the lookups
        spec: Spec of the referencing resource
        default_namespace: Namespace of the referencing resource
        provider_factory: Builds a provider for the resolved endpoint

    Returns:
        Operator client carrying provider, root token and endpoint

    Raises:
        ValidationError: If the reference is incomplete
        NotFoundError: If the server or its credential object does not exist
    """
    name, namespace = resolve_server_reference(spec, default_namespace)

    try:
        server_obj = store.get_object(PLURAL_VAULT_SERVER, namespace, name)
    except NotFoundError as e:
        raise NotFoundError(f"failed to get vault operator instance: {e}") from e

    endpoint = build_endpoint(server_obj.get("spec", {}).get("server", {}))
    credentials = store.read_secret(namespace, credential_secret_name(name))

    return OperatorClient(
        provider=provider_factory(endpoint),
        token=credentials.get(ROOT_TOKEN_KEY, ""),
        endpoint=endpoint,
        name=name,
        namespace=namespace,
    )
