"""Kubernetes-backed object store implementation."""

from __future__ import annotations

import base64
import logging
import time
from typing import Any

import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import (
    API_GROUP,
    API_VERSION,
    CONTROLLER_NAME,
    FIELD_MANAGER,
    K8S_REQUEST_TIMEOUT_SECONDS,
    LABEL_MANAGED_BY,
)
from ...utils.errors import ConflictError, NotFoundError, OperationFailedError, TransportError

logger = logging.getLogger(__name__)


def load_kube_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def _translate(error: Exception, what: str) -> Exception:
    if isinstance(error, ApiException):
        if error.status == 404:
            return NotFoundError(f"{what} not found", status_code=404)
        if error.status == 409:
            return ConflictError(f"{what}: conflicting write ({error.reason})")
        return OperationFailedError(f"{what}: {error.status} {error.reason}", status_code=error.status)
    return TransportError(f"{what}: {error}")


def _decode(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return base64.b64decode(value).decode("utf-8")


def _owner_references(owners: list[dict[str, Any]] | None) -> list[client.V1OwnerReference] | None:
    if not owners:
        return None
    return [
        client.V1OwnerReference(
            api_version=owner["apiVersion"],
            kind=owner["kind"],
            name=owner["name"],
            uid=owner["uid"],
            controller=owner.get("controller"),
            block_owner_deletion=owner.get("blockOwnerDeletion"),
        )
        for owner in owners
    ]


class KubernetesObjectStore:
    """Object store implementation on top of the Kubernetes API."""

    def __init__(
        self,
        custom_api: client.CustomObjectsApi | None = None,
        core_api: client.CoreV1Api | None = None,
        request_timeout: float = K8S_REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the object store.

        Args:
            custom_api: CustomObjectsApi instance (built from the loaded config if omitted)
            core_api: CoreV1Api instance (built from the loaded config if omitted)
            request_timeout: Per-request timeout in seconds
        """
        self.custom_api = custom_api or client.CustomObjectsApi()
        self.core_api = core_api or client.CoreV1Api()
        self.request_timeout = request_timeout

    def _call(self, operation: str, what: str, func: Any, **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = func(_request_timeout=self.request_timeout, **kwargs)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            raise _translate(e, what) from e
        else:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get_object(self, plural: str, namespace: str, name: str) -> dict[str, Any]:
        return self._call(
            "get_object",
            f"{plural} {namespace}/{name}",
            self.custom_api.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=plural,
            name=name,
        )

    def patch_object(self, plural: str, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        # A dict body is sent as application/merge-patch+json by the client.
        return self._call(
            "patch_object",
            f"{plural} {namespace}/{name}",
            self.custom_api.patch_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
        )

    def replace_status(self, plural: str, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        return self._call(
            "replace_status",
            f"{plural} {namespace}/{name} status",
            self.custom_api.replace_namespaced_custom_object_status,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=plural,
            name=name,
            body=body,
        )

    def read_secret(self, namespace: str, name: str) -> dict[str, str]:
        secret = self._call(
            "read_secret",
            f"secret {namespace}/{name}",
            self.core_api.read_namespaced_secret,
            name=name,
            namespace=namespace,
        )
        return {key: _decode(value) for key, value in (secret.data or {}).items()}

    def apply_secret(
        self,
        namespace: str,
        name: str,
        data: dict[str, str],
        owner_references: list[dict[str, Any]] | None = None,
    ) -> None:
        encoded = {k: base64.b64encode(v.encode("utf-8")).decode("utf-8") for k, v in data.items()}
        try:
            existing = self._call(
                "read_secret",
                f"secret {namespace}/{name}",
                self.core_api.read_namespaced_secret,
                name=name,
                namespace=namespace,
            )
        except NotFoundError:
            secret = client.V1Secret(
                metadata=client.V1ObjectMeta(
                    name=name,
                    namespace=namespace,
                    owner_references=_owner_references(owner_references),
                    labels={LABEL_MANAGED_BY: CONTROLLER_NAME},
                ),
                type="Opaque",
                data=encoded,
            )
            self._call(
                "create_secret",
                f"secret {namespace}/{name}",
                self.core_api.create_namespaced_secret,
                namespace=namespace,
                body=secret,
                field_manager=FIELD_MANAGER,
            )
            logger.info(f"Created secret {namespace}/{name}")
            return

        existing.data = encoded
        if owner_references:
            existing.metadata.owner_references = _owner_references(owner_references)
        self._call(
            "replace_secret",
            f"secret {namespace}/{name}",
            self.core_api.replace_namespaced_secret,
            name=name,
            namespace=namespace,
            body=existing,
            field_manager=FIELD_MANAGER,
        )
        logger.info(f"Updated secret {namespace}/{name}")
