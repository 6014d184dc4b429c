"""hvac-backed Vault client implementation."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

import hvac
import requests
from hvac import exceptions as hvac_exceptions

from ... import metrics
from ...constants import VAULT_REQUEST_TIMEOUT_SECONDS
from ...utils.errors import NotFoundError, OperationFailedError, TransportError

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])

_STATUS_BY_EXCEPTION: dict[type[hvac_exceptions.VaultError], int] = {
    hvac_exceptions.InvalidRequest: 400,
    hvac_exceptions.Unauthorized: 401,
    hvac_exceptions.Forbidden: 403,
    hvac_exceptions.InvalidPath: 404,
    hvac_exceptions.PreconditionFailed: 412,
    hvac_exceptions.RateLimitExceeded: 429,
    hvac_exceptions.InternalServerError: 500,
    hvac_exceptions.VaultNotInitialized: 501,
    hvac_exceptions.BadGateway: 502,
    hvac_exceptions.VaultDown: 503,
}


def vault_call(operation: str) -> Callable[[_F], _F]:
    """Translate hvac/requests failures into operator errors and record metrics."""

    def decorator(func: _F) -> _F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except hvac_exceptions.InvalidPath as e:
                metrics.api_call_total.labels(api_type="vault", operation=operation, result="not_found").inc()
                raise NotFoundError(f"{operation}: {e}", status_code=404, errors=e.errors) from e
            except hvac_exceptions.VaultError as e:
                metrics.api_call_total.labels(api_type="vault", operation=operation, result="error").inc()
                raise OperationFailedError(
                    f"{operation}: {e}",
                    status_code=_STATUS_BY_EXCEPTION.get(type(e)),
                    errors=e.errors,
                ) from e
            except requests.exceptions.RequestException as e:
                metrics.api_call_total.labels(api_type="vault", operation=operation, result="transport_error").inc()
                raise TransportError(f"{operation}: {e}") from e
            else:
                metrics.api_call_total.labels(api_type="vault", operation=operation, result="success").inc()
                return result
            finally:
                duration = time.time() - start_time
                metrics.api_call_duration_seconds.labels(api_type="vault", operation=operation).observe(duration)

        return wrapper  # type: ignore

    return decorator


class HvacVaultProvider:
    """Vault provider implementation on top of hvac."""

    def __init__(self, url: str, timeout: float = VAULT_REQUEST_TIMEOUT_SECONDS) -> None:
        """Initialize the Vault provider.

        Args:
            url: Vault base endpoint
            timeout: Per-request timeout in seconds
        """
        self.url = url
        self.client = hvac.Client(url=url, timeout=timeout)

    def _authenticated(self, token: str) -> hvac.Client:
        self.client.token = token
        return self.client

    @vault_call("read_health_status")
    def read_health_status(self) -> dict[str, Any]:
        """Probe the health endpoint.

        Vault answers sealed/uninitialized/standby states with non-200 codes,
        which still prove reachability; only transport failures propagate.
        """
        response = self.client.sys.read_health_status(method="GET")
        if isinstance(response, dict):
            return response
        return {"status_code": response.status_code}

    @vault_call("read_initialization_status")
    def read_initialization_status(self) -> dict[str, Any]:
        return self.client.sys.read_init_status()

    @vault_call("initialize")
    def initialize(self, secret_shares: int, secret_threshold: int) -> dict[str, Any]:
        return self.client.sys.initialize(secret_shares=secret_shares, secret_threshold=secret_threshold)

    @vault_call("read_seal_status")
    def read_seal_status(self) -> dict[str, Any]:
        return self.client.sys.read_seal_status()

    @vault_call("submit_unseal_key")
    def submit_unseal_key(self, key: str) -> dict[str, Any]:
        return self.client.sys.submit_unseal_key(key=key)

    @vault_call("list_mounts")
    def list_mounts(self, token: str) -> dict[str, Any]:
        response = self._authenticated(token).sys.list_mounted_secrets_engines()
        return response.get("data", response)

    @vault_call("enable_mount")
    def enable_mount(self, path: str, engine_type: str, token: str) -> None:
        self._authenticated(token).sys.enable_secrets_engine(backend_type=engine_type, path=path)

    @vault_call("disable_mount")
    def disable_mount(self, path: str, token: str) -> None:
        self._authenticated(token).sys.disable_secrets_engine(path=path)

    @vault_call("kv_v2_read")
    def kv_v2_read(self, mount_path: str, path: str, token: str) -> dict[str, Any]:
        response = self._authenticated(token).secrets.kv.v2.read_secret_version(
            path=path,
            mount_point=mount_path,
            raise_on_deleted_version=True,
        )
        return response.get("data", {})

    @vault_call("kv_v2_write")
    def kv_v2_write(self, mount_path: str, path: str, data: dict[str, Any], token: str) -> None:
        self._authenticated(token).secrets.kv.v2.create_or_update_secret(
            path=path,
            secret=data,
            mount_point=mount_path,
        )

    @vault_call("kv_v2_delete")
    def kv_v2_delete(self, mount_path: str, path: str, token: str) -> None:
        self._authenticated(token).secrets.kv.v2.delete_latest_version_of_secret(
            path=path,
            mount_point=mount_path,
        )

    @vault_call("write_acl_policy")
    def write_acl_policy(self, name: str, policy: str, token: str) -> None:
        self._authenticated(token).sys.create_or_update_acl_policy(name=name, policy=policy)

    @vault_call("delete_acl_policy")
    def delete_acl_policy(self, name: str, token: str) -> None:
        self._authenticated(token).sys.delete_acl_policy(name=name)

    @vault_call("list_auth_methods")
    def list_auth_methods(self, token: str) -> dict[str, Any]:
        response = self._authenticated(token).sys.list_auth_methods()
        return response.get("data", response)

    @vault_call("enable_auth_method")
    def enable_auth_method(self, path: str, method_type: str, token: str) -> None:
        self._authenticated(token).sys.enable_auth_method(method_type=method_type, path=path)

    @vault_call("disable_auth_method")
    def disable_auth_method(self, path: str, token: str) -> None:
        self._authenticated(token).sys.disable_auth_method(path=path)

    @vault_call("list_userpass_users")
    def list_userpass_users(self, mount_path: str, token: str) -> list[str]:
        response = self._authenticated(token).auth.userpass.list_user(mount_point=mount_path)
        return list(response.get("data", {}).get("keys", []))

    @vault_call("write_userpass_user")
    def write_userpass_user(
        self,
        mount_path: str,
        username: str,
        password: str,
        policies: list[str],
        token: str,
    ) -> None:
        self._authenticated(token).auth.userpass.create_or_update_user(
            username=username,
            password=password,
            policies=policies,
            mount_point=mount_path,
        )

    @vault_call("delete_userpass_user")
    def delete_userpass_user(self, mount_path: str, username: str, token: str) -> None:
        self._authenticated(token).auth.userpass.delete_user(username=username, mount_point=mount_path)

    @vault_call("write_approle_role")
    def write_approle_role(
        self,
        mount_path: str,
        role_name: str,
        policies: list[str],
        secret_id_ttl: str,
        token: str,
    ) -> None:
        self._authenticated(token).auth.approle.create_or_update_approle(
            role_name=role_name,
            token_policies=policies,
            secret_id_ttl=secret_id_ttl,
            mount_point=mount_path,
        )

    @vault_call("read_approle_role_id")
    def read_approle_role_id(self, mount_path: str, role_name: str, token: str) -> str:
        response = self._authenticated(token).auth.approle.read_role_id(
            role_name=role_name,
            mount_point=mount_path,
        )
        return response.get("data", {}).get("role_id", "")

    @vault_call("generate_approle_secret_id")
    def generate_approle_secret_id(self, mount_path: str, role_name: str, token: str) -> str:
        response = self._authenticated(token).auth.approle.generate_secret_id(
            role_name=role_name,
            mount_point=mount_path,
        )
        data = (response or {}).get("data")
        if not data:
            raise hvac_exceptions.UnexpectedError(f"no secret data found for role {role_name}")
        return data.get("secret_id", "")

    @vault_call("delete_approle_role")
    def delete_approle_role(self, mount_path: str, role_name: str, token: str) -> None:
        self._authenticated(token).auth.approle.delete_role(role_name=role_name, mount_point=mount_path)
