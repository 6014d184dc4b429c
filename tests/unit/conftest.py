"""Shared fixtures and in-memory test doubles."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import patch

import pytest

from vault_operator.constants import API_GROUP_VERSION
from vault_operator.utils.errors import ConflictError, NotFoundError, TransportError


class FakeObjectStore:
    """In-memory object store with resourceVersion checks on status writes."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.secrets: dict[tuple[str, str], dict[str, str]] = {}
        self.secret_owners: dict[tuple[str, str], list[dict[str, Any]] | None] = {}
        self.patches: list[dict[str, Any]] = []
        self.status_writes = 0
        self.pending_conflicts = 0
        self.fail_patch: Exception | None = None

    def add(self, plural: str, obj: dict[str, Any]) -> dict[str, Any]:
        meta = obj.setdefault("metadata", {})
        meta.setdefault("resourceVersion", "1")
        meta.setdefault("generation", 1)
        meta.setdefault("uid", f"uid-{meta['name']}")
        self.objects[(plural, meta["namespace"], meta["name"])] = obj
        return obj

    def stored(self, plural: str, namespace: str, name: str) -> dict[str, Any]:
        return self.objects[(plural, namespace, name)]

    def _bump(self, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        meta["resourceVersion"] = str(int(meta["resourceVersion"]) + 1)

    def get_object(self, plural: str, namespace: str, name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.objects[(plural, namespace, name)])
        except KeyError:
            raise NotFoundError(f"{plural} {namespace}/{name} not found") from None

    def patch_object(self, plural: str, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        if self.fail_patch is not None:
            raise self.fail_patch
        self.patches.append(copy.deepcopy(body))
        stored = self.objects.get((plural, namespace, name))
        if stored is None:
            raise NotFoundError(f"{plural} {namespace}/{name} not found")
        for key, value in body.get("metadata", {}).items():
            if value is None:
                stored["metadata"].pop(key, None)
            else:
                stored["metadata"][key] = value
        self._bump(stored)
        return copy.deepcopy(stored)

    def replace_status(self, plural: str, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        stored = self.objects.get((plural, namespace, name))
        if stored is None:
            raise NotFoundError(f"{plural} {namespace}/{name} not found")
        if self.pending_conflicts > 0:
            self.pending_conflicts -= 1
            # Another writer got there first
            self._bump(stored)
            raise ConflictError("the object has been modified")
        if body["metadata"]["resourceVersion"] != stored["metadata"]["resourceVersion"]:
            raise ConflictError("the object has been modified")
        stored["status"] = copy.deepcopy(body.get("status", {}))
        self._bump(stored)
        self.status_writes += 1
        return copy.deepcopy(stored)

    def read_secret(self, namespace: str, name: str) -> dict[str, str]:
        try:
            return dict(self.secrets[(namespace, name)])
        except KeyError:
            raise NotFoundError(f"secret {namespace}/{name} not found") from None

    def apply_secret(
        self,
        namespace: str,
        name: str,
        data: dict[str, str],
        owner_references: list[dict[str, Any]] | None = None,
    ) -> None:
        self.secrets[(namespace, name)] = dict(data)
        self.secret_owners[(namespace, name)] = owner_references


class FakeVault:
    """In-memory Vault implementing the provider verbs."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.reachable = True
        self.initialized = True
        self.sealed = False
        self.fail: dict[str, Exception] = {}
        self.init_keys = ["key-1", "key-2", "key-3"]
        self.root_token = "hvs.root"
        self.submitted_keys: list[str] = []
        self.mounts: dict[str, dict[str, Any]] = {"secret/": {"type": "kv"}, "sys/": {"type": "system"}}
        self.kv: dict[tuple[str, str], dict[str, Any]] = {}
        self.policies: dict[str, str] = {}
        self.auth_methods: dict[str, dict[str, Any]] = {"token/": {"type": "token"}}
        self.users: dict[str, dict[str, dict[str, Any]]] = {}
        self.userpass_list_error: Exception | None = None
        self.approles: dict[tuple[str, str], dict[str, Any]] = {}
        self.secret_id_counter = 0

    def _record(self, verb: str) -> None:
        self.calls.append(verb)
        if verb in self.fail:
            raise self.fail[verb]

    def read_health_status(self) -> dict[str, Any]:
        self._record("read_health_status")
        if not self.reachable:
            raise TransportError("read_health_status: connection refused")
        return {"initialized": self.initialized, "sealed": self.sealed}

    def read_initialization_status(self) -> dict[str, Any]:
        self._record("read_initialization_status")
        return {"initialized": self.initialized}

    def initialize(self, secret_shares: int, secret_threshold: int) -> dict[str, Any]:
        self._record("initialize")
        self.initialized = True
        self.sealed = True
        return {"root_token": self.root_token, "keys": list(self.init_keys[:secret_shares])}

    def read_seal_status(self) -> dict[str, Any]:
        self._record("read_seal_status")
        return {"sealed": self.sealed}

    def submit_unseal_key(self, key: str) -> dict[str, Any]:
        self._record("submit_unseal_key")
        self.submitted_keys.append(key)
        if self.submitted_keys[-len(self.init_keys):] == self.init_keys:
            self.sealed = False
        return {"sealed": self.sealed}

    def list_mounts(self, token: str) -> dict[str, Any]:
        self._record("list_mounts")
        return dict(self.mounts)

    def enable_mount(self, path: str, engine_type: str, token: str) -> None:
        self._record("enable_mount")
        self.mounts[f"{path.strip('/')}/"] = {"type": engine_type}

    def disable_mount(self, path: str, token: str) -> None:
        self._record("disable_mount")
        self.mounts.pop(f"{path.strip('/')}/", None)

    def kv_v2_read(self, mount_path: str, path: str, token: str) -> dict[str, Any]:
        self._record("kv_v2_read")
        try:
            return {"data": dict(self.kv[(mount_path, path)])}
        except KeyError:
            raise NotFoundError(f"kv_v2_read: {path}", errors=[]) from None

    def kv_v2_write(self, mount_path: str, path: str, data: dict[str, Any], token: str) -> None:
        self._record("kv_v2_write")
        self.kv[(mount_path, path)] = dict(data)

    def kv_v2_delete(self, mount_path: str, path: str, token: str) -> None:
        self._record("kv_v2_delete")
        self.kv.pop((mount_path, path), None)

    def write_acl_policy(self, name: str, policy: str, token: str) -> None:
        self._record("write_acl_policy")
        self.policies[name] = policy

    def delete_acl_policy(self, name: str, token: str) -> None:
        self._record("delete_acl_policy")
        self.policies.pop(name, None)

    def list_auth_methods(self, token: str) -> dict[str, Any]:
        self._record("list_auth_methods")
        return dict(self.auth_methods)

    def enable_auth_method(self, path: str, method_type: str, token: str) -> None:
        self._record("enable_auth_method")
        self.auth_methods[f"{path}/"] = {"type": method_type}

    def disable_auth_method(self, path: str, token: str) -> None:
        self._record("disable_auth_method")
        self.auth_methods.pop(f"{path}/", None)

    def list_userpass_users(self, mount_path: str, token: str) -> list[str]:
        self._record("list_userpass_users")
        if self.userpass_list_error is not None:
            raise self.userpass_list_error
        users = self.users.get(mount_path)
        if not users:
            raise NotFoundError("list_userpass_users: 404", errors=[])
        return list(users)

    def write_userpass_user(
        self,
        mount_path: str,
        username: str,
        password: str,
        policies: list[str],
        token: str,
    ) -> None:
        self._record("write_userpass_user")
        self.users.setdefault(mount_path, {})[username] = {"password": password, "policies": list(policies)}

    def delete_userpass_user(self, mount_path: str, username: str, token: str) -> None:
        self._record("delete_userpass_user")
        self.users.get(mount_path, {}).pop(username, None)

    def write_approle_role(
        self,
        mount_path: str,
        role_name: str,
        policies: list[str],
        secret_id_ttl: str,
        token: str,
    ) -> None:
        self._record("write_approle_role")
        role = self.approles.setdefault((mount_path, role_name), {"role_id": f"role-id-{role_name}"})
        role.update({"policies": list(policies), "secret_id_ttl": secret_id_ttl})

    def read_approle_role_id(self, mount_path: str, role_name: str, token: str) -> str:
        self._record("read_approle_role_id")
        try:
            return self.approles[(mount_path, role_name)]["role_id"]
        except KeyError:
            raise NotFoundError(f"read_approle_role_id: {role_name}", errors=[]) from None

    def generate_approle_secret_id(self, mount_path: str, role_name: str, token: str) -> str:
        self._record("generate_approle_secret_id")
        if (mount_path, role_name) not in self.approles:
            raise NotFoundError(f"generate_approle_secret_id: {role_name}", errors=[])
        self.secret_id_counter += 1
        return f"secret-id-{self.secret_id_counter}"

    def delete_approle_role(self, mount_path: str, role_name: str, token: str) -> None:
        self._record("delete_approle_role")
        self.approles.pop((mount_path, role_name), None)


def make_object(
    kind: str,
    name: str,
    spec: dict[str, Any],
    namespace: str = "default",
    finalizers: list[str] | None = None,
    status: dict[str, Any] | None = None,
    deleting: bool = False,
) -> dict[str, Any]:
    """Build a desired-state object body."""
    meta: dict[str, Any] = {"name": name, "namespace": namespace}
    if finalizers is not None:
        meta["finalizers"] = list(finalizers)
    if deleting:
        meta["deletionTimestamp"] = "2025-01-01T00:00:00Z"
    obj: dict[str, Any] = {"apiVersion": API_GROUP_VERSION, "kind": kind, "metadata": meta, "spec": spec}
    if status is not None:
        obj["status"] = status
    return obj


def add_vault_server(
    store: FakeObjectStore,
    name: str = "vault",
    namespace: str = "default",
    root_token: str = "hvs.root",
) -> dict[str, Any]:
    """Register a VaultServer together with its credential object."""
    server = store.add(
        "vaultservers",
        make_object(
            "VaultServer",
            name,
            {"server": {"serviceName": "vault", "namespace": "vault", "port": 8200}},
            namespace=namespace,
        ),
    )
    store.secrets[(namespace, f"{name}-secret")] = {
        "root_token": root_token,
        "1": "key-1",
        "2": "key-2",
        "3": "key-3",
    }
    return server


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def vault() -> FakeVault:
    return FakeVault()


@pytest.fixture(autouse=True)
def mock_kopf_event():
    """Swallow Kubernetes events; kopf.event needs a running operator."""
    with patch("vault_operator.utils.events.kopf.event") as mock_event:
        yield mock_event


@pytest.fixture(autouse=True)
def fast_status_retries():
    """Skip the real backoff sleeps between status write attempts."""
    with patch("tenacity.nap.time.sleep"):
        yield
