"""Idempotent operators over Vault resource families."""

from .approle import AppRoleOperator
from .auth import AuthMethodOperator
from .policies import PolicyOperator
from .secret_engine import SecretEngineOperator
from .secrets import KVSecretOperator
from .system import SystemOperator
from .userpass import UserPassOperator

__all__ = [
    "AppRoleOperator",
    "AuthMethodOperator",
    "KVSecretOperator",
    "PolicyOperator",
    "SecretEngineOperator",
    "SystemOperator",
    "UserPassOperator",
]
