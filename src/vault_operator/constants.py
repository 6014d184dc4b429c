"""Constants for the Vault Operator."""

import os

# API Group
API_GROUP = "vault.ops.community.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_VAULT_SERVER = "VaultServer"
KIND_SECRET = "Secret"
KIND_POLICY = "Policy"
KIND_AUTH_METHOD = "AuthMethod"
KIND_USER_PASS = "UserPass"
KIND_APP_ROLE = "AppRole"

# Plurals
PLURAL_VAULT_SERVER = "vaultservers"
PLURAL_SECRET = "secrets"
PLURAL_POLICY = "policies"
PLURAL_AUTH_METHOD = "authmethods"
PLURAL_USER_PASS = "userpasses"
PLURAL_APP_ROLE = "approles"

# Finalizers
FINALIZER_VAULT_SERVER = "vault.finalizers.ops.community.dev"
FINALIZER_SECRET = "secret.finalizers.ops.community.dev"
FINALIZER_POLICY = "policy.finalizers.ops.community.dev"
FINALIZER_AUTH_METHOD = "authmethod.finalizers.ops.community.dev"
FINALIZER_USER_PASS = "userpass.finalizers.ops.community.dev"
FINALIZER_APP_ROLE = "approle.finalizers.ops.community.dev"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"

# Field Manager
FIELD_MANAGER = "vault-operator"
CONTROLLER_NAME = "vault-operator"

# Credential objects
ROOT_TOKEN_KEY = "root_token"
ROLE_ID_KEY = "role_id"
SECRET_ID_KEY = "secret_id"
RANDOM_VALUE_SENTINEL = "{{random}}"
RANDOM_VALUE_LENGTH = 32

# Initialization scheme
SECRET_SHARES = 3
SECRET_THRESHOLD = 3

# Defaults for desired-state fields
DEFAULT_VAULT_PORT = 8200
DEFAULT_APPROLE_POLICIES = ("default",)
DEFAULT_SECRET_ID_TTL = 3600

# Timing
VAULT_REQUEST_TIMEOUT_SECONDS = float(os.getenv("VAULT_REQUEST_TIMEOUT_SECONDS", "5"))
K8S_REQUEST_TIMEOUT_SECONDS = float(os.getenv("K8S_REQUEST_TIMEOUT_SECONDS", "30"))
DEFAULT_REQUEUE_SECONDS = float(os.getenv("RECONCILE_REQUEUE_SECONDS", "300"))
ERROR_REQUEUE_SECONDS = float(os.getenv("RECONCILE_ERROR_REQUEUE_SECONDS", "60"))

# Status update retry budget
STATUS_UPDATE_MAX_ATTEMPTS = int(os.getenv("STATUS_UPDATE_MAX_ATTEMPTS", "5"))
STATUS_UPDATE_BACKOFF_SECONDS = float(os.getenv("STATUS_UPDATE_BACKOFF_SECONDS", "0.01"))
STATUS_UPDATE_MAX_BACKOFF_SECONDS = 1.0

# Condition Types
COND_READY = "Ready"

# Server phases
PHASE_DATA_NOT_VALIDATED = "DataNotValidated"
PHASE_INITIALIZATION_UNKNOWN = "InitializationUnknown"
PHASE_NOT_INITIALIZED = "NotInitialized"
PHASE_SEAL_STATUS_UNKNOWN = "SealStatusUnknown"
PHASE_UNSEAL_ERROR = "UnsealError"
PHASE_SAVE_SECRET_FAILED = "SaveSecretFailed"
PHASE_READ_SECRET_FAILED = "ReadSecretFailed"
PHASE_NOT_REACHABLE = "NotReachable"
PHASE_UNSEALED = "Unsealed"

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_SYNCHRONIZED = "Synchronized"
EVENT_REASON_FINALIZER_REMOVED = "FinalizerRemoved"
EVENT_REASON_CLEANUP_FAILED = "CleanupFailed"
EVENT_REASON_VAULT_INITIALIZED = "VaultInitialized"
EVENT_REASON_VAULT_UNSEALED = "VaultUnsealed"
EVENT_REASON_APPROLE_EXPORTED = "AppRoleExported"
