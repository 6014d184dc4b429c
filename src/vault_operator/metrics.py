"""Prometheus metrics for the Vault Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "vault_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "vault_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "vault_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# Vault operator verbs
vault_operations_total = Counter(
    "vault_operator_vault_operations_total",
    "Total number of idempotent Vault operator calls",
    ["family", "operation", "result"],
)

# Server bootstrap
server_phase_total = Counter(
    "vault_operator_server_phase_total",
    "VaultServer phase outcomes",
    ["phase"],
)

# Status writes
status_conflicts_total = Counter(
    "vault_operator_status_conflicts_total",
    "Status writes rejected because of a stale resourceVersion",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "vault_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "vault_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)
