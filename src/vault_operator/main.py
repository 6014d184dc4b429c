"""Main entry point for the Vault Operator.

Run with ``kopf run -m vault_operator.main --all-namespaces``.
"""

from __future__ import annotations

import os
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from . import tracing
from .constants import K8S_REQUEST_TIMEOUT_SECONDS
from .services.kubernetes.client import load_kube_config


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()
    tracing.initialize_tracing()

    load_kube_config()

    # Status is written by the reconcilers; keep kopf's own state in annotations
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = K8S_REQUEST_TIMEOUT_SECONDS
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Start metrics HTTP server with health check endpoints on port 8080
    health.start_metrics_server(int(os.getenv("METRICS_PORT", "8080")))
