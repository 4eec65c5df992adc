"""
Constants and default values used throughout the assethook package.

This module defines configuration constants for timeouts, retries, concurrency and
the wire format spoken with webhook services.
"""

from datetime import timedelta

DEFAULT_WEBHOOK_TIMEOUT = timedelta(seconds=30)
DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_WAIT = timedelta(seconds=1)

DEFAULT_SERVICE_URL_TEMPLATE = "http://{name}.{namespace}.svc.cluster.local{endpoint}"

# Webhook wire format
PARAMETERS_FORM_FIELD = "parameters"
VALIDATION_FAILED_STATUS_CODE = 422
FILE_STATUS_SUCCESS = "Success"

# Environment variables read by AssetHookConfig.from_env()
ENV_PREFIX = "ASSETHOOK_"
WEBHOOK_TIMEOUT_ENV_VAR = f"{ENV_PREFIX}WEBHOOK_TIMEOUT"
DEADLINE_ENV_VAR = f"{ENV_PREFIX}DEADLINE"
MAX_CONCURRENCY_ENV_VAR = f"{ENV_PREFIX}MAX_CONCURRENCY"
MAX_RETRIES_ENV_VAR = f"{ENV_PREFIX}MAX_RETRIES"
RETRY_WAIT_ENV_VAR = f"{ENV_PREFIX}RETRY_WAIT"
SKIP_EMPTY_BATCHES_ENV_VAR = f"{ENV_PREFIX}SKIP_EMPTY_BATCHES"
SERVICE_URL_TEMPLATE_ENV_VAR = f"{ENV_PREFIX}SERVICE_URL_TEMPLATE"
