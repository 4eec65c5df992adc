# Python imports
from datetime import timedelta
from os import getenv
from typing import Optional

# 3rd party imports
from pydantic import Field

# Local imports
from assethook.constants import (
    DEADLINE_ENV_VAR,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_WAIT,
    DEFAULT_SERVICE_URL_TEMPLATE,
    DEFAULT_WEBHOOK_TIMEOUT,
    MAX_CONCURRENCY_ENV_VAR,
    MAX_RETRIES_ENV_VAR,
    RETRY_WAIT_ENV_VAR,
    SERVICE_URL_TEMPLATE_ENV_VAR,
    SKIP_EMPTY_BATCHES_ENV_VAR,
    WEBHOOK_TIMEOUT_ENV_VAR,
)
from assethook.models import ValidatedModel

__all__ = ["AssetHookConfig"]


def _seconds_from_env(name: str) -> Optional[timedelta]:
    value = getenv(name)
    if value is None or value == "":
        return None
    return timedelta(seconds=float(value))


class AssetHookConfig(ValidatedModel):
    """
    Settings shared by the validation and mutation engines.

    All fields have defaults, so ``AssetHookConfig()`` gives a usable configuration.
    Use ``from_env`` to override them through ``ASSETHOOK_*`` environment variables.
    """

    # timeout - maximum duration of a single attempt to call a webhook service. Each
    # retry gets the full timeout again.
    timeout: timedelta = DEFAULT_WEBHOOK_TIMEOUT

    # deadline - optional upper bound for a whole engine run. When it expires every
    # outstanding call is cancelled and EngineTimeoutError is raised.
    deadline: Optional[timedelta] = None

    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1)
    retry_wait: timedelta = DEFAULT_RETRY_WAIT

    # skip_empty_batches - when True, a service whose filter selects no file is not
    # called at all. By default it is still called, since some services check
    # asset-level properties independent of the files.
    skip_empty_batches: bool = False

    service_url_template: str = DEFAULT_SERVICE_URL_TEMPLATE

    @classmethod
    def from_env(cls) -> "AssetHookConfig":
        """
        Build a configuration from ``ASSETHOOK_*`` environment variables.

        Durations are given in seconds. Unset variables keep their default value.
        """
        values: dict[str, object] = {}

        timeout = _seconds_from_env(WEBHOOK_TIMEOUT_ENV_VAR)
        if timeout is not None:
            values["timeout"] = timeout
        deadline = _seconds_from_env(DEADLINE_ENV_VAR)
        if deadline is not None:
            values["deadline"] = deadline
        retry_wait = _seconds_from_env(RETRY_WAIT_ENV_VAR)
        if retry_wait is not None:
            values["retry_wait"] = retry_wait

        if max_concurrency := getenv(MAX_CONCURRENCY_ENV_VAR):
            values["max_concurrency"] = int(max_concurrency)
        if max_retries := getenv(MAX_RETRIES_ENV_VAR):
            values["max_retries"] = int(max_retries)
        if skip_empty := getenv(SKIP_EMPTY_BATCHES_ENV_VAR):
            values["skip_empty_batches"] = skip_empty.lower() in ("1", "true", "yes")
        if template := getenv(SERVICE_URL_TEMPLATE_ENV_VAR):
            values["service_url_template"] = template

        return cls(**values)  # type: ignore[arg-type]
