"""
Fan-out of asset files to webhook services.

The Dispatcher calls every configured webhook service concurrently, bounded by a
maximum number of in-flight calls, and collects the messages each service reported.
It does not interpret the messages: that is the job of the aggregator.
"""

# Python imports
import asyncio
import logging
from collections.abc import Sequence
from datetime import timedelta

# 3rd party imports
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

# Local imports
from assethook.clients import WebhookClient
from assethook.constants import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_WAIT,
    DEFAULT_WEBHOOK_TIMEOUT,
)
from assethook.exceptions import WebhookProcessingError, WebhookTimeoutError
from assethook.models import AssetWebhookService, Message
from assethook.utils import async_map, is_retryable_webhook_exception

logger = logging.getLogger(__name__)


def _log_retry(retry_state: RetryCallState):
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Attempt {retry_state.attempt_number} failed: {exc}. "
        f"Sleeping {wait} seconds and retrying..."
    )


class Dispatcher:
    """
    Calls a list of webhook services for one batch of asset files.

    Every service must answer for a run to succeed. The first service that fails,
    once its retries are exhausted, cancels the calls still in flight and its error
    is raised.
    """

    def __init__(
        self,
        *,
        client: WebhookClient,
        timeout: timedelta = DEFAULT_WEBHOOK_TIMEOUT,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_wait: timedelta = DEFAULT_RETRY_WAIT,
        skip_empty_batches: bool = False,
    ):
        """
        Initialize the dispatcher.

        :param client: The client used to call each webhook service.
        :param timeout: Maximum duration of one attempt to call a service.
        :param max_concurrency: Maximum number of services called at the same time.
        :param max_retries: Maximum number of attempts per service. Only network
            errors, timeouts and 5xx responses are retried.
        :param retry_wait: Time to wait between attempts.
        :param skip_empty_batches: Whether to skip services whose filter selects no
            file instead of calling them with an empty batch.

        Raises:
            ValueError: If a numeric setting is out of range.

        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1.")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1.")
        if retry_wait.total_seconds() < 0:
            raise ValueError("retry_wait must be non-negative.")
        if timeout.total_seconds() <= 0:
            raise ValueError("timeout must be positive.")

        self.client = client
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.max_retries = max_retries
        self.retry_wait = retry_wait
        self.skip_empty_batches = skip_empty_batches

    async def dispatch(
        self,
        asset_prefix: str,
        files: Sequence[str],
        services: Sequence[AssetWebhookService],
    ) -> dict[str, list[Message]]:
        """
        Call every service with the files it applies to.

        :param asset_prefix: the common prefix of the asset files, passed unchanged to
            the client
        :param files: the asset file names
        :param services: the services to call

        :return: the messages of each service, keyed by service id in the order of
            ``services``

        :raises WebhookProcessingError: if any service could not be called.
        """
        if files is None:
            raise ValueError("files must not be None")
        if services is None:
            raise ValueError("services must not be None")

        files = list(files)
        services = list(services)

        async def call(service: AssetWebhookService) -> list[Message]:
            return await self._call_service(service, asset_prefix, files)

        results = await async_map(call, services, limit=self.max_concurrency)

        per_service: dict[str, list[Message]] = {}
        for service, messages in zip(services, results):
            per_service.setdefault(service.service_id, []).extend(messages)
        return per_service

    async def _call_service(
        self,
        service: AssetWebhookService,
        asset_prefix: str,
        files: list[str],
    ) -> list[Message]:
        service_id = service.service_id
        batch = service.select_files(files)
        if not batch and self.skip_empty_batches:
            logger.debug(f"No file selected for webhook {service_id}, skipping it")
            return []

        @retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception(is_retryable_webhook_exception),
            before_sleep=_log_retry,
            reraise=True,  # re-raise last exception instead of wrapping in RetryError
        )
        async def _call_with_retry() -> list[Message]:
            try:
                messages = await asyncio.wait_for(
                    self.client.call(service, asset_prefix, batch),
                    timeout=self.timeout.total_seconds(),
                )
            except WebhookProcessingError as e:
                if e.service_id is None:
                    e.service_id = service_id
                raise
            except asyncio.TimeoutError as e:
                raise WebhookTimeoutError(
                    f"Webhook {service_id} did not answer within {self.timeout}",
                    service_id=service_id,
                ) from e
            except Exception as e:
                raise WebhookProcessingError(
                    f"Webhook {service_id} failed: {e}", service_id=service_id
                ) from e
            return list(messages or [])

        return await _call_with_retry()
