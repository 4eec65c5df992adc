"""
Validation and mutation engines for assets.

This module provides ValidationEngine and MutationEngine, the public entry points of
the package. Both submit the files of an asset to a list of webhook services through
a Dispatcher, merge what the services reported with the aggregator, and return one
Result. A run that could not complete raises EngineError instead of returning.
"""

# Python imports
import asyncio
import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Any, ClassVar

# Local imports
from assethook.aggregator import aggregate
from assethook.clients import HttpMutationClient, HttpValidationClient, WebhookClient
from assethook.constants import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_WAIT,
    DEFAULT_WEBHOOK_TIMEOUT,
)
from assethook.dispatcher import Dispatcher
from assethook.exceptions import (
    EngineError,
    EngineTimeoutError,
    WebhookProcessingError,
)
from assethook.models import AssetHookConfig, AssetWebhookService, Result

logger = logging.getLogger(__name__)


class _AssetHookEngine:
    phase: ClassVar[str]

    def __init__(
        self,
        *,
        client: WebhookClient,
        timeout: timedelta = DEFAULT_WEBHOOK_TIMEOUT,
        deadline: timedelta | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_wait: timedelta = DEFAULT_RETRY_WAIT,
        skip_empty_batches: bool = False,
    ):
        if client is None:
            raise ValueError("client must not be None")
        if deadline is not None and deadline.total_seconds() <= 0:
            raise ValueError("deadline must be positive.")

        self.client = client
        self.deadline = deadline
        self.dispatcher = Dispatcher(
            client=client,
            timeout=timeout,
            max_concurrency=max_concurrency,
            max_retries=max_retries,
            retry_wait=retry_wait,
            skip_empty_batches=skip_empty_batches,
        )
        self._own_client = False

    async def close(self):
        """Close the webhook client if this engine created it."""
        if self._own_client:
            await self.client.close()  # type: ignore[attr-defined]

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any):
        await self.close()

    async def _run(
        self,
        asset_prefix: str,
        files: Sequence[str],
        services: Sequence[AssetWebhookService],
    ) -> Result:
        dispatch = self.dispatcher.dispatch(asset_prefix, files, services)
        try:
            if self.deadline is None:
                per_service = await dispatch
            else:
                per_service = await asyncio.wait_for(
                    dispatch, timeout=self.deadline.total_seconds()
                )
        except asyncio.TimeoutError as e:
            msg = (
                f"{self.phase.capitalize()} of asset {asset_prefix!r} did not "
                f"complete within {self.deadline}"
            )
            logger.error(msg)
            raise EngineTimeoutError(msg, phase=self.phase) from e
        except WebhookProcessingError as e:
            msg = f"While running {self.phase} webhooks for asset {asset_prefix!r}: {e}"
            logger.error(msg)
            raise EngineError(msg, phase=self.phase) from e

        result = aggregate(per_service)
        if not result.success:
            logger.info(
                f"{self.phase.capitalize()} of asset {asset_prefix!r} failed for "
                f"{len(result.messages)} files"
            )
        return result


class ValidationEngine(_AssetHookEngine):
    """
    Validates the files of an asset against validation webhook services.

    Services are called concurrently. The client can be any object satisfying the
    WebhookClient protocol, which lets tests substitute a fake for the HTTP client.
    """

    phase = "validation"

    def __init__(
        self,
        *,
        client: WebhookClient,
        timeout: timedelta = DEFAULT_WEBHOOK_TIMEOUT,
        deadline: timedelta | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_wait: timedelta = DEFAULT_RETRY_WAIT,
        skip_empty_batches: bool = False,
    ):
        """
        Initialize the validation engine.

        :param client: The client used to call each webhook service.
        :param timeout: Maximum duration of one attempt to call a service.
        :param deadline: Optional maximum duration of a whole validation run.
        :param max_concurrency: Maximum number of services called at the same time.
        :param max_retries: Maximum number of attempts per service.
        :param retry_wait: Time to wait between attempts.
        :param skip_empty_batches: Whether to skip services whose filter selects no
            file.
        """
        super().__init__(
            client=client,
            timeout=timeout,
            deadline=deadline,
            max_concurrency=max_concurrency,
            max_retries=max_retries,
            retry_wait=retry_wait,
            skip_empty_batches=skip_empty_batches,
        )

    @classmethod
    def from_config(
        cls, config: AssetHookConfig, client: WebhookClient | None = None
    ) -> "ValidationEngine":
        """
        Create a validation engine from a configuration.

        :param config: the engine configuration
        :param client: the webhook client to use. If not provided, an
            HttpValidationClient is created from the configuration and closed together
            with the engine.
        """
        engine = cls(
            client=client
            or HttpValidationClient(
                timeout=config.timeout,
                service_url_template=config.service_url_template,
            ),
            timeout=config.timeout,
            deadline=config.deadline,
            max_concurrency=config.max_concurrency,
            max_retries=config.max_retries,
            retry_wait=config.retry_wait,
            skip_empty_batches=config.skip_empty_batches,
        )
        engine._own_client = client is None
        return engine

    async def validate(
        self,
        asset_prefix: str,
        files: Sequence[str],
        services: Sequence[AssetWebhookService],
    ) -> Result:
        """
        Validate the files of an asset.

        :param asset_prefix: the common prefix of the asset files. It is passed
            unchanged to the webhook client.
        :param files: the asset file names, relative to the prefix
        :param services: the validation services to call. An empty list validates
            nothing and succeeds.

        :return: the aggregated verdict of all services

        :raises EngineError: if any service could not be called or answered with an
            unusable response. EngineTimeoutError if the deadline expired.
        :raises asyncio.CancelledError: if the calling task was cancelled.
        """
        return await self._run(asset_prefix, files, services)


class MutationEngine(_AssetHookEngine):
    """
    Applies mutation webhook services to the files of an asset.

    Services are called one after another, in the given order, so that each of them
    sees the files as left by the previous one.
    """

    phase = "mutation"

    def __init__(
        self,
        *,
        client: WebhookClient,
        timeout: timedelta = DEFAULT_WEBHOOK_TIMEOUT,
        deadline: timedelta | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_wait: timedelta = DEFAULT_RETRY_WAIT,
        skip_empty_batches: bool = False,
    ):
        """
        Initialize the mutation engine.

        :param client: The client used to call each webhook service.
        :param timeout: Maximum duration of one attempt to call a service.
        :param deadline: Optional maximum duration of a whole mutation run.
        :param max_retries: Maximum number of attempts per service.
        :param retry_wait: Time to wait between attempts.
        :param skip_empty_batches: Whether to skip services whose filter selects no
            file.
        """
        super().__init__(
            client=client,
            timeout=timeout,
            deadline=deadline,
            max_concurrency=1,
            max_retries=max_retries,
            retry_wait=retry_wait,
            skip_empty_batches=skip_empty_batches,
        )

    @classmethod
    def from_config(
        cls, config: AssetHookConfig, client: WebhookClient | None = None
    ) -> "MutationEngine":
        """
        Create a mutation engine from a configuration.

        ``config.max_concurrency`` is ignored: mutations always run sequentially.

        :param config: the engine configuration
        :param client: the webhook client to use. If not provided, an
            HttpMutationClient is created from the configuration and closed together
            with the engine.
        """
        engine = cls(
            client=client
            or HttpMutationClient(
                timeout=config.timeout,
                service_url_template=config.service_url_template,
            ),
            timeout=config.timeout,
            deadline=config.deadline,
            max_retries=config.max_retries,
            retry_wait=config.retry_wait,
            skip_empty_batches=config.skip_empty_batches,
        )
        engine._own_client = client is None
        return engine

    async def mutate(
        self,
        asset_prefix: str,
        files: Sequence[str],
        services: Sequence[AssetWebhookService],
    ) -> Result:
        """
        Mutate the files of an asset.

        :param asset_prefix: the common prefix of the asset files
        :param files: the asset file names, relative to the prefix
        :param services: the mutation services to apply, in order

        :return: the aggregated verdict of all services

        :raises EngineError: if any service could not be called or answered with an
            unusable response. EngineTimeoutError if the deadline expired.
        :raises asyncio.CancelledError: if the calling task was cancelled.
        """
        return await self._run(asset_prefix, files, services)
