"""
HTTP clients for asset webhook services.

This module provides the WebhookClient protocol the engines depend on, and its two
HTTP implementations: HttpValidationClient, which submits the asset files to a
validation service, and HttpMutationClient, which additionally writes the mutated
content returned by a mutation service back to the asset files.
"""

# Python imports
import asyncio
import json
import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Any, Protocol

# 3rd party imports
import httpx
from pydantic import ValidationError

# Local imports
from assethook.constants import (
    DEFAULT_SERVICE_URL_TEMPLATE,
    DEFAULT_WEBHOOK_TIMEOUT,
    PARAMETERS_FORM_FIELD,
    VALIDATION_FAILED_STATUS_CODE,
)
from assethook.exceptions import WebhookProcessingError, handle_httpx_exceptions
from assethook.models import (
    AssetWebhookService,
    Message,
    MutationResponse,
    ValidationResponse,
)
from assethook.utils import read_asset_file, write_asset_file

logger = logging.getLogger(__name__)


class WebhookClient(Protocol):
    """
    A client able to submit the files of an asset to one webhook service.

    Implementations issue exactly one call per invocation and never retry. Any
    problem that prevents the service's verdict from being known is raised as a
    WebhookProcessingError.
    """

    async def call(
        self,
        service: AssetWebhookService,
        asset_prefix: str,
        files: Sequence[str],
    ) -> list[Message]:
        """
        Submit the files to the service.

        :param service: the webhook service to call
        :param asset_prefix: the common prefix of the asset files
        :param files: the file names, relative to the prefix, to submit

        :return: the messages reported by the service, empty if it found no issue
        """
        ...


class _HttpWebhookClient:
    """Shared request and response handling of the HTTP webhook clients."""

    def __init__(
        self,
        *,
        timeout: timedelta | None = None,
        httpx_client: httpx.AsyncClient | None = None,
        service_url_template: str = DEFAULT_SERVICE_URL_TEMPLATE,
    ):
        """
        Initialize the webhook client.

        :param timeout: Request timeout duration. If not specified, it defaults to
            DEFAULT_WEBHOOK_TIMEOUT, or to the read timeout of the given httpx client.
        :param httpx_client: The httpx client to use for making requests. If not
            provided, a new httpx client will be created and closed together with this
            client.
        :param service_url_template: Template used to build the URL of a service from
            its ``name``, ``namespace`` and ``endpoint``.
        """
        self.timeout = (
            timeout
            if timeout is not None
            else DEFAULT_WEBHOOK_TIMEOUT
            if httpx_client is None
            else timedelta(seconds=httpx_client.timeout.read)
            if httpx_client.timeout.read
            else DEFAULT_WEBHOOK_TIMEOUT
        )
        self._own_httpx_client = httpx_client is None
        self.httpx_client = httpx_client or httpx.AsyncClient(
            timeout=self.timeout.total_seconds()
        )
        self.service_url_template = service_url_template
        self._closed = False

        logger.info(
            f"{self.__class__.__name__} initialized with timeout {self.timeout} and "
            f"service URL template {self.service_url_template}"
        )

    async def close(self):
        """Close the HTTP client if this client created it."""
        if self._closed:
            return
        if self._own_httpx_client:
            await self.httpx_client.aclose()
        self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any):
        await self.close()

    def service_url(self, service: AssetWebhookService) -> str:
        """Build the URL the given service listens on."""
        return self.service_url_template.format(
            name=service.name,
            namespace=service.namespace,
            endpoint=service.endpoint,
        )

    async def call(
        self,
        service: AssetWebhookService,
        asset_prefix: str,
        files: Sequence[str],
    ) -> list[Message]:
        """
        Submit the files to the service in one multipart request.

        :param service: the webhook service to call
        :param asset_prefix: the common prefix of the asset files, used to read them
        :param files: the file names, relative to the prefix, to submit

        :return: the messages reported by the service, empty if it found no issue

        :raises WebhookProcessingError: if the service could not be called, answered
            with an unexpected status, or returned a malformed body.
        """
        if self._closed:
            raise RuntimeError(f"{self.__class__.__name__} is closed")

        # Yield once so that a pending cancellation is raised before any file is
        # read or any request is sent.
        await asyncio.sleep(0)

        service_id = service.service_id
        url = self.service_url(service)
        request_files = await asyncio.to_thread(
            self._read_files, service, asset_prefix, files
        )
        data = None
        if service.parameters is not None:
            data = {PARAMETERS_FORM_FIELD: json.dumps(service.parameters)}

        logger.debug(f"Calling webhook {service_id} at {url} with {len(files)} files")
        with handle_httpx_exceptions(service_id):
            response = await self.httpx_client.post(
                url,
                data=data,
                files=request_files or None,
                timeout=self.timeout.total_seconds(),
            )

        if response.status_code == VALIDATION_FAILED_STATUS_CODE:
            return self._failure_messages(service, response, files)
        if response.is_success:
            await self._handle_success(service, response, asset_prefix, files)
            return []

        with handle_httpx_exceptions(service_id):
            response.raise_for_status()
        raise WebhookProcessingError(
            f"Webhook {service_id} returned unexpected status {response.status_code}",
            service_id=service_id,
            status_code=response.status_code,
        )

    async def _handle_success(
        self,
        service: AssetWebhookService,
        response: httpx.Response,
        asset_prefix: str,
        files: Sequence[str],
    ) -> None:
        pass

    @staticmethod
    def _read_files(
        service: AssetWebhookService, asset_prefix: str, files: Sequence[str]
    ) -> list[tuple[str, tuple[str, bytes]]]:
        request_files: list[tuple[str, tuple[str, bytes]]] = []
        for filename in files:
            try:
                content = read_asset_file(asset_prefix, filename)
            except OSError as e:
                raise WebhookProcessingError(
                    f"Cannot read {filename} for webhook {service.service_id}: {e}",
                    service_id=service.service_id,
                ) from e
            request_files.append((filename, (filename, content)))
        return request_files

    @staticmethod
    def _malformed(
        service: AssetWebhookService, response: httpx.Response, reason: str
    ) -> WebhookProcessingError:
        return WebhookProcessingError(
            f"Malformed response from webhook {service.service_id}: {reason}",
            service_id=service.service_id,
            status_code=response.status_code,
        )

    def _failure_messages(
        self,
        service: AssetWebhookService,
        response: httpx.Response,
        files: Sequence[str],
    ) -> list[Message]:
        try:
            body = ValidationResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise self._malformed(service, response, str(e)) from e

        submitted = set(files)
        messages: list[Message] = []
        for filename, file_status in body.status.items():
            if filename not in submitted:
                raise self._malformed(
                    service, response, f"status reported for unknown file {filename}"
                )
            if not file_status.succeeded:
                messages.append(
                    Message(filename=filename, message=file_status.message)
                )

        if not messages:
            # A rejection without any failing file leaves the verdict unknown.
            raise self._malformed(service, response, "no failing file reported")

        logger.debug(
            f"Webhook {service.service_id} reported {len(messages)} messages"
        )
        return messages


class HttpValidationClient(_HttpWebhookClient):
    """
    Client for validation webhook services.

    A service accepts the asset by answering 200, and rejects it by answering 422
    with the status of each file:

        {"status": {"<file>": {"status": "Failure", "message": "..."}}}
    """

    pass


class HttpMutationClient(_HttpWebhookClient):
    """
    Client for mutation webhook services.

    A service answering 200 returns the new content of the files it changed, which is
    written back to the asset before the call returns:

        {"files": {"<file>": "<new content>"}}

    A 422 answer is handled like a validation failure.
    """

    async def _handle_success(
        self,
        service: AssetWebhookService,
        response: httpx.Response,
        asset_prefix: str,
        files: Sequence[str],
    ) -> None:
        if not response.content:
            return

        try:
            body = MutationResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise self._malformed(service, response, str(e)) from e

        submitted = set(files)
        unknown = [filename for filename in body.files if filename not in submitted]
        if unknown:
            raise self._malformed(
                service, response, f"content returned for unknown files {unknown}"
            )

        await asyncio.to_thread(
            self._write_files, service, asset_prefix, body.files
        )

    @staticmethod
    def _write_files(
        service: AssetWebhookService, asset_prefix: str, contents: dict[str, str]
    ) -> None:
        written: list[str] = []
        for filename, content in contents.items():
            try:
                write_asset_file(asset_prefix, filename, content.encode())
            except OSError as e:
                # Files written before the failure are left mutated.
                raise WebhookProcessingError(
                    f"Cannot write {filename} mutated by webhook "
                    f"{service.service_id}, files already written: {written}: {e}",
                    service_id=service.service_id,
                ) from e
            written.append(filename)
            logger.debug(f"Webhook {service.service_id} mutated {filename}")
