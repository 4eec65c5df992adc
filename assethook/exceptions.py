"""
Exception hierarchy for the assethook package.

Two families of errors exist. WebhookProcessingError and its subclasses are raised
when a single webhook call could not be completed or its response could not be
interpreted. EngineError and its subclasses are what the public engines raise when a
whole validation or mutation run is inconclusive. A run that completed and found
problems is not an error: it is reported through Result.success.
"""

from contextlib import contextmanager

import httpx


class AssetHookError(Exception):
    """Base class for all exceptions raised by assethook."""

    pass


class WebhookProcessingError(AssetHookError):
    """A webhook service could not be called or its response was unusable."""

    def __init__(
        self,
        message: str,
        *,
        service_id: str | None = None,
        status_code: int | None = None,
        retryable: bool = False,
    ):
        """
        Initialize WebhookProcessingError.

        :param message: Error message to display.
        :param service_id: Identifier of the webhook service that failed, if known.
        :param status_code: HTTP status code returned by the service, if any.
        :param retryable: Whether calling the service again may succeed.

        """
        self.message = message
        self.service_id = service_id
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class WebhookTimeoutError(WebhookProcessingError):
    """A call to a webhook service timed out."""

    def __init__(self, message: str, *, service_id: str | None = None):
        """
        Initialize WebhookTimeoutError.

        Timeouts are always considered retryable.

        :param message: Error message to display.
        :param service_id: Identifier of the webhook service that timed out.
        """
        super().__init__(message, service_id=service_id, retryable=True)


class EngineError(AssetHookError):
    """A validation or mutation run could not be completed."""

    def __init__(self, message: str, *, phase: str):
        """
        Initialize EngineError.

        :param message: Error message to display.
        :param phase: The engine phase that failed, e.g. "validation" or "mutation".
        """
        self.message = message
        self.phase = phase
        super().__init__(message)


class EngineTimeoutError(EngineError):
    """The overall deadline of a run expired before every service answered."""

    pass


@contextmanager
def handle_httpx_exceptions(service_id: str):
    """Context manager that converts httpx exceptions into webhook exceptions."""
    try:
        yield
    except Exception as exc:
        if not isinstance(exc, httpx.HTTPError):
            raise  # not httpx; bubble up

        # ----- Timeout -----
        if isinstance(exc, httpx.TimeoutException):
            msg = f"Timeout calling webhook {service_id}: {exc}"
            raise WebhookTimeoutError(msg, service_id=service_id) from exc

        # ----- Network errors -----
        if isinstance(exc, httpx.NetworkError):
            msg = f"Network error calling webhook {service_id}: {exc}"
            raise WebhookProcessingError(
                msg, service_id=service_id, retryable=True
            ) from exc

        # ----- HTTP status errors -----
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            msg = f"Webhook {service_id} returned {status}: {exc.response.text}"
            raise WebhookProcessingError(
                msg,
                service_id=service_id,
                status_code=status,
                retryable=500 <= status < 600,
            ) from exc

        # ----- Catch-all -----
        if isinstance(exc, httpx.RequestError):
            msg = f"Request error calling webhook {service_id}: {exc}"
            raise WebhookProcessingError(msg, service_id=service_id) from exc

        raise WebhookProcessingError(
            f"Unexpected error calling webhook {service_id}: {exc}",
            service_id=service_id,
        ) from exc
