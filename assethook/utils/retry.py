from assethook.exceptions import WebhookProcessingError


def is_retryable_webhook_exception(exc: BaseException) -> bool:
    """
    Determine if it is beneficial to call a webhook again after the given exception.

    This is used with tenacity's retry decorator around webhook client calls. Network
    errors, timeouts and 5xx responses are worth another attempt; 4xx responses,
    malformed bodies and unreadable asset files are not, since they would fail the same
    way again.

    Example usage with tenacity:

    @retry(
        retry=retry_if_exception(is_retryable_webhook_exception),
        ... # other tenacity settings
    )
    async def call_service():
        ...

    Args:
        exc (BaseException): The exception to evaluate.

    Returns:
        bool: True if the exception is retryable, False otherwise.

    """
    if isinstance(exc, WebhookProcessingError):
        return exc.retryable
    return False
