"""
Client classes for the assethook package.

This module exports the webhook client protocol and its HTTP implementations:
- WebhookClient: Protocol every client used by the engines satisfies
- HttpValidationClient: Client for validation webhook services
- HttpMutationClient: Client for mutation webhook services
"""

from assethook.clients.webhook import (
    HttpMutationClient,
    HttpValidationClient,
    WebhookClient,
)

__all__ = [
    "HttpMutationClient",
    "HttpValidationClient",
    "WebhookClient",
]
