# Python imports
from importlib import metadata

# Local imports
from assethook.aggregator import aggregate
from assethook.clients import HttpMutationClient, HttpValidationClient, WebhookClient
from assethook.dispatcher import Dispatcher
from assethook.engine import MutationEngine, ValidationEngine
from assethook.exceptions import (
    AssetHookError,
    EngineError,
    EngineTimeoutError,
    WebhookProcessingError,
    WebhookTimeoutError,
)
from assethook.models import AssetHookConfig, AssetWebhookService, Message, Result

__version__ = metadata.version("assethook")

__all__ = [
    "AssetHookConfig",
    "AssetHookError",
    "AssetWebhookService",
    "Dispatcher",
    "EngineError",
    "EngineTimeoutError",
    "HttpMutationClient",
    "HttpValidationClient",
    "Message",
    "MutationEngine",
    "Result",
    "ValidationEngine",
    "WebhookClient",
    "WebhookProcessingError",
    "WebhookTimeoutError",
    "aggregate",
]
