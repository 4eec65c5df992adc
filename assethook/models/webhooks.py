# Python imports
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

# 3rd party imports
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

__all__ = ["AssetWebhookService", "Message", "Result"]


class AssetWebhookService(BaseModel):
    """
    Descriptor of one external webhook service.

    The engines never interpret ``parameters``; they are forwarded verbatim to the
    service with every call.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    endpoint: str = "/"
    # filter - optional regular expression. When set, only the asset files whose name
    # matches it (re.search semantics) are sent to this service.
    filter: str | None = None
    parameters: dict[str, Any] | None = None

    @field_validator("filter")
    @classmethod
    def _check_filter(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid filter expression {value!r}: {e}") from e
        return value

    @property
    def service_id(self) -> str:
        """Identifier of the service, unique per namespace, name and endpoint."""
        return f"{self.namespace}/{self.name}{self.endpoint}"

    def select_files(self, files: list[str]) -> list[str]:
        """Return the files this service applies to, keeping their order."""
        if not self.filter:
            return list(files)
        pattern = re.compile(self.filter)
        return [f for f in files if pattern.search(f)]


class Message(BaseModel):
    """One diagnostic emitted by a webhook service about a specific file."""

    model_config = ConfigDict(frozen=True)

    filename: str
    message: str


class Result(BaseModel):
    """
    The verdict of one validation or mutation run.

    ``success`` is True only when every service answered and none of them reported a
    message. ``messages`` maps each reported file name to its messages, in service
    order and then in the order each service reported them. It is read-only, as are
    the message sequences it holds.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    messages: Mapping[str, tuple[Message, ...]] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator("messages", mode="after")
    @classmethod
    def _freeze_messages(
        cls, value: Mapping[str, tuple[Message, ...]]
    ) -> Mapping[str, tuple[Message, ...]]:
        return MappingProxyType(dict(value))

    @field_serializer("messages")
    def _serialize_messages(
        self, value: Mapping[str, tuple[Message, ...]]
    ) -> dict[str, list[Message]]:
        return {filename: list(messages) for filename, messages in value.items()}

    @model_validator(mode="after")
    def _check_consistency(self) -> "Result":
        if self.success and self.messages:
            raise ValueError("A successful result cannot carry messages")
        return self
