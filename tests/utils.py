import asyncio
import io
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from fsspec import AbstractFileSystem

from assethook.models import AssetWebhookService, Message

SLOW_FS_DELAY = 0.5


def make_service(name: str, **kwargs: Any) -> AssetWebhookService:
    return AssetWebhookService(name=name, namespace="default", **kwargs)


@dataclass
class Stub:
    """A canned answer of the fake client for one call."""

    messages: list[Message] | None = None
    error: Exception | None = None
    delay: float = 0.0
    # block - never answer; the call only ends when it is cancelled
    block: bool = False


@dataclass
class Call:
    service_id: str
    asset_prefix: str
    files: list[str]


@dataclass
class FakeWebhookClient:
    """
    A WebhookClient driven by a table of stubbed answers, keyed by service id.

    A service mapped to a list of stubs gets them one per call, in order, which is
    useful to test retries. Every call is recorded with its arguments.

    Example:
        >>> client = FakeWebhookClient({"default/a/": Stub(messages=[...])})
        >>> engine = ValidationEngine(client=client)

    """

    stubs: dict[str, Stub | list[Stub]]
    calls: list[Call] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0
    cancelled: int = 0
    started: asyncio.Event = field(default_factory=asyncio.Event)

    def _next_stub(self, service_id: str) -> Stub:
        if service_id not in self.stubs:
            raise AssertionError(f"Unexpected call to {service_id}")
        stub = self.stubs[service_id]
        if isinstance(stub, list):
            if not stub:
                raise AssertionError(f"No stub left for {service_id}")
            return stub.pop(0)
        return stub

    def calls_for(self, service_id: str) -> list[Call]:
        return [c for c in self.calls if c.service_id == service_id]

    async def call(
        self,
        service: AssetWebhookService,
        asset_prefix: str,
        files: Sequence[str],
    ) -> list[Message]:
        self.calls.append(Call(service.service_id, asset_prefix, list(files)))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.started.set()
        try:
            stub = self._next_stub(service.service_id)
            if stub.block:
                await asyncio.Event().wait()
            if stub.delay:
                await asyncio.sleep(stub.delay)
            if stub.error is not None:
                raise stub.error
            return list(stub.messages or [])
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1


class SlowFileSystem(AbstractFileSystem):
    """A filesystem whose every file takes SLOW_FS_DELAY seconds to open."""

    protocol = "slowfs"

    def _open(self, path, mode="rb", **kwargs):
        time.sleep(SLOW_FS_DELAY)
        return io.BytesIO(b"slow content")
