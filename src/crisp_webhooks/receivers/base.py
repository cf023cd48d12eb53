"""Receiver metadata and the registry the router dispatches through."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import BaseModel
from starlette.requests import Request

from crisp_webhooks.config import Settings
from crisp_webhooks.errors.exceptions import ReceiverNotFoundError
from crisp_webhooks.models.admission import VerificationResult
from crisp_webhooks.models.enums import BodyType
from crisp_webhooks.security.secrets import ReceiverConfiguration


class ReceiverFilter(Protocol):
    """A check run before the request body is read."""

    def verify(self, request: Request, receiver_name: str, receiver_id: str | None = None) -> VerificationResult:
        ...


FilterFactory = Callable[[ReceiverConfiguration, Settings, "WebHookReceiver"], ReceiverFilter]


@dataclass(frozen=True)
class WebHookReceiver:
    """Everything the pipeline needs to know about one provider."""

    name: str
    event_property_path: str
    request_model: type[BaseModel] | None = None
    body_type: BodyType = BodyType.JSON
    allow_missing_event: bool = False
    key_min_length: int = 32
    methods: tuple[str, ...] = ("POST",)
    filters: tuple[FilterFactory, ...] = field(default=())

    def is_applicable(self, receiver_name: str) -> bool:
        if receiver_name is None:
            raise ValueError("receiver_name is required")
        return self.name.lower() == receiver_name.lower()


class ReceiverRegistry:
    """Case-insensitive receiver lookup by name."""

    def __init__(self, receivers: list[WebHookReceiver] | None = None) -> None:
        self._receivers: dict[str, WebHookReceiver] = {}
        for receiver in receivers or []:
            self.register(receiver)

    def register(self, receiver: WebHookReceiver) -> None:
        key = receiver.name.lower()
        if key in self._receivers:
            raise ValueError(f"A receiver named '{receiver.name}' is already registered")
        self._receivers[key] = receiver

    def get(self, receiver_name: str) -> WebHookReceiver:
        """Return the receiver or raise ReceiverNotFoundError (404)."""
        receiver = self._receivers.get(receiver_name.lower())
        if receiver is None:
            raise ReceiverNotFoundError(receiver_name)
        return receiver

    def names(self) -> list[str]:
        return [receiver.name for receiver in self._receivers.values()]

    def __iter__(self) -> Iterator[WebHookReceiver]:
        return iter(list(self._receivers.values()))

    def __len__(self) -> int:
        return len(self._receivers)
