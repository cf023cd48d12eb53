"""Ordered admission pipeline for incoming webhook requests.

Each step inspects an :class:`AdmissionContext` and either returns None to
continue or a :class:`Rejection` that ends the request. Request steps run
before the body is read; body steps run after. The first rejection is raised
as :class:`WebHookRejected`.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError
from starlette.requests import Request

from crisp_webhooks.config import Settings
from crisp_webhooks.errors.exceptions import WebHookRejected
from crisp_webhooks.events.extractor import invalid_body_rejection, require_event
from crisp_webhooks.models.admission import EventEnvelope, Rejection
from crisp_webhooks.models.enums import BodyType, RejectionReason
from crisp_webhooks.receivers.base import ReceiverFilter, ReceiverRegistry, WebHookReceiver
from crisp_webhooks.security.secrets import ReceiverConfiguration

logger = logging.getLogger(__name__)

_JSON_MEDIA_TYPES = {"application/json", "text/json"}


@dataclass
class AdmissionContext:
    """Per-request state threaded through the steps. Discarded after the request."""

    request: Request
    receiver: WebHookReceiver
    receiver_id: str
    filters: list[ReceiverFilter]
    body: bytes = b""
    document: dict[str, Any] = field(default_factory=dict)
    event_name: str | None = None
    payload: Any = None


Step = Callable[[AdmissionContext], Rejection | None]


def method_rejection(receiver: WebHookReceiver, method: str) -> Rejection | None:
    method = method.upper()
    if method in receiver.methods:
        return None
    return Rejection(
        RejectionReason.METHOD_NOT_ALLOWED,
        405,
        f"The '{receiver.name}' WebHook receiver does not support the HTTP '{method}' method.",
    )


def check_method(ctx: AdmissionContext) -> Rejection | None:
    return method_rejection(ctx.receiver, ctx.request.method)


def run_filters(ctx: AdmissionContext) -> Rejection | None:
    for receiver_filter in ctx.filters:
        result = receiver_filter.verify(ctx.request, ctx.receiver.name, ctx.receiver_id)
        if not result.admitted:
            return result.rejection
    return None


def check_body_present(ctx: AdmissionContext) -> Rejection | None:
    if ctx.body or ctx.receiver.allow_missing_event:
        return None
    return Rejection(
        RejectionReason.EMPTY_BODY,
        400,
        f"The '{ctx.receiver.name}' WebHook receiver does not support an empty request body.",
    )


def is_json_media_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in _JSON_MEDIA_TYPES or media_type.endswith("+json")


def check_content_type(ctx: AdmissionContext) -> Rejection | None:
    if not ctx.body or ctx.receiver.body_type is not BodyType.JSON:
        return None
    content_type = ctx.request.headers.get("content-type")
    if is_json_media_type(content_type):
        return None
    return Rejection(
        RejectionReason.UNSUPPORTED_CONTENT_TYPE,
        415,
        f"The '{ctx.receiver.name}' WebHook receiver does not support content type '{content_type or ''}'.",
    )


def parse_body(ctx: AdmissionContext) -> Rejection | None:
    if not ctx.body:
        return None
    try:
        document = json.loads(ctx.body)
    except ValueError:
        logger.info("Rejected unparseable '%s' request body (%d bytes)", ctx.receiver.name, len(ctx.body))
        return invalid_body_rejection(ctx.receiver.name)
    if not isinstance(document, dict):
        return invalid_body_rejection(ctx.receiver.name)
    ctx.document = document
    return None


def extract_event_name(ctx: AdmissionContext) -> Rejection | None:
    ctx.event_name, rejection = require_event(
        ctx.receiver.name,
        ctx.document,
        ctx.receiver.event_property_path,
        ctx.receiver.allow_missing_event,
    )
    return rejection


def bind_payload(ctx: AdmissionContext) -> Rejection | None:
    model = ctx.receiver.request_model
    if model is None:
        ctx.payload = ctx.document
        return None
    try:
        ctx.payload = model.model_validate(ctx.document)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}" for error in exc.errors()
        )
        return Rejection(
            RejectionReason.INVALID_PAYLOAD,
            400,
            f"The '{ctx.receiver.name}' WebHook request body is not valid: {problems}",
        )
    return None


REQUEST_STEPS: tuple[Step, ...] = (check_method, run_filters)
BODY_STEPS: tuple[Step, ...] = (check_body_present, check_content_type, parse_body, extract_event_name, bind_payload)


class WebHookPipeline:
    """Admit or reject requests for every registered receiver.

    Filters are instantiated once per receiver from the startup configuration;
    nothing here is mutated per request.
    """

    def __init__(self, registry: ReceiverRegistry, config: ReceiverConfiguration, settings: Settings) -> None:
        self.registry = registry
        self._filters = {
            receiver.name.lower(): [factory(config, settings, receiver) for factory in receiver.filters]
            for receiver in registry
        }

    async def admit(self, request: Request, receiver_name: str, receiver_id: str | None = None) -> EventEnvelope:
        """Run every step for one request and return its envelope, or raise WebHookRejected."""
        receiver = self.registry.get(receiver_name)
        ctx = AdmissionContext(
            request=request,
            receiver=receiver,
            receiver_id=receiver_id or "",
            filters=self._filters[receiver.name.lower()],
        )

        _run_steps(ctx, REQUEST_STEPS)
        ctx.body = await request.body()
        _run_steps(ctx, BODY_STEPS)

        return EventEnvelope(
            receiver_name=receiver.name,
            receiver_id=ctx.receiver_id,
            event_name=ctx.event_name,
            payload=ctx.payload,
            raw=ctx.document,
        )


def _run_steps(ctx: AdmissionContext, steps: tuple[Step, ...]) -> None:
    for step in steps:
        rejection = step(ctx)
        if rejection is not None:
            raise WebHookRejected(rejection)
