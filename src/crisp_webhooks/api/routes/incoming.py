"""Incoming webhook endpoint: ``/webhooks/incoming/{receiver_name}[/{receiver_id}]?key=...``."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import Response

from crisp_webhooks.dependencies import Actions, Pipeline, TraceId
from crisp_webhooks.logging_config import bind_request_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks/incoming", tags=["WebHooks"])

# Common methods reach the pipeline; any other method gets the same 405 text from
# the StarletteHTTPException handler in crisp_webhooks.errors.handlers.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# Trailing-slash variants are routed directly; senders may not follow a 307.
@router.api_route("/{receiver_name}", methods=_ALL_METHODS, response_class=Response)
@router.api_route("/{receiver_name}/", methods=_ALL_METHODS, response_class=Response, include_in_schema=False)
@router.api_route("/{receiver_name}/{receiver_id}", methods=_ALL_METHODS, response_class=Response)
@router.api_route("/{receiver_name}/{receiver_id}/", methods=_ALL_METHODS, response_class=Response, include_in_schema=False)
async def receive_webhook(
    request: Request,
    receiver_name: str,
    pipeline: Pipeline,
    actions: Actions,
    trace_id: TraceId,
) -> Response:
    """Admit the request, then hand the event to the registered action."""
    # Read from the path only; a query-string receiver_id must not select a configuration.
    receiver_id = request.path_params.get("receiver_id")
    bind_request_context(trace_id, receiver=receiver_name, receiver_id=receiver_id)

    envelope = await pipeline.admit(request, receiver_name, receiver_id)
    logger.info("Admitted '%s' WebHook request for event '%s'", envelope.receiver_name, envelope.event_name)
    return await actions.dispatch(envelope)
