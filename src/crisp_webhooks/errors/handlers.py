"""FastAPI exception handlers producing plain-text webhook responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from crisp_webhooks.errors.exceptions import ReceiverNotFoundError, WebHookError, WebHookRejected
from crisp_webhooks.receivers.pipeline import method_rejection

logger = logging.getLogger(__name__)

INCOMING_PATH_PREFIX = "/webhooks/incoming/"


def _render(exc: WebHookError) -> Response:
    if not exc.message:
        return Response(status_code=exc.status_code)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(WebHookError)
    async def webhook_error_handler(request: Request, exc: WebHookError):
        trace_id = getattr(request.state, "trace_id", "unknown")
        if isinstance(exc, WebHookRejected):
            logger.info(
                "webhook_rejected reason=%s status=%d method=%s trace_id=%s",
                exc.reason,
                exc.status_code,
                request.method,
                trace_id,
            )
        return _render(exc)

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
        """Give methods the incoming routes don't list the receiver's own 405 message."""
        receiver_name = request.path_params.get("receiver_name")
        if exc.status_code != 405 or not receiver_name or not request.url.path.startswith(INCOMING_PATH_PREFIX):
            return await http_exception_handler(request, exc)

        try:
            receiver = request.app.state.pipeline.registry.get(receiver_name)
        except ReceiverNotFoundError as not_found:
            return _render(not_found)
        rejection = method_rejection(receiver, request.method)
        if rejection is None:
            return await http_exception_handler(request, exc)
        response = _render(WebHookRejected(rejection))
        response.headers.update(exc.headers or {})
        return response
