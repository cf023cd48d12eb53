"""HTTPS enforcement for incoming webhook requests."""

import logging

from starlette.requests import Request

from crisp_webhooks.config import Settings
from crisp_webhooks.models.admission import Rejection
from crisp_webhooks.models.enums import RejectionReason

logger = logging.getLogger(__name__)

SECURE_SCHEME = "https"


def ensure_secure_connection(receiver_name: str, request: Request, settings: Settings) -> Rejection | None:
    """Return None when the request arrived over HTTPS (or the check is waived), else a 403 rejection."""
    if not settings.https_required:
        return None

    if request.url.scheme.lower() == SECURE_SCHEME:
        return None

    logger.warning(
        "The '%s' WebHook receiver requires HTTPS; rejected a '%s' request",
        receiver_name,
        request.url.scheme,
    )
    return Rejection(
        RejectionReason.INSECURE_TRANSPORT,
        403,
        f"The WebHook receiver '{receiver_name}' requires HTTPS in order to be secure. "
        f"Please register a WebHook URI of type '{SECURE_SCHEME}'.",
    )
