"""Key verification filter: the admission decision for ``?key=`` receivers.

Checks run in a fixed order and the first failure wins:

1. transport must be HTTPS (403)
2. the ``key`` query parameter must be present (400)
3. a valid secret must be configured for the routed receiver id (404, empty body)
4. the supplied key must match that secret, compared in constant time (400)

The unknown-id and wrong-key cases differ only in status code so a caller
probing ids learns nothing from the response text.
"""

import logging

from starlette.requests import Request

from crisp_webhooks.config import Settings
from crisp_webhooks.models.admission import Rejection, VerificationResult
from crisp_webhooks.models.enums import RejectionReason
from crisp_webhooks.security.compare import secret_equal
from crisp_webhooks.security.secrets import DEFAULT_RECEIVER_ID, ReceiverConfiguration
from crisp_webhooks.security.transport import ensure_secure_connection

logger = logging.getLogger(__name__)

KEY_QUERY_PARAMETER = "key"
KEY_MIN_LENGTH = 32


def supplied_key(request: Request) -> str | None:
    """Return the ``key`` query value, matching the parameter name case-insensitively.

    Repeated parameters are joined with ``,`` so ``?key=a&key=b`` can never
    match a single configured secret.
    """
    values = [value for name, value in request.query_params.multi_items() if name.lower() == KEY_QUERY_PARAMETER]
    return ",".join(values) if values else None


class KeyVerificationFilter:
    """Verify the ``key`` query parameter against the receiver's configured secret."""

    def __init__(
        self,
        config: ReceiverConfiguration,
        settings: Settings,
        key_min_length: int = KEY_MIN_LENGTH,
    ) -> None:
        self._config = config
        self._settings = settings
        self._key_min_length = key_min_length

    def verify(self, request: Request, receiver_name: str, receiver_id: str | None = None) -> VerificationResult:
        """Return the verification outcome for one request. Has no side effects besides logging."""
        if request is None:
            raise ValueError("request is required")
        if not receiver_name:
            raise ValueError("receiver_name is required")

        rejection = ensure_secure_connection(receiver_name, request, self._settings)
        if rejection is not None:
            return VerificationResult.reject(rejection)

        key = supplied_key(request)
        if not key:
            logger.warning(
                "A '%s' WebHook verification request must contain a '%s' query parameter.",
                receiver_name,
                KEY_QUERY_PARAMETER,
            )
            return VerificationResult.reject(
                Rejection(
                    RejectionReason.MISSING_KEY,
                    400,
                    f"A '{receiver_name}' WebHook request must contain a '{KEY_QUERY_PARAMETER}' query parameter.",
                )
            )

        secret_key = self._config.resolve_secret(receiver_name, receiver_id, self._key_min_length)
        if secret_key is None:
            return VerificationResult.reject(Rejection(RejectionReason.UNKNOWN_RECEIVER, 404))

        if not secret_equal(key, secret_key):
            logger.warning(
                "The '%s' query parameter provided in the HTTP request did not match the expected value "
                "(receiver '%s', instance '%s').",
                KEY_QUERY_PARAMETER,
                receiver_name,
                receiver_id or DEFAULT_RECEIVER_ID,
            )
            return VerificationResult.reject(
                Rejection(
                    RejectionReason.KEY_MISMATCH,
                    400,
                    f"The '{KEY_QUERY_PARAMETER}' query parameter provided in the HTTP request "
                    "did not match the expected value.",
                )
            )

        return VerificationResult.admit()
