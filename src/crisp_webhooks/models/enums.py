"""String enums shared by the admission pipeline."""

from enum import StrEnum


class VerificationOutcome(StrEnum):
    ADMITTED = "admitted"
    REJECTED_INSECURE_TRANSPORT = "rejected_insecure_transport"
    REJECTED_MISSING_KEY = "rejected_missing_key"
    REJECTED_UNKNOWN_RECEIVER = "rejected_unknown_receiver"
    REJECTED_KEY_MISMATCH = "rejected_key_mismatch"


class RejectionReason(StrEnum):
    """Every way the dispatch pipeline can refuse a request, key checks included."""

    METHOD_NOT_ALLOWED = "method_not_allowed"
    INSECURE_TRANSPORT = "insecure_transport"
    MISSING_KEY = "missing_key"
    UNKNOWN_RECEIVER = "unknown_receiver"
    KEY_MISMATCH = "key_mismatch"
    EMPTY_BODY = "empty_body"
    UNSUPPORTED_CONTENT_TYPE = "unsupported_content_type"
    INVALID_BODY = "invalid_body"
    INVALID_PAYLOAD = "invalid_payload"
    NO_ACTION = "no_action"


class BodyType(StrEnum):
    JSON = "json"
