"""Locate the event name inside a parsed webhook body."""

from collections.abc import Mapping
from typing import Any

from crisp_webhooks.models.admission import Rejection
from crisp_webhooks.models.enums import RejectionReason


def invalid_body_rejection(receiver_name: str) -> Rejection:
    return Rejection(
        RejectionReason.INVALID_BODY,
        400,
        f"The '{receiver_name}' WebHook receiver does not support an invalid request body.",
    )


def _lookup_ignore_case(node: Mapping[str, Any], name: str) -> Any:
    if name in node:
        return node[name]
    folded = name.casefold()
    for key, value in node.items():
        if isinstance(key, str) and key.casefold() == folded:
            return value
    return None


def extract_event(body: Any, property_path: str) -> str | None:
    """Return the event name at ``property_path`` (dotted), or None.

    Intermediate segments must match exactly; the last one is matched
    case-insensitively. A list value yields its first string entry.
    """
    if not property_path:
        raise ValueError("property_path is required")

    *parents, leaf = property_path.split(".")
    node = body
    for segment in parents:
        if not isinstance(node, Mapping):
            return None
        node = node.get(segment)
    if not isinstance(node, Mapping):
        return None

    value = _lookup_ignore_case(node, leaf)
    if isinstance(value, list):
        value = next((item for item in value if isinstance(item, str) and item), None)
    if isinstance(value, str) and value:
        return value
    return None


def require_event(receiver_name: str, body: Any, property_path: str, allow_missing: bool) -> tuple[str | None, Rejection | None]:
    """Apply the receiver's missing-event policy to :func:`extract_event`."""
    event_name = extract_event(body, property_path)
    if event_name is None and not allow_missing:
        return None, invalid_body_rejection(receiver_name)
    return event_name, None
