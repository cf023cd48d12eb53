"""Application actions for admitted Crisp notifications."""

import logging

from crisp_webhooks.actions.registry import ActionRegistry
from crisp_webhooks.models.admission import EventEnvelope
from crisp_webhooks.receivers.crisp import RECEIVER_NAME

logger = logging.getLogger(__name__)

IT_RECEIVER_ID = "It"


async def crisp_for_it(envelope: EventEnvelope) -> None:
    """Notifications routed to ``/webhooks/incoming/crisp/it``."""
    logger.info("Crisp / '%s' received event '%s'.", IT_RECEIVER_ID, envelope.event_name)


async def crisp(envelope: EventEnvelope) -> None:
    """Every other Crisp receiver id, including the default one."""
    logger.info(
        "Crisp / '%s' received event '%s' (website %s).",
        envelope.receiver_id or "default",
        envelope.event_name,
        getattr(envelope.payload, "website_id", None),
    )


def register_crisp_actions(registry: ActionRegistry) -> ActionRegistry:
    registry.register(RECEIVER_NAME, IT_RECEIVER_ID)(crisp_for_it)
    registry.register(RECEIVER_NAME)(crisp)
    return registry
