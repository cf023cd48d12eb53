"""The Crisp receiver.

Crisp calls ``https://{host}/webhooks/incoming/crisp[/{id}]?key={secret}``
with a JSON body whose top-level ``event`` names the notification. The
secret must be 32 to 128 characters long.
"""

from crisp_webhooks.config import Settings
from crisp_webhooks.models.crisp import CrispRequestData
from crisp_webhooks.receivers.base import WebHookReceiver
from crisp_webhooks.security.key_filter import KeyVerificationFilter
from crisp_webhooks.security.secrets import ReceiverConfiguration

RECEIVER_NAME = "crisp"
EVENT_BODY_PROPERTY_PATH = "event"
KEY_PARAMETER_MIN_LENGTH = 32


def _key_verification(config: ReceiverConfiguration, settings: Settings, receiver: WebHookReceiver) -> KeyVerificationFilter:
    return KeyVerificationFilter(config, settings, key_min_length=receiver.key_min_length)


CRISP_RECEIVER = WebHookReceiver(
    name=RECEIVER_NAME,
    event_property_path=EVENT_BODY_PROPERTY_PATH,
    request_model=CrispRequestData,
    allow_missing_event=False,
    key_min_length=KEY_PARAMETER_MIN_LENGTH,
    filters=(_key_verification,),
)
