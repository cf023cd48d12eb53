"""Custom exception classes for the webhook receiver."""

from crisp_webhooks.models.admission import Rejection
from crisp_webhooks.models.enums import RejectionReason


class WebHookError(Exception):
    """Base exception for the webhook receiver."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class WebHookRejected(WebHookError):
    """A request refused by the admission pipeline."""

    def __init__(self, rejection: Rejection):
        self.rejection = rejection
        super().__init__(rejection.message, status_code=rejection.status_code)

    @property
    def reason(self) -> RejectionReason:
        return self.rejection.reason


class ReceiverNotFoundError(WebHookError):
    """No receiver is registered under the routed name."""

    def __init__(self, receiver_name: str):
        self.receiver_name = receiver_name
        super().__init__("", status_code=404)


class ConfigurationError(WebHookError):
    """Receiver configuration could not be loaded."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)
