"""Value objects produced by the admission pipeline."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from crisp_webhooks.models.enums import RejectionReason, VerificationOutcome

_OUTCOME_BY_REASON = {
    RejectionReason.INSECURE_TRANSPORT: VerificationOutcome.REJECTED_INSECURE_TRANSPORT,
    RejectionReason.MISSING_KEY: VerificationOutcome.REJECTED_MISSING_KEY,
    RejectionReason.UNKNOWN_RECEIVER: VerificationOutcome.REJECTED_UNKNOWN_RECEIVER,
    RejectionReason.KEY_MISMATCH: VerificationOutcome.REJECTED_KEY_MISMATCH,
}


@dataclass(frozen=True)
class Rejection:
    """A terminal refusal: HTTP status plus the plain-text body sent to the caller."""

    reason: RejectionReason
    status_code: int
    message: str = ""


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of the key verification filter for a single request."""

    outcome: VerificationOutcome
    rejection: Rejection | None = None

    @property
    def admitted(self) -> bool:
        return self.outcome is VerificationOutcome.ADMITTED

    @classmethod
    def admit(cls) -> "VerificationResult":
        return cls(VerificationOutcome.ADMITTED)

    @classmethod
    def reject(cls, rejection: Rejection) -> "VerificationResult":
        outcome = _OUTCOME_BY_REASON.get(rejection.reason)
        if outcome is None:
            raise ValueError(f"'{rejection.reason}' is not a key verification rejection")
        return cls(outcome, rejection)


@dataclass(frozen=True)
class EventEnvelope:
    """What an admitted request hands to application code."""

    receiver_name: str
    receiver_id: str
    event_name: str | None
    payload: BaseModel | dict[str, Any]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)
