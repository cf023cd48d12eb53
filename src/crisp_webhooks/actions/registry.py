"""Registry mapping admitted (receiver, id) pairs to application actions."""

import inspect
from collections.abc import Awaitable, Callable

from fastapi.responses import Response

from crisp_webhooks.errors.exceptions import WebHookRejected
from crisp_webhooks.models.admission import EventEnvelope, Rejection
from crisp_webhooks.models.enums import RejectionReason

Action = Callable[[EventEnvelope], Awaitable[Response | None] | Response | None]


class ActionRegistry:
    """Actions bound to a specific receiver id win over the receiver's catch-all."""

    def __init__(self) -> None:
        self._actions: dict[tuple[str, str | None], Action] = {}

    def register(self, receiver_name: str, receiver_id: str | None = None) -> Callable[[Action], Action]:
        key = (receiver_name.lower(), receiver_id.lower() if receiver_id else None)

        def _decorator(action: Action) -> Action:
            if key in self._actions:
                raise ValueError(f"An action is already registered for {receiver_name}/{receiver_id or '*'}")
            self._actions[key] = action
            return action

        return _decorator

    def resolve(self, receiver_name: str, receiver_id: str | None) -> Action | None:
        name = receiver_name.lower()
        if receiver_id:
            action = self._actions.get((name, receiver_id.lower()))
            if action is not None:
                return action
        return self._actions.get((name, None))

    async def dispatch(self, envelope: EventEnvelope) -> Response:
        """Invoke the matching action; no action means 404 with an empty body."""
        action = self.resolve(envelope.receiver_name, envelope.receiver_id)
        if action is None:
            raise WebHookRejected(Rejection(RejectionReason.NO_ACTION, 404))

        result = action(envelope)
        if inspect.isawaitable(result):
            result = await result
        return result if result is not None else Response(status_code=200)
