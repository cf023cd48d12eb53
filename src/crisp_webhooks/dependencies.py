"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request

from crisp_webhooks.actions.registry import ActionRegistry
from crisp_webhooks.receivers.pipeline import WebHookPipeline


def get_pipeline(request: Request) -> WebHookPipeline:
    """Return the admission pipeline built at startup."""
    return request.app.state.pipeline


def get_actions(request: Request) -> ActionRegistry:
    """Return the application action registry."""
    return request.app.state.actions


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")


# Type aliases for dependency injection
Pipeline = Annotated[WebHookPipeline, Depends(get_pipeline)]
Actions = Annotated[ActionRegistry, Depends(get_actions)]
TraceId = Annotated[str, Depends(get_trace_id)]
