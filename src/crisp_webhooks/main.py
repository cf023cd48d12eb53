"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from crisp_webhooks import __version__
from crisp_webhooks.actions.crisp import register_crisp_actions
from crisp_webhooks.actions.registry import ActionRegistry
from crisp_webhooks.config import Settings, settings as default_settings
from crisp_webhooks.logging_config import configure_logging
from crisp_webhooks.receivers.base import ReceiverRegistry
from crisp_webhooks.receivers.crisp import CRISP_RECEIVER
from crisp_webhooks.receivers.pipeline import WebHookPipeline
from crisp_webhooks.security.secrets import ReceiverConfiguration

# Configure logging at import time
configure_logging(log_level=default_settings.log_level, json_output=default_settings.json_logs)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report the receiver configuration once at startup."""
    app_settings: Settings = app.state.settings
    pipeline: WebHookPipeline = app.state.pipeline

    if app_settings.local_mode:
        logger.info("Local mode: HTTPS is not required for incoming WebHooks")
    elif app_settings.disable_https_check:
        logger.warning("HTTPS check disabled: WebHook secrets may be sent in clear text")

    for receiver in pipeline.registry:
        app.state.receiver_config.report([receiver.name], receiver.key_min_length)

    logger.info("crisp-webhooks started (receivers=%s)", ", ".join(pipeline.registry.names()))
    yield
    logger.info("crisp-webhooks shutdown complete")


def create_app(
    settings: Settings | None = None,
    receivers: ReceiverRegistry | None = None,
    actions: ActionRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Receiver configuration is read here, once; requests only see the
    resulting read-only lookup.
    """
    settings = settings or default_settings
    receivers = receivers or ReceiverRegistry([CRISP_RECEIVER])
    actions = actions or register_crisp_actions(ActionRegistry())

    app = FastAPI(
        title="Crisp WebHooks",
        version=__version__,
        description="Admission pipeline and receiver for Crisp webhook notifications.",
        lifespan=lifespan,
    )

    receiver_config = ReceiverConfiguration.from_settings(settings)
    app.state.settings = settings
    app.state.receiver_config = receiver_config
    app.state.pipeline = WebHookPipeline(receivers, receiver_config, settings)
    app.state.actions = actions

    from crisp_webhooks.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    # Register error handlers
    from crisp_webhooks.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from crisp_webhooks.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
