"""Shared test fixtures."""

from urllib.parse import urlsplit

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from crisp_webhooks.config import Settings
from crisp_webhooks.security.secrets import ReceiverConfiguration

DEFAULT_SECRET = "01234567890123456789012345678901"
IT_SECRET = "abcdefghijklmnopqrstuvwxyz0123456789ABCD"


@pytest.fixture
def settings() -> Settings:
    """Production-like settings: HTTPS required, two Crisp ids configured."""
    return Settings(
        _env_file=None,
        local_mode=False,
        disable_https_check=False,
        json_logs=False,
        secret_keys={"crisp": {"default": DEFAULT_SECRET, "It": IT_SECRET}},
    )


@pytest.fixture
def receiver_config(settings) -> ReceiverConfiguration:
    return ReceiverConfiguration.from_settings(settings)


@pytest.fixture
def app(settings):
    """Create a test application instance from explicit settings."""
    from crisp_webhooks.main import create_app

    return create_app(settings=settings)


@pytest.fixture
async def client(app):
    """Async HTTPS test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as ac:
        yield ac


@pytest.fixture
def make_request():
    """Build a bare Starlette request for unit-testing filters and steps."""

    def _make(
        url: str = f"https://test/webhooks/incoming/crisp?key={DEFAULT_SECRET}",
        method: str = "POST",
        body: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> Request:
        parts = urlsplit(url)
        port = parts.port or (443 if parts.scheme == "https" else 80)
        raw_headers = [(b"host", (parts.hostname or "test").encode())]
        raw_headers += [(name.lower().encode(), value.encode()) for name, value in (headers or {}).items()]
        scope = {
            "type": "http",
            "http_version": "1.1",
            "method": method,
            "scheme": parts.scheme,
            "server": (parts.hostname, port),
            "path": parts.path,
            "root_path": "",
            "query_string": parts.query.encode(),
            "headers": raw_headers,
        }
        sent = False

        async def receive():
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _make
