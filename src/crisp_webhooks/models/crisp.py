"""Pydantic model for the Crisp webhook request body."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class CrispRequestData(BaseModel):
    """A Crisp notification.

    ``timestamp`` is a Unix time; pydantic reads values above ~2e10 as
    milliseconds, which is what Crisp sends.
    """

    model_config = ConfigDict(extra="allow")

    website_id: str | None = None
    event: str | None = None
    data: dict[str, Any] | None = None
    timestamp: datetime | None = None
