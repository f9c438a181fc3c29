"""Data models for the operation relay pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class WebhookResponse:
    """Pipeline reply to hand back to the HTTP layer.

    ``body`` is None for the empty acknowledgement sent when the result is
    delivered to a callback URL instead.
    """

    body: dict[str, Any] | None
    status_code: int = 200
