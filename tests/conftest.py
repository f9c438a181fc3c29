"""Shared test fixtures for push2tweet."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from push2tweet.models import OperationDescriptor, RequestContext, Settings

TENANT_HEADERS = {
    "Fiware-Service": "blackbutton",
    "Fiware-ServicePath": "/",
}


# --- Factory functions for test data ---


def make_settings(**kwargs: Any) -> Settings:
    """Factory for Settings with sensible defaults."""
    defaults: dict[str, Any] = {
        "host": "127.0.0.1",
        "port": 0,
        "path": "/v1",
        "default_service": "blackbutton",
        "default_service_path": "/",
        "response_timeout": 0,
        "proof_of_life_interval": 60,
        "log_level": "INFO",
        "twitter_consumer_key": "consumer-key",
        "twitter_consumer_secret": "consumer-secret",
        "twitter_access_token_key": "token-key",
        "twitter_access_token_secret": "token-secret",
    }
    defaults.update(kwargs)
    return Settings(**defaults)


def make_descriptor(**kwargs: Any) -> OperationDescriptor:
    """Factory for OperationDescriptor with sensible defaults."""
    defaults: dict[str, Any] = {
        "button": "btn-1",
        "action": "press",
        "extra": "",
        "callback": None,
    }
    defaults.update(kwargs)
    return OperationDescriptor(**defaults)


def make_context(**kwargs: Any) -> RequestContext:
    """Factory for RequestContext with sensible defaults."""
    defaults: dict[str, Any] = {
        "correlation_id": "corr-1",
        "transaction_id": "1700000000000",
        "operation_type": "OP_P2T_POST",
    }
    defaults.update(kwargs)
    return RequestContext(**defaults)


def make_tweet(text: str = "hello") -> dict[str, Any]:
    return {"id": 1, "id_str": "1", "text": text}


# --- Fake HTTP endpoints ---


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def twitter_ok() -> RecordingTransport:
    """Twitter endpoint echoing the posted status back as the tweet text."""

    def handler(request: httpx.Request) -> httpx.Response:
        form = dict(httpx.QueryParams(request.content.decode()))
        return httpx.Response(200, json=make_tweet(form.get("status", "")))

    return RecordingTransport(handler)


@pytest.fixture
def twitter_error() -> RecordingTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            403, json={"errors": [{"code": 187, "message": "Status is a duplicate."}]},
        )

    return RecordingTransport(handler)


@pytest.fixture
def callback_sink() -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(200))


@pytest.fixture
def config_file(tmp_path: Path) -> Callable[[dict[str, Any]], str]:
    """Write a JSON defaults file and return its path."""

    def _write(content: dict[str, Any]) -> str:
        path = tmp_path / "push2tweet.json"
        path.write_text(json.dumps(content))
        return str(path)

    return _write
