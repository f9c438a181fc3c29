"""Twitter status-update client.

Posts statuses through the v1.1 REST API, signing each request with
OAuth 1.0a (HMAC-SHA1) from the four configured credentials. A single
attempt is made per call; any failure surfaces as ProviderError.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import time
import uuid
from typing import Any
from urllib.parse import quote

import httpx

from push2tweet.errors import ProviderError
from push2tweet.models import Settings

logger = logging.getLogger(__name__)

STATUS_UPDATE_URL = "https://api.twitter.com/1.1/statuses/update.json"


def _percent(value: str) -> str:
    """RFC 3986 percent-encoding as required by OAuth 1.0a."""
    return quote(value, safe="~")


class TwitterClient:
    """Minimal async client for ``statuses/update``."""

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        access_token_key: str,
        access_token_secret: str,
        api_url: str = STATUS_UPDATE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._consumer_key = consumer_key
        self._consumer_secret = consumer_secret
        self._token_key = access_token_key
        self._token_secret = access_token_secret
        self._api_url = api_url
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None,
    ) -> TwitterClient:
        return cls(
            consumer_key=settings.twitter_consumer_key,
            consumer_secret=settings.twitter_consumer_secret,
            access_token_key=settings.twitter_access_token_key,
            access_token_secret=settings.twitter_access_token_secret,
            transport=transport,
        )

    def sign(
        self,
        method: str,
        url: str,
        params: dict[str, str],
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> str:
        """Build the OAuth 1.0a ``Authorization`` header for a request."""
        oauth_params = {
            "oauth_consumer_key": self._consumer_key,
            "oauth_nonce": nonce or uuid.uuid4().hex,
            "oauth_signature_method": "HMAC-SHA1",
            "oauth_timestamp": timestamp or str(int(time.time())),
            "oauth_token": self._token_key,
            "oauth_version": "1.0",
        }
        encoded = sorted(
            (_percent(k), _percent(v)) for k, v in {**params, **oauth_params}.items()
        )
        param_string = "&".join(f"{k}={v}" for k, v in encoded)
        base_string = "&".join(
            [method.upper(), _percent(url), _percent(param_string)],
        )
        key = f"{_percent(self._consumer_secret)}&{_percent(self._token_secret)}"
        digest = hmac.new(key.encode(), base_string.encode(), hashlib.sha1).digest()
        oauth_params["oauth_signature"] = base64.b64encode(digest).decode()

        return "OAuth " + ", ".join(
            f'{_percent(k)}="{_percent(v)}"' for k, v in sorted(oauth_params.items())
        )

    async def update_status(self, status: str) -> dict[str, Any]:
        """Publish a status and return the tweet object Twitter responds with."""
        params = {"status": status}
        headers = {
            "Authorization": self.sign("POST", self._api_url, params),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        body = "&".join(f"{_percent(k)}={_percent(v)}" for k, v in params.items())

        try:
            async with httpx.AsyncClient(verify=True, transport=self._transport) as client:
                resp = await client.post(self._api_url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Twitter API unavailable: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderError(
                f"Malformed Twitter API response (HTTP {resp.status_code})",
                status_code=resp.status_code,
            ) from exc

        if resp.status_code >= 400:
            code, message = self._first_error(payload)
            raise ProviderError(
                message or f"Twitter API responded with HTTP {resp.status_code}",
                code=code,
                status_code=resp.status_code,
            )
        if not isinstance(payload, dict):
            raise ProviderError(
                "Malformed Twitter API response (not an object)",
                status_code=resp.status_code,
            )
        return payload

    @staticmethod
    def _first_error(payload: object) -> tuple[str | None, str | None]:
        """Extract code and message of the first entry of ``errors``."""
        if not isinstance(payload, dict):
            return None, None
        errors = payload.get("errors")
        if not isinstance(errors, list) or not errors or not isinstance(errors[0], dict):
            return None, None
        first = errors[0]
        code = first.get("code")
        message = first.get("message")
        return (
            str(code) if code is not None else None,
            str(message) if message else None,
        )
