"""Tests for the Twitter status-update client."""

from __future__ import annotations

import httpx
import pytest

from push2tweet.errors import ProviderError
from push2tweet.webhook.twitter import STATUS_UPDATE_URL, TwitterClient
from tests.conftest import RecordingTransport, make_settings


def _make_client(transport: httpx.AsyncBaseTransport | None = None) -> TwitterClient:
    return TwitterClient.from_settings(make_settings(), transport=transport)


class TestOAuthSignature:
    def test_matches_reference_signature(self) -> None:
        """Reference request from Twitter's "Creating a signature" guide."""
        client = TwitterClient(
            consumer_key="xvz1evFS4wEEPTGEFPHBog",
            consumer_secret="kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw",
            access_token_key="370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb",
            access_token_secret="LswwdoUaIvS8ltyTt5jkRh4J50vUPVVHtR2YPi5kE",
        )
        header = client.sign(
            "post",
            STATUS_UPDATE_URL,
            {
                "status": "Hello Ladies + Gentlemen, a signed OAuth request!",
                "include_entities": "true",
            },
            nonce="kYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg",
            timestamp="1318622958",
        )
        assert header.startswith("OAuth ")
        assert 'oauth_signature="hCtSmYh%2BiHYCEqBWrE7C7hYmtUk%3D"' in header
        assert 'oauth_consumer_key="xvz1evFS4wEEPTGEFPHBog"' in header
        assert 'oauth_signature_method="HMAC-SHA1"' in header

    def test_fresh_nonce_per_call(self) -> None:
        client = _make_client()
        first = client.sign("POST", STATUS_UPDATE_URL, {"status": "a"})
        second = client.sign("POST", STATUS_UPDATE_URL, {"status": "a"})
        assert first != second


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_posts_status_form(self, twitter_ok: RecordingTransport) -> None:
        tweet = await _make_client(twitter_ok).update_status("hello world & more")

        assert tweet["text"] == "hello world & more"
        request = twitter_ok.requests[0]
        assert request.method == "POST"
        assert str(request.url) == STATUS_UPDATE_URL
        assert request.headers["authorization"].startswith("OAuth ")
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert request.content == b"status=hello%20world%20%26%20more"

    @pytest.mark.asyncio
    async def test_api_error_carries_first_error(
        self, twitter_error: RecordingTransport,
    ) -> None:
        with pytest.raises(ProviderError) as exc_info:
            await _make_client(twitter_error).update_status("dup")
        assert exc_info.value.code == "187"
        assert exc_info.value.message == "Status is a duplicate."
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_error_without_details_uses_status(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={}))
        with pytest.raises(ProviderError) as exc_info:
            await _make_client(transport).update_status("x")
        assert exc_info.value.code == "ERROR"
        assert "HTTP 500" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_json_response(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ProviderError, match="Malformed"):
            await _make_client(transport).update_status("x")

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderError, match="unavailable"):
            await _make_client(httpx.MockTransport(handler)).update_status("x")

    @pytest.mark.asyncio
    async def test_single_attempt(self, twitter_error: RecordingTransport) -> None:
        with pytest.raises(ProviderError):
            await _make_client(twitter_error).update_status("x")
        assert len(twitter_error.requests) == 1
