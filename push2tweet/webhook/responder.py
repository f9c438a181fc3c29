"""Response composer.

Errors and callback-less results are replied immediately. Results of
requests carrying a ``callback`` URL are acknowledged with an empty reply
and POSTed to the callback once the configured response timeout elapses.
Callback delivery is fire-and-forget: its outcome is logged, never retried.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Mapping
from typing import Any

import httpx

from push2tweet.errors import Push2TweetError
from push2tweet.models import OperationDescriptor, RelayResult, RequestContext
from push2tweet.webhook.models import WebhookResponse

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "Some error occurred when sending the tweet"


class Responder:
    """Composes replies and schedules deferred callback deliveries."""

    def __init__(
        self,
        response_timeout_ms: int,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._response_timeout = response_timeout_ms / 1000
        self._transport = transport
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_callbacks(self) -> int:
        return len(self._pending)

    def compose(
        self,
        outcome: RelayResult | Push2TweetError,
        descriptor: OperationDescriptor | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "externalId": random.randint(1, 100),
            "buttonId": (descriptor.button if descriptor else None) or "unknown",
        }
        if isinstance(outcome, Push2TweetError):
            body["details"] = {
                "code": outcome.code or "ERROR",
                "message": outcome.message or FALLBACK_ERROR_MESSAGE,
            }
        elif not outcome.ok:
            body["details"] = {
                "code": outcome.error_code or outcome.code.value,
                "message": outcome.message or FALLBACK_ERROR_MESSAGE,
            }
        else:
            body["details"] = {
                "code": outcome.code.value,
                "tweet": outcome.provider_payload,
            }
        return body

    def respond(
        self,
        outcome: RelayResult | Push2TweetError,
        context: RequestContext,
        tenant_headers: Mapping[str, str],
        descriptor: OperationDescriptor | None,
    ) -> WebhookResponse:
        body = self.compose(outcome, descriptor)
        failed = isinstance(outcome, Push2TweetError) or not outcome.ok

        if failed:
            logger.warning("Responding with: %s", body, extra=context.log_extra())
            return WebhookResponse(body=body)

        logger.debug("Responding with: %s", body, extra=context.log_extra())
        if descriptor is not None and descriptor.callback:
            self._schedule_callback(descriptor.callback, body, tenant_headers, context)
            return WebhookResponse(body=None)
        return WebhookResponse(body=body)

    def _schedule_callback(
        self,
        url: str,
        body: dict[str, Any],
        tenant_headers: Mapping[str, str],
        context: RequestContext,
    ) -> None:
        task = asyncio.create_task(
            self._deliver_callback(url, body, tenant_headers, context),
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver_callback(
        self,
        url: str,
        body: dict[str, Any],
        tenant_headers: Mapping[str, str],
        context: RequestContext,
    ) -> None:
        await asyncio.sleep(self._response_timeout)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            **tenant_headers,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(url, json=body, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                "Callback to %s failed: %s", url, exc, extra=context.log_extra(),
            )
            return
        logger.debug(
            "Callback to %s answered with HTTP %d", url, resp.status_code,
            extra=context.log_extra(),
        )

    async def drain(self) -> None:
        """Wait for every scheduled callback delivery to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
