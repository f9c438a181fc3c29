"""Operation relay pipeline.

Pipeline stages:
1. Validate the payload into an OperationDescriptor
2. Dispatch the status update to Twitter
3. Compose the reply (immediate or deferred to the callback URL)

The first failing stage short-circuits to the responder's error path.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from push2tweet.errors import ProviderError, Push2TweetError
from push2tweet.models import (
    OperationDescriptor,
    RelayCode,
    RelayResult,
    RequestContext,
)
from push2tweet.webhook.models import WebhookResponse
from push2tweet.webhook.validator import validate

if TYPE_CHECKING:
    from push2tweet.webhook.responder import Responder
    from push2tweet.webhook.twitter import TwitterClient

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "tweet successfully published"


def format_status(descriptor: OperationDescriptor) -> str:
    return (
        f"Button with id: '{descriptor.button}', action: '{descriptor.action}'"
        f" and extra: '{descriptor.extra}' has just been pushed!"
    )


class RelayDispatcher:
    """Publishes a status per operation through the Twitter client."""

    def __init__(self, twitter: TwitterClient) -> None:
        self._twitter = twitter

    async def dispatch(
        self, descriptor: OperationDescriptor, context: RequestContext,
    ) -> RelayResult:
        status = format_status(descriptor)
        try:
            tweet = await self._twitter.update_status(status)
        except ProviderError as exc:
            logger.warning(
                "Tweet not published: %s (code=%s)", exc.message, exc.code,
                extra=context.log_extra(),
            )
            return RelayResult(
                code=RelayCode.ERROR,
                message=exc.message,
                error_code=exc.code,
            )

        logger.info("Tweet published: '%s'", tweet.get("text", status), extra=context.log_extra())
        return RelayResult(
            code=RelayCode.SUCCESS,
            message=SUCCESS_MESSAGE,
            provider_payload=tweet,
        )


class OperationRelayPipeline:
    """Runs validate -> dispatch -> respond for one request."""

    def __init__(self, dispatcher: RelayDispatcher, responder: Responder) -> None:
        self._dispatcher = dispatcher
        self._responder = responder

    async def relay(
        self,
        body: bytes,
        context: RequestContext,
        tenant_headers: Mapping[str, str],
    ) -> WebhookResponse:
        logger.debug("New request received: %r", body, extra=context.log_extra())

        descriptor: OperationDescriptor | None = None
        try:
            descriptor = validate(body)
        except Push2TweetError as exc:
            logger.warning("%s", exc.message, extra=context.log_extra())
            return self._responder.respond(exc, context, tenant_headers, descriptor)

        logger.debug("The request payload is valid: %s", descriptor, extra=context.log_extra())
        result = await self._dispatcher.dispatch(descriptor, context)
        return self._responder.respond(result, context, tenant_headers, descriptor)
