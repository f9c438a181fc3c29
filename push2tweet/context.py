"""Per-request logging context: correlator, transaction id and operation tag."""

from __future__ import annotations

import time

from starlette.requests import Request

from push2tweet.models import OperationType, RequestContext

CORRELATOR_HEADER = "unica-correlator"
NOT_AVAILABLE = "NA"


def hash_code(text: str) -> int:
    """32-bit signed ``h = h * 31 + c`` hash over the UTF-16 code units of text."""
    encoded = text.encode("utf-16-le")
    value = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def correlator(request: Request | None = None) -> str:
    if request is None:
        return NOT_AVAILABLE
    supplied = request.headers.get(CORRELATOR_HEADER)
    if supplied:
        return supplied
    host, port = (request.client.host, request.client.port) if request.client else ("", 0)
    seed = (
        f"from: {host}:{port}, method: {request.method.upper()}, "
        f"url: {request.url.path}"
    )
    return str(hash_code(seed))


def transaction_id() -> str:
    return str(time.time_ns() // 1_000_000)


def operation_type(request: Request | None = None) -> str:
    if request is None:
        return OperationType.SERVER_LOG
    return OperationType.PREFIX + request.method.upper()


def build_context(request: Request | None = None) -> RequestContext:
    return RequestContext(
        correlation_id=correlator(request),
        transaction_id=transaction_id(),
        operation_type=operation_type(request),
    )


def server_context(op: str = OperationType.SERVER_LOG) -> dict[str, str]:
    """Log ``extra`` for lines not tied to a request."""
    return {"corr": NOT_AVAILABLE, "trans": NOT_AVAILABLE, "op": op}
