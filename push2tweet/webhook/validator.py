"""Payload validation for button-press operation requests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from push2tweet.errors import BadPayloadError, MalformedJSONError
from push2tweet.models import OperationDescriptor


@dataclass(frozen=True)
class FieldRule:
    name: str
    required: bool = True
    allow_empty: bool = False
    url: bool = False


OPERATION_SCHEMA: tuple[FieldRule, ...] = (
    FieldRule("button"),
    FieldRule("action"),
    FieldRule("extra", allow_empty=True),
    FieldRule("callback", required=False, url=True),
)


def _is_url(value: str) -> bool:
    if not value.isprintable() or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def check_fields(
    payload: dict[str, Any], schema: tuple[FieldRule, ...],
) -> list[tuple[str, str]]:
    """Return (field, reason) for every field of payload violating schema."""
    failures: list[tuple[str, str]] = []
    for rule in schema:
        if rule.name not in payload or payload[rule.name] is None:
            if rule.required:
                failures.append((rule.name, "is required"))
            continue
        value = payload[rule.name]
        if not isinstance(value, str):
            failures.append((rule.name, "must be of string type"))
        elif not value and not rule.allow_empty:
            failures.append((rule.name, "must not be empty"))
        elif rule.url and not _is_url(value):
            failures.append((rule.name, "is not a valid url"))
    return failures


def decode_payload(raw_body: bytes | str | object) -> object:
    if isinstance(raw_body, bytes):
        try:
            raw_body = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            text = raw_body.decode("utf-8", errors="backslashreplace")
            raise MalformedJSONError(text, str(exc)) from exc
    if not isinstance(raw_body, str):
        return raw_body
    try:
        return json.loads(raw_body)
    except json.JSONDecodeError as exc:
        raise MalformedJSONError(raw_body, str(exc)) from exc


def validate(raw_body: bytes | str | object) -> OperationDescriptor:
    """Validate a request body and extract its operation descriptor.

    Raises MalformedJSONError if the body is not JSON and BadPayloadError
    if it does not match OPERATION_SCHEMA.
    """
    payload = decode_payload(raw_body)
    if not isinstance(payload, dict):
        raise BadPayloadError([("payload", "must be of object type")])

    failures = check_fields(payload, OPERATION_SCHEMA)
    if failures:
        raise BadPayloadError(failures)

    return OperationDescriptor(
        button=payload["button"],
        action=payload["action"],
        extra=payload["extra"],
        callback=payload.get("callback"),
    )
