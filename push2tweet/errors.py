"""Error kinds raised across the relay pipeline."""

from __future__ import annotations


class Push2TweetError(Exception):
    """Base error. ``code`` ends up in the ``details.code`` of the reply."""

    code = "ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)


class MalformedJSONError(Push2TweetError):
    """Raised when the request payload is not parseable JSON."""

    code = "MALFORMED_JSON"

    def __init__(self, text: str, parser_message: str) -> None:
        self.text = text
        self.parser_message = parser_message
        super().__init__(
            f"Request payload is not valid JSON: {text} (error: {parser_message})",
        )


class BadPayloadError(Push2TweetError):
    """Raised when the payload does not match the operation schema."""

    code = "BAD_PAYLOAD"

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures = failures
        reasons = ", ".join(f"{name} {reason}" for name, reason in failures)
        super().__init__(f"Request payload is not valid (errors: {reasons})")


class MissingHeaderError(Push2TweetError):
    code = "MISSING_HEADER"

    def __init__(self, header: str) -> None:
        self.header = header
        super().__init__(
            f'child "{header}" fails because [{header} is required]',
        )


class ProviderError(Push2TweetError):
    """Raised by the Twitter client when the status update fails."""

    def __init__(
        self, message: str, code: str | None = None, status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, code)


class StartupError(Push2TweetError):
    code = "STARTUP_ERROR"
