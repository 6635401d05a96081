"""Exception hierarchy for the Helicone provider."""

from __future__ import annotations

# Statuses a caller may reasonably retry; the provider itself never does.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})


class HeliconeError(Exception):
    """Base exception for all Helicone provider errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class HeliconeConfigError(HeliconeError):
    """Configuration could not be resolved (e.g. no API key)."""


class UnsupportedFunctionalityError(HeliconeError):
    """The prompt uses something the chat-completions format cannot carry."""

    def __init__(self, functionality: str) -> None:
        super().__init__(f"'{functionality}' is not supported by the Helicone gateway")
        self.functionality = functionality


class HeliconeRequestError(HeliconeError):
    """The gateway answered with a non-success HTTP status.

    The raw body is kept verbatim so callers can inspect gateway error
    payloads without the provider guessing at their shape.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str,
        url: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code
        self.body = body
        self.url = url

    @property
    def retryable(self) -> bool:
        return self.status_code in RETRYABLE_STATUS_CODES

    def __str__(self) -> str:
        return f"{self.args[0]} (status {self.status_code})"


class HeliconeResponseError(HeliconeError):
    """A success response whose body is not valid JSON."""

    def __init__(self, message: str, *, body: str) -> None:
        super().__init__(message)
        self.body = body
