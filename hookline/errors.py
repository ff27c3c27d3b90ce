"""Exceptions raised while receiving and dispatching webhook deliveries.

Request-level errors (``RoutingError`` through ``PayloadTooLargeError``)
carry the HTTP status they map to and are turned into responses by the
delivery receiver; they never reach the dispatcher. ``HandlerError`` is the
aggregate raised by :meth:`hookline.dispatcher.Dispatcher.emit` when one or
more handlers fail.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from hookline.events import WebhookEvent

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "HandlerError",
    "PayloadError",
    "PayloadTooLargeError",
    "RoutingError",
    "ValidationError",
    "WebhookRequestError",
]


class WebhookRequestError(Exception):
    """Base class for deliveries rejected before dispatch.

    Attributes
    ----------
    status
        HTTP status the receiver responds with.

    """

    status: HTTPStatus = HTTPStatus.BAD_REQUEST


class RoutingError(WebhookRequestError):
    """Raised when a request does not target the webhook endpoint."""

    status = HTTPStatus.NOT_FOUND

    def __init__(self, method: str, path: str) -> None:
        """Initialise with the unmatched request method and path."""
        self.method = method
        self.path = path
        super().__init__(f"Unknown route: {method} {path}")


class ValidationError(WebhookRequestError):
    """Raised when required delivery headers are absent."""

    def __init__(self, missing: cabc.Sequence[str]) -> None:
        """Initialise with the lowercase names of the missing headers."""
        self.missing = tuple(missing)
        super().__init__(f"Required headers missing: {', '.join(self.missing)}")


class AuthenticationError(WebhookRequestError):
    """Raised when the signature header does not match the payload."""

    status = HTTPStatus.UNAUTHORIZED

    @classmethod
    def signature_mismatch(cls) -> AuthenticationError:
        """Return the error for a payload that fails HMAC verification."""
        return cls("signature does not match event payload and secret")

    def __str__(self) -> str:
        """Prefix the message with the error name for plain-text bodies."""
        return f"AuthenticationError: {super().__str__()}"


class PayloadError(WebhookRequestError):
    """Raised when the delivery body is not valid JSON."""

    def __init__(self, detail: str) -> None:
        """Initialise with the decoder's description of the failure."""
        self.detail = detail
        super().__init__(f"SyntaxError: Invalid JSON: {detail}")


class PayloadTooLargeError(WebhookRequestError):
    """Raised when the delivery body exceeds the configured byte limit."""

    status = HTTPStatus.REQUEST_ENTITY_TOO_LARGE

    def __init__(self, limit: int) -> None:
        """Initialise with the limit that was exceeded."""
        self.limit = limit
        super().__init__(f"Payload too large: limit is {limit} bytes")


class HandlerError(Exception):
    """Aggregate of the handler failures raised by one ``emit`` call.

    Parameters
    ----------
    errors
        Handler exceptions, ordered as the handlers were invoked.
    event
        The event whose handlers failed.

    Attributes
    ----------
    errors
        Immutable tuple of the underlying exceptions.
    event
        The event that was being dispatched.

    """

    errors: tuple[Exception, ...]
    event: WebhookEvent

    def __init__(self, errors: cabc.Sequence[Exception], event: WebhookEvent) -> None:
        """Initialise with the collected handler errors and their event."""
        if not errors:
            msg = "HandlerError requires at least one underlying error"
            raise ValueError(msg)
        self.errors = tuple(errors)
        self.event = event
        super().__init__("\n".join(_describe(error) for error in self.errors))

    def __len__(self) -> int:
        """Return the number of underlying handler errors."""
        return len(self.errors)

    def __iter__(self) -> cabc.Iterator[Exception]:
        """Iterate over the underlying handler errors in invocation order."""
        return iter(self.errors)


def _describe(error: Exception) -> str:
    message = str(error)
    return message or f"{type(error).__name__}: an unspecified error occurred"


class ConfigurationError(RuntimeError):
    """Raised when webhook configuration is missing or invalid."""

    @classmethod
    def missing_secret(cls) -> ConfigurationError:
        """Return an error when no webhook secret is configured."""
        return cls("HOOKLINE_WEBHOOK_SECRET is required to verify deliveries")

    @classmethod
    def invalid_value(cls, name: str, raw: str, reason: str) -> ConfigurationError:
        """Return an error for an unparsable configuration value."""
        return cls(f"{name} {reason}, got: {raw!r}")
