"""Configuration for the webhook receiver.

Usage
-----
Create options directly:

>>> options = WebhookOptions(secret="mySecret")
>>> options.path
'/api/github/webhooks'
>>> options.response_deadline
9.0

Or load them from environment variables:

>>> import os
>>> os.environ["HOOKLINE_WEBHOOK_SECRET"] = "mySecret"
>>> os.environ["HOOKLINE_RESPONSE_DEADLINE_MS"] = "5000"
>>> WebhookOptions.from_env().response_deadline
5.0

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

from hookline.errors import ConfigurationError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

__all__ = [
    "DEFAULT_MAX_BODY_BYTES",
    "DEFAULT_PATH",
    "DEFAULT_RESPONSE_DEADLINE",
    "UnhandledRequestHandler",
    "WebhookHeaders",
    "WebhookOptions",
]

DEFAULT_PATH = "/api/github/webhooks"
# Stays under the 10 second ceiling common to serverless hosts and GitHub.
DEFAULT_RESPONSE_DEADLINE = 9.0
# GitHub caps webhook payloads at 25 MB.
DEFAULT_MAX_BODY_BYTES = 25 * 1024 * 1024

UnhandledRequestHandler = typ.Callable[
    ["Request", "Response"], "cabc.Awaitable[None] | None"
]


@dc.dataclass(frozen=True, slots=True)
class WebhookHeaders:
    """Names of the headers every delivery must carry.

    Names are matched case-insensitively and reported in lowercase, in the
    order event, signature, delivery, when missing.
    """

    event: str = "x-github-event"
    signature: str = "x-hub-signature-256"
    delivery: str = "x-github-delivery"

    def required(self) -> tuple[str, str, str]:
        """Return the lowercase header names in reporting order."""
        return (self.event.lower(), self.signature.lower(), self.delivery.lower())


@dc.dataclass(frozen=True, slots=True)
class WebhookOptions:
    """Options accepted by the dispatcher and the delivery receiver.

    Attributes
    ----------
    secret
        Shared secret used to verify every delivery.
    response_deadline
        Seconds to wait for handlers before answering ``202``.
    path
        Endpoint claimed by the webhook middleware.
    on_unhandled_request
        Optional callable that takes over requests outside the endpoint. It
        may be sync or async and receives the Falcon request and response.
    max_body_bytes
        Largest body accepted before the receiver answers ``413``.
    headers
        Required header names.

    """

    secret: str | bytes
    response_deadline: float = DEFAULT_RESPONSE_DEADLINE
    path: str = DEFAULT_PATH
    on_unhandled_request: UnhandledRequestHandler | None = None
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    headers: WebhookHeaders = dc.field(default_factory=WebhookHeaders)

    def __post_init__(self) -> None:
        """Reject options the receiver cannot honour."""
        if not self.secret:
            raise ConfigurationError.missing_secret()
        if self.response_deadline <= 0:
            raise ConfigurationError.invalid_value(
                "response_deadline", str(self.response_deadline), "must be positive"
            )
        if self.max_body_bytes < 1:
            raise ConfigurationError.invalid_value(
                "max_body_bytes", str(self.max_body_bytes), "must be positive"
            )
        if not self.path.startswith("/"):
            raise ConfigurationError.invalid_value(
                "path", self.path, "must start with '/'"
            )

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigurationError.invalid_value(
                env_var, raw, "must be an integer"
            ) from exc
        if value < 1:
            raise ConfigurationError.invalid_value(env_var, raw, "must be positive")
        return value

    @classmethod
    def from_env(
        cls,
        *,
        on_unhandled_request: UnhandledRequestHandler | None = None,
    ) -> WebhookOptions:
        """Create options from environment variables.

        Reads the following environment variables:

        - ``HOOKLINE_WEBHOOK_SECRET``: Shared secret (required).
        - ``HOOKLINE_RESPONSE_DEADLINE_MS``: Response deadline in
          milliseconds. Defaults to 9000.
        - ``HOOKLINE_WEBHOOK_PATH``: Endpoint path. Defaults to
          ``/api/github/webhooks``.
        - ``HOOKLINE_MAX_BODY_BYTES``: Body size limit. Defaults to 25 MiB.

        Raises
        ------
        ConfigurationError
            If the secret is missing or a numeric value is invalid.

        """
        secret = os.environ.get("HOOKLINE_WEBHOOK_SECRET", "")
        if not secret.strip():
            raise ConfigurationError.missing_secret()

        deadline_ms = cls._parse_positive_int(
            "HOOKLINE_RESPONSE_DEADLINE_MS", int(DEFAULT_RESPONSE_DEADLINE * 1000)
        )
        max_body_bytes = cls._parse_positive_int(
            "HOOKLINE_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES
        )
        path = os.environ.get("HOOKLINE_WEBHOOK_PATH", "").strip() or DEFAULT_PATH

        return cls(
            secret=secret,
            response_deadline=deadline_ms / 1000,
            path=path,
            on_unhandled_request=on_unhandled_request,
            max_body_bytes=max_body_bytes,
        )
