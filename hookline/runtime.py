"""hookline runtime entrypoint.

This module provides the ASGI application factory used when hookline runs
as a standalone service. It delegates to :func:`hookline.api.app.create_app`
while keeping the ``hookline.runtime:create_app`` Granian entrypoint stable.
The standalone dispatcher carries a single wildcard handler that logs each
verified event; applications embedding hookline register their own handlers
on a :class:`hookline.dispatcher.Dispatcher` instead.

Configuration is driven by environment variables:

- ``HOOKLINE_HOST``: Bind address (default ``0.0.0.0``)
- ``HOOKLINE_PORT``: Listen port (default ``8080``)
- ``HOOKLINE_LOG_LEVEL``: Log level (default ``INFO``)
- ``HOOKLINE_WEBHOOK_SECRET`` and the other variables read by
  :meth:`hookline.config.WebhookOptions.from_env`

Run the service directly with ``python -m hookline.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from hookline.config import WebhookOptions
from hookline.dispatcher import Dispatcher
from hookline.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

    from hookline.events import WebhookEvent

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid HOOKLINE_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def _log_event(event: WebhookEvent) -> None:
    log_info(
        logger,
        "Received %s event (delivery_id=%s)",
        event.name if event.action is None else f"{event.name}.{event.action}",
        event.id,
    )


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from environment configuration.

    Raises
    ------
    hookline.errors.ConfigurationError
        If ``HOOKLINE_WEBHOOK_SECRET`` is unset or a numeric setting is
        invalid.

    """
    from hookline.api.app import create_app as _create_api_app

    options = WebhookOptions.from_env()
    dispatcher = Dispatcher(options.secret)
    dispatcher.on_any(_log_event)
    return _create_api_app(dispatcher, options)


def main() -> None:
    """Start the hookline runtime server using Granian.

    Reads ``HOOKLINE_HOST``, ``HOOKLINE_PORT`` and ``HOOKLINE_LOG_LEVEL`` from
    the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("HOOKLINE_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("HOOKLINE_PORT", "8080"))
    log_level_str = os.environ.get("HOOKLINE_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid HOOKLINE_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting hookline runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "hookline.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
