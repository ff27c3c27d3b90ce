"""Falcon middleware claiming the configured webhook endpoint.

``POST`` requests to the configured path are answered during
``process_request`` and marked complete, so Falcon skips routing for them.
Everything else falls through to the application's routes and, when nothing
matches, to :class:`hookline.api.resources.UnhandledRequestSink`.

Usage
-----
Register the middleware when creating the Falcon app::

    receiver = DeliveryReceiver(dispatcher, options)
    app = falcon.asgi.App(middleware=[WebhookMiddleware(receiver)])

"""

from __future__ import annotations

import typing as typ

from hookline.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from hookline.api.receiver import DeliveryReceiver

__all__ = ["WebhookMiddleware"]

logger = get_logger(__name__)


class WebhookMiddleware:
    """Answer webhook deliveries before routing and drain on shutdown.

    Parameters
    ----------
    receiver
        Receiver handling matched deliveries.
    shutdown_timeout
        Seconds to wait for deferred dispatches during ASGI lifespan
        shutdown; ``None`` waits indefinitely.

    """

    def __init__(
        self,
        receiver: DeliveryReceiver,
        *,
        shutdown_timeout: float | None = 30.0,
    ) -> None:
        """Initialize the middleware with a delivery receiver."""
        self._receiver = receiver
        self._shutdown_timeout = shutdown_timeout

    async def process_request(self, req: Request, resp: Response) -> None:
        """Handle matching deliveries and short-circuit routing for them."""
        if not self._receiver.matches(req):
            return
        try:
            await self._receiver.handle(req, resp)
        finally:
            # Never let the catch-all sink answer a claimed delivery.
            resp.complete = True

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Wait for deferred dispatches before the server exits."""
        coordinator = self._receiver.coordinator
        if not coordinator.in_flight:
            return

        log_info(
            logger,
            "Draining %d deferred webhook dispatch(es) before shutdown",
            coordinator.in_flight,
        )
        remaining = await coordinator.drain(timeout=self._shutdown_timeout)
        if remaining:
            log_warning(
                logger,
                "Shutting down with %d webhook dispatch(es) still running",
                remaining,
            )
