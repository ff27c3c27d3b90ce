"""Falcon resources exposing the delivery receiver.

``WebhookResource`` lets a host mount the receiver at a route of its own
choosing; the host's router has already matched the request, so no path
check is applied. ``UnhandledRequestSink`` answers requests that no route
claimed.

Usage
-----
Mount the receiver on an existing app::

    app.add_route("/hooks/github", WebhookResource(receiver))
    app.add_sink(UnhandledRequestSink(receiver), prefix="/")

"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from hookline.api.receiver import DeliveryReceiver

__all__ = ["UnhandledRequestSink", "WebhookResource"]


class WebhookResource:
    """Resource accepting deliveries at whatever route it is mounted on."""

    def __init__(self, receiver: DeliveryReceiver) -> None:
        """Bind the resource to a delivery receiver."""
        self._receiver = receiver

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle a webhook delivery."""
        await self._receiver.handle(req, resp)


class UnhandledRequestSink:
    """Sink answering requests outside every registered route.

    The receiver's ``on_unhandled_request`` option takes over when set;
    otherwise the response is ``404`` with ``Unknown route: <METHOD> <PATH>``.
    """

    def __init__(self, receiver: DeliveryReceiver) -> None:
        """Bind the sink to a delivery receiver."""
        self._receiver = receiver

    async def __call__(
        self, req: Request, resp: Response, **_kwargs: typ.Any
    ) -> None:
        """Delegate the unmatched request to the receiver."""
        await self._receiver.handle_unrouted(req, resp)
