"""Application factory for the hookline Falcon ASGI application.

This module provides ``create_app()``, which builds a Falcon ASGI app that
receives webhook deliveries at the configured path, serves ``/health`` and
``/ready``, and answers every other request through the unhandled-request
sink. ``create_webhook_resource()`` builds a resource for hosts that mount
the receiver on a route of their own.

Usage
-----
Serve deliveries at the default ``/api/github/webhooks`` path::

    from hookline.api.app import create_app
    from hookline.config import WebhookOptions
    from hookline.dispatcher import Dispatcher

    options = WebhookOptions(secret="mySecret")
    dispatcher = Dispatcher(options.secret)
    dispatcher.on("push", handle_push)
    app = create_app(dispatcher, options)

Mount the receiver inside an existing app::

    app.add_route("/hooks", create_webhook_resource(dispatcher, options))

"""

from __future__ import annotations

import typing as typ

import falcon.asgi

from hookline.api.health.resources import HealthResource, ReadyResource
from hookline.api.middleware import WebhookMiddleware
from hookline.api.receiver import DeliveryReceiver
from hookline.api.resources import UnhandledRequestSink, WebhookResource

if typ.TYPE_CHECKING:
    from hookline.config import WebhookOptions
    from hookline.dispatcher import Dispatcher
    from hookline.observability import DeliveryEventLogger

__all__ = ["create_app", "create_webhook_resource"]


def create_app(
    dispatcher: Dispatcher,
    options: WebhookOptions,
    *,
    event_logger: DeliveryEventLogger | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dispatcher
        Event bus with the application's handlers registered.
    options
        Endpoint, deadline and header configuration.
    event_logger
        Optional structured logger shared by the receiver and coordinator.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    receiver = DeliveryReceiver(dispatcher, options, event_logger=event_logger)

    app = falcon.asgi.App(middleware=[WebhookMiddleware(receiver)])  # type: ignore[no-matching-overload]  # Falcon stubs

    # Probes serve GET only; other methods get the unknown-route outcome.
    unrouted = receiver.handle_unrouted
    app.add_route("/health", HealthResource(unrouted=unrouted))
    app.add_route("/ready", ReadyResource(receiver.coordinator, unrouted=unrouted))

    # Routes take precedence over sinks, so the probes stay reachable.
    app.add_sink(UnhandledRequestSink(receiver), prefix="/")

    return app


def create_webhook_resource(
    dispatcher: Dispatcher,
    options: WebhookOptions,
    *,
    event_logger: DeliveryEventLogger | None = None,
) -> WebhookResource:
    """Return a resource handling deliveries on a host-chosen route.

    ``options.path`` and ``options.on_unhandled_request`` are not consulted;
    the host's router decides which requests reach the resource.
    """
    return WebhookResource(
        DeliveryReceiver(dispatcher, options, event_logger=event_logger)
    )
