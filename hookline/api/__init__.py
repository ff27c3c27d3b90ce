"""hookline HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) transport for webhook deliveries.

Usage
-----
Create and run the application::

    from hookline.api import create_app

    app = create_app(dispatcher, options)

Public API
----------
create_app
    Application factory serving the webhook endpoint and health probes.
create_webhook_resource
    Resource factory for mounting the receiver inside another Falcon app.
"""

from hookline.api.app import create_app, create_webhook_resource

__all__ = ["create_app", "create_webhook_resource"]
