"""Unit tests for hookline.api.app application factory.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_app.py

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from hookline.api.app import create_app, create_webhook_resource
from hookline.api.health.resources import HealthResource
from hookline.api.resources import WebhookResource
from hookline.config import WebhookOptions
from hookline.dispatcher import Dispatcher
from tests.helpers.webhook_deliveries import SECRET

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response


class TestCreateApp:
    """Tests for create_app()."""

    def test_returns_falcon_app(
        self, dispatcher: Dispatcher, options: WebhookOptions
    ) -> None:
        """create_app() returns a Falcon ASGI App."""
        assert isinstance(create_app(dispatcher, options), falcon.asgi.App)

    def test_has_health_route(self, client: falcon.testing.TestClient) -> None:
        """The app responds to /health."""
        result = client.simulate_get("/health")
        assert result.status_code == HTTPStatus.OK
        assert result.json == {"status": "ok"}

    def test_has_ready_route(self, client: falcon.testing.TestClient) -> None:
        """The app responds to /ready with the in-flight count."""
        result = client.simulate_get("/ready")
        assert result.status_code == HTTPStatus.OK
        assert result.json == {"status": "ready", "in_flight": 0}

    def test_unknown_get_falls_through_to_sink(
        self, client: falcon.testing.TestClient
    ) -> None:
        """Unmatched routes are answered by the unhandled-request sink."""
        result = client.simulate_get("/nowhere")
        assert result.status_code == HTTPStatus.NOT_FOUND
        assert result.text == "Unknown route: GET /nowhere"

    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("PUT", "/health"),
            ("POST", "/ready"),
            ("DELETE", "/health"),
            ("OPTIONS", "/ready"),
        ],
    )
    def test_probe_rejects_other_methods_as_unknown_route(
        self, client: falcon.testing.TestClient, method: str, path: str
    ) -> None:
        """Non-GET requests to the probes get the unknown-route outcome."""
        result = client.simulate_request(method, path)
        assert result.status_code == HTTPStatus.NOT_FOUND
        assert result.text == f"Unknown route: {method} {path}"

    def test_probe_other_methods_reach_custom_unhandled_handler(
        self, dispatcher: Dispatcher
    ) -> None:
        """A custom unhandled-request handler also owns probe method misses."""
        seen: list[str] = []

        def unhandled(req: Request, resp: Response) -> None:
            seen.append(f"{req.method} {req.path}")
            resp.status = HTTPStatus.IM_A_TEAPOT
            resp.text = "custom"

        options = WebhookOptions(secret=SECRET, on_unhandled_request=unhandled)
        client = falcon.testing.TestClient(create_app(dispatcher, options))

        result = client.simulate_put("/health")

        assert result.status_code == HTTPStatus.IM_A_TEAPOT
        assert result.text == "custom"
        assert seen == ["PUT /health"]


def test_create_webhook_resource(
    dispatcher: Dispatcher, options: WebhookOptions
) -> None:
    """create_webhook_resource() returns a mountable resource."""
    assert isinstance(create_webhook_resource(dispatcher, options), WebhookResource)


def test_standalone_probe_keeps_method_not_allowed() -> None:
    """Without an unknown-route responder, probes answer other methods with 405."""
    app = falcon.asgi.App()
    app.add_route("/health", HealthResource())
    client = falcon.testing.TestClient(app)

    result = client.simulate_put("/health")

    assert result.status_code == HTTPStatus.METHOD_NOT_ALLOWED
