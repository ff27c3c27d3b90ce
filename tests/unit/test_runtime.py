"""Unit tests for the hookline.runtime module."""

from __future__ import annotations

from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from hookline.errors import ConfigurationError
from tests.helpers.webhook_deliveries import (
    BODY_PUSH,
    SECRET,
    WEBHOOK_PATH,
    delivery_headers,
)


@pytest.fixture
def runtime_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Configure the environment read by the runtime factory."""
    monkeypatch.setenv("HOOKLINE_WEBHOOK_SECRET", SECRET)
    monkeypatch.delenv("HOOKLINE_WEBHOOK_PATH", raising=False)
    monkeypatch.delenv("HOOKLINE_RESPONSE_DEADLINE_MS", raising=False)
    monkeypatch.delenv("HOOKLINE_MAX_BODY_BYTES", raising=False)


@pytest.fixture
def client(runtime_env: None) -> falcon.testing.TestClient:
    """Create a test client for the runtime app."""
    from hookline.runtime import create_app

    return falcon.testing.TestClient(create_app())


class TestCreateApp:
    """Tests for the runtime create_app factory."""

    @pytest.mark.usefixtures("runtime_env")
    def test_returns_falcon_app(self) -> None:
        """create_app returns a Falcon ASGI App instance."""
        from hookline.runtime import create_app

        assert isinstance(create_app(), falcon.asgi.App)

    def test_requires_secret(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The runtime refuses to start without a secret."""
        from hookline.runtime import create_app

        monkeypatch.delenv("HOOKLINE_WEBHOOK_SECRET", raising=False)
        with pytest.raises(ConfigurationError):
            create_app()

    def test_health_returns_200(self, client: falcon.testing.TestClient) -> None:
        """GET /health returns HTTP 200."""
        assert client.simulate_get("/health").status_code == HTTPStatus.OK

    def test_accepts_signed_delivery(self, client: falcon.testing.TestClient) -> None:
        """The logging handler accepts any verified event."""
        result = client.simulate_post(
            WEBHOOK_PATH, body=BODY_PUSH, headers=delivery_headers(BODY_PUSH)
        )
        assert result.status_code == HTTPStatus.OK
        assert result.text == "ok\n"


class TestParsePort:
    """Tests for port validation."""

    def test_valid_port(self) -> None:
        """In-range ports are returned as integers."""
        from hookline.runtime import _parse_port

        assert _parse_port("8080") == 8080

    @pytest.mark.parametrize("raw", ["0", "65536", "http"])
    def test_invalid_port_exits(self, raw: str) -> None:
        """Out-of-range or non-numeric ports exit the process."""
        from hookline.runtime import _parse_port

        with pytest.raises(SystemExit):
            _parse_port(raw)
