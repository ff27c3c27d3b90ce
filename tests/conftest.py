"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ
from unittest import mock

import falcon.testing
import pytest

from hookline.api.app import create_app
from hookline.config import WebhookOptions
from hookline.dispatcher import Dispatcher
from hookline.observability import DeliveryEventLogger
from tests.helpers.webhook_deliveries import SECRET

if typ.TYPE_CHECKING:
    import falcon.asgi


@pytest.fixture
def options() -> WebhookOptions:
    """Return options with the shared test secret and default path."""
    return WebhookOptions(secret=SECRET)


@pytest.fixture
def dispatcher(options: WebhookOptions) -> Dispatcher:
    """Return a dispatcher bound to the test secret."""
    return Dispatcher(options.secret)


@pytest.fixture
def event_logger() -> mock.MagicMock:
    """Return a stand-in structured logger."""
    return mock.MagicMock(spec=DeliveryEventLogger)


@pytest.fixture
def app(
    dispatcher: Dispatcher,
    options: WebhookOptions,
    event_logger: mock.MagicMock,
) -> falcon.asgi.App:
    """Build the webhook application under test."""
    return create_app(dispatcher, options, event_logger=event_logger)


@pytest.fixture
def client(app: falcon.asgi.App) -> falcon.testing.TestClient:
    """Build a synchronous test client for the webhook application."""
    return falcon.testing.TestClient(app)
