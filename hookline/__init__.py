"""Receive, verify and dispatch signed webhook deliveries."""

from __future__ import annotations

from .config import WebhookHeaders, WebhookOptions
from .coordinator import DispatchOutcome, ResponseCoordinator
from .dispatcher import WILDCARD, Dispatcher
from .errors import (
    AuthenticationError,
    ConfigurationError,
    HandlerError,
    PayloadError,
    PayloadTooLargeError,
    RoutingError,
    ValidationError,
    WebhookRequestError,
)
from .events import Delivery, WebhookEvent
from .signature import sign, verify, verify_signature

__all__ = [
    "WILDCARD",
    "AuthenticationError",
    "ConfigurationError",
    "Delivery",
    "DispatchOutcome",
    "Dispatcher",
    "HandlerError",
    "PayloadError",
    "PayloadTooLargeError",
    "ResponseCoordinator",
    "RoutingError",
    "ValidationError",
    "WebhookEvent",
    "WebhookHeaders",
    "WebhookOptions",
    "WebhookRequestError",
    "sign",
    "verify",
    "verify_signature",
]
