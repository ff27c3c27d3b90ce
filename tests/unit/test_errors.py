"""Unit tests for hookline.errors messages and statuses."""

from __future__ import annotations

from http import HTTPStatus

import pytest

from hookline.errors import (
    AuthenticationError,
    HandlerError,
    PayloadError,
    PayloadTooLargeError,
    RoutingError,
    ValidationError,
    WebhookRequestError,
)
from hookline.events import WebhookEvent

EVENT = WebhookEvent(id="1", name="push", payload={})


@pytest.mark.parametrize(
    ("error", "status", "message"),
    [
        (
            RoutingError("PUT", "/hooks"),
            HTTPStatus.NOT_FOUND,
            "Unknown route: PUT /hooks",
        ),
        (
            ValidationError(["x-github-event", "x-github-delivery"]),
            HTTPStatus.BAD_REQUEST,
            "Required headers missing: x-github-event, x-github-delivery",
        ),
        (
            AuthenticationError.signature_mismatch(),
            HTTPStatus.UNAUTHORIZED,
            "AuthenticationError: signature does not match event payload and secret",
        ),
        (
            PayloadError("JSON is malformed"),
            HTTPStatus.BAD_REQUEST,
            "SyntaxError: Invalid JSON: JSON is malformed",
        ),
        (
            PayloadTooLargeError(10),
            HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            "Payload too large: limit is 10 bytes",
        ),
    ],
    ids=["routing", "validation", "authentication", "payload", "too-large"],
)
def test_request_error_status_and_message(
    error: WebhookRequestError, status: HTTPStatus, message: str
) -> None:
    """Each request error maps to a fixed status and plain-text message."""
    assert error.status == status
    assert str(error) == message


class TestHandlerError:
    """Tests for the aggregate handler error."""

    def test_requires_errors(self) -> None:
        """An empty aggregate is a programming error."""
        with pytest.raises(ValueError, match="at least one"):
            HandlerError([], EVENT)

    def test_exposes_errors_and_event(self) -> None:
        """Underlying errors stay inspectable and ordered."""
        first, second = KeyError("a"), RuntimeError("b")
        error = HandlerError([first, second], EVENT)

        assert error.errors == (first, second)
        assert list(error) == [first, second]
        assert len(error) == 2
        assert error.event is EVENT

    def test_blank_messages_are_described(self) -> None:
        """Errors without a message are named instead."""
        error = HandlerError([RuntimeError()], EVENT)
        assert str(error) == "RuntimeError: an unspecified error occurred"
