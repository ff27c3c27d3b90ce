"""Structured log events for webhook delivery handling.

Usage
-----
>>> event_logger = DeliveryEventLogger()
>>> event_logger.log_delivery_received(delivery_id="123e4567", event_name="push")

"""

from __future__ import annotations

import enum
import typing as typ

from hookline.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from hookline.errors import HandlerError, WebhookRequestError
    from hookline.events import WebhookEvent

logger = get_logger(__name__)


class DeliveryEventType(enum.StrEnum):
    """Structured log event types for delivery handling."""

    DELIVERY_RECEIVED = "webhook.delivery.received"
    DELIVERY_REJECTED = "webhook.delivery.rejected"
    DISPATCH_SUCCEEDED = "webhook.dispatch.succeeded"
    DISPATCH_FAILED = "webhook.dispatch.failed"
    DISPATCH_DEFERRED = "webhook.dispatch.deferred"
    BACKGROUND_COMPLETED = "webhook.background.completed"
    BACKGROUND_FAILED = "webhook.background.failed"
    ERROR_LISTENER_FAILED = "webhook.error_listener.failed"


class DeliveryEventLogger:
    """Emit delivery lifecycle events via femtologging.

    Successful steps log at INFO, rejected requests and deferred dispatches
    at WARNING, handler failures at ERROR.
    """

    def log_delivery_received(self, *, delivery_id: str, event_name: str) -> None:
        """Log that a delivery passed header validation."""
        log_info(
            logger,
            "[%s] delivery_id=%s event_name=%s",
            DeliveryEventType.DELIVERY_RECEIVED,
            delivery_id,
            event_name,
        )

    def log_delivery_rejected(
        self,
        *,
        method: str,
        path: str,
        error: WebhookRequestError,
    ) -> None:
        """Log a request rejected before dispatch."""
        log_warning(
            logger,
            "[%s] method=%s path=%s status=%d error_type=%s error_message=%s",
            DeliveryEventType.DELIVERY_REJECTED,
            method,
            path,
            int(error.status),
            type(error).__name__,
            str(error),
        )

    def log_dispatch_succeeded(self, event: WebhookEvent) -> None:
        """Log a dispatch that completed within the deadline."""
        log_info(
            logger,
            "[%s] delivery_id=%s event_name=%s",
            DeliveryEventType.DISPATCH_SUCCEEDED,
            event.id,
            event.name,
        )

    def log_dispatch_failed(self, error: HandlerError) -> None:
        """Log handler failures surfaced to the HTTP response."""
        log_error(
            logger,
            "[%s] delivery_id=%s event_name=%s error_count=%d error_message=%s",
            DeliveryEventType.DISPATCH_FAILED,
            error.event.id,
            error.event.name,
            len(error),
            str(error),
            exc_info=error,
        )

    def log_dispatch_deferred(self, event: WebhookEvent, deadline: float) -> None:
        """Log a dispatch still running when the response deadline elapsed."""
        log_warning(
            logger,
            "[%s] delivery_id=%s event_name=%s deadline_seconds=%.3f",
            DeliveryEventType.DISPATCH_DEFERRED,
            event.id,
            event.name,
            deadline,
        )

    def log_background_completed(self, event: WebhookEvent) -> None:
        """Log a deferred dispatch that eventually succeeded."""
        log_info(
            logger,
            "[%s] delivery_id=%s event_name=%s",
            DeliveryEventType.BACKGROUND_COMPLETED,
            event.id,
            event.name,
        )

    def log_background_failed(self, event: WebhookEvent, error: BaseException) -> None:
        """Log a deferred dispatch that failed after its response was sent."""
        log_error(
            logger,
            "[%s] delivery_id=%s event_name=%s error_type=%s error_message=%s",
            DeliveryEventType.BACKGROUND_FAILED,
            event.id,
            event.name,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_error_listener_failed(
        self, event: WebhookEvent, error: BaseException
    ) -> None:
        """Log an error listener that raised while handling a HandlerError."""
        log_error(
            logger,
            "[%s] delivery_id=%s event_name=%s error_type=%s",
            DeliveryEventType.ERROR_LISTENER_FAILED,
            event.id,
            event.name,
            type(error).__name__,
            exc_info=error,
        )
