"""In-process event bus for verified webhook events.

Handlers are registered against an event name (``push``), a compound
``name.action`` pattern (``issues.opened``) or the ``*`` wildcard. ``emit``
runs every matching handler and raises one :class:`HandlerError` when any of
them fail.

Usage
-----
Register handlers and dispatch an event::

    dispatcher = Dispatcher("mySecret")

    @dispatcher.on("push")
    async def on_push(event: WebhookEvent) -> None:
        ...

    dispatcher.on_any(lambda event: print(event.name))
    await dispatcher.emit(WebhookEvent(id="1", name="push", payload={}))

"""

from __future__ import annotations

import asyncio
import inspect
import typing as typ

import msgspec

from hookline.errors import (
    AuthenticationError,
    ConfigurationError,
    HandlerError,
    PayloadError,
)
from hookline.events import Delivery, WebhookEvent, decode_payload
from hookline.observability import DeliveryEventLogger
from hookline.signature import sign, to_bytes, verify

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["WILDCARD", "Dispatcher", "ErrorListener", "Handler"]

WILDCARD = "*"

Handler = typ.Callable[[WebhookEvent], typ.Any]
ErrorListener = typ.Callable[[HandlerError], typ.Any]


class Dispatcher:
    """Match events to registered handlers and aggregate their failures.

    Matching handlers run in a fixed order: handlers for the exact event
    name, then handlers for ``"<name>.<action>"`` when the payload carries a
    string ``action``, then wildcard handlers. Each group keeps registration
    order. Handlers are started in that order and run concurrently.

    Parameters
    ----------
    secret
        Shared webhook secret used by :meth:`sign`, :meth:`verify` and
        :meth:`verify_and_receive`.
    event_logger
        Structured logger for error-listener failures.

    """

    def __init__(
        self,
        secret: str | bytes,
        *,
        event_logger: DeliveryEventLogger | None = None,
    ) -> None:
        """Initialise with an immutable secret and no handlers."""
        if not secret:
            raise ConfigurationError.missing_secret()
        self._secret = to_bytes(secret)
        self._handlers: dict[str, list[Handler]] = {}
        self._error_listeners: list[ErrorListener] = []
        self._event_logger = event_logger or DeliveryEventLogger()

    @property
    def secret(self) -> bytes:
        """Return the shared secret."""
        return self._secret

    def register(self, pattern: str, handler: Handler) -> Handler:
        """Append ``handler`` to the handlers for ``pattern`` and return it.

        Raises
        ------
        ValueError
            If ``pattern`` is empty.
        TypeError
            If ``handler`` is not callable.

        """
        if not pattern:
            msg = "event pattern must be a non-empty string"
            raise ValueError(msg)
        if not callable(handler):
            msg = f"handler for {pattern!r} must be callable, got {type(handler)!r}"
            raise TypeError(msg)
        self._handlers.setdefault(pattern, []).append(handler)
        return handler

    @typ.overload
    def on(self, pattern: str, handler: Handler) -> Handler: ...

    @typ.overload
    def on(
        self, pattern: str, handler: None = None
    ) -> cabc.Callable[[Handler], Handler]: ...

    def on(
        self, pattern: str, handler: Handler | None = None
    ) -> Handler | cabc.Callable[[Handler], Handler]:
        """Register ``handler`` for ``pattern``; usable as a decorator."""
        if handler is not None:
            return self.register(pattern, handler)

        def decorator(func: Handler) -> Handler:
            return self.register(pattern, func)

        return decorator

    def on_any(self, handler: Handler) -> Handler:
        """Register ``handler`` for every event."""
        return self.register(WILDCARD, handler)

    def on_error(self, listener: ErrorListener) -> ErrorListener:
        """Register a listener called with each ``HandlerError`` before it propagates."""
        if not callable(listener):
            msg = f"error listener must be callable, got {type(listener)!r}"
            raise TypeError(msg)
        self._error_listeners.append(listener)
        return listener

    def handlers_for(self, event: WebhookEvent) -> tuple[Handler, ...]:
        """Return a snapshot of the handlers matching ``event`` in call order."""
        patterns = [event.name]
        if event.action is not None:
            patterns.append(f"{event.name}.{event.action}")
        if event.name != WILDCARD:
            patterns.append(WILDCARD)

        matched: list[Handler] = []
        for pattern in patterns:
            matched.extend(self._handlers.get(pattern, ()))
        return tuple(matched)

    async def emit(self, event: WebhookEvent) -> None:
        """Run every handler matching ``event``.

        All matching handlers run even when some fail. A handler that raises
        ``CancelledError`` counts as a failed handler.

        Raises
        ------
        HandlerError
            If one or more handlers raised; ``errors`` keeps invocation order.

        """
        handlers = self.handlers_for(event)
        if not handlers:
            return

        results = await asyncio.gather(
            *(_invoke(handler, event) for handler in handlers),
            return_exceptions=True,
        )

        errors: list[Exception] = []
        for result in results:
            if isinstance(result, asyncio.CancelledError):
                errors.append(_cancelled_handler_error(result))
            elif isinstance(result, Exception):
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
        if not errors:
            return

        error = HandlerError(errors, event)
        await self._notify_error_listeners(error)
        raise error

    async def _notify_error_listeners(self, error: HandlerError) -> None:
        for listener in tuple(self._error_listeners):
            try:
                await _invoke(listener, error)
            except Exception as exc:  # noqa: BLE001 - listener failures must not mask the handler error
                self._event_logger.log_error_listener_failed(error.event, exc)

    def sign(self, payload: str | bytes) -> str:
        """Return the signature of ``payload`` under the dispatcher secret."""
        return sign(self._secret, payload)

    def verify(self, payload: str | bytes, signature: str | None) -> bool:
        """Return whether ``signature`` matches ``payload``."""
        return verify(self._secret, payload, signature)

    async def verify_and_receive(self, delivery: Delivery) -> None:
        """Verify, decode and emit a delivery without any HTTP transport.

        Raises
        ------
        AuthenticationError
            If the signature does not match the raw body.
        PayloadError
            If the body is not valid JSON.
        HandlerError
            If any handler fails.

        """
        if not self.verify(delivery.raw_body, delivery.signature):
            raise AuthenticationError.signature_mismatch()
        try:
            payload = decode_payload(delivery.raw_body)
        except msgspec.DecodeError as exc:
            raise PayloadError(str(exc)) from exc
        await self.emit(WebhookEvent.from_delivery(delivery, payload))


async def _invoke(
    callback: cabc.Callable[[typ.Any], typ.Any],
    argument: object,
) -> None:
    result = callback(argument)
    if inspect.isawaitable(result):
        await result


def _cancelled_handler_error(cancelled: asyncio.CancelledError) -> RuntimeError:
    # A handler cancelling itself is a handler failure, not a cancelled emit.
    error = RuntimeError("CancelledError: handler was cancelled before completing")
    error.__cause__ = cancelled
    return error
