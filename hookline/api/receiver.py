"""Delivery receiver terminating webhook requests on Falcon ASGI.

The receiver checks the required headers, acquires the body, decodes JSON,
verifies the signature and hands the event to the response coordinator.
Every rejection is converted into a plain-text response here and never
reaches the dispatcher.

Hosts that decode the body before the receiver runs (for instance a
middleware that already consumed ``req.stream``) store the decoded value
under ``req.context["webhook_payload"]``. The receiver then re-serializes
that value with :func:`hookline.events.encode_payload` for verification,
which only matches the signature when the provider sent compact JSON.
"""

from __future__ import annotations

import dataclasses as dc
import inspect
import typing as typ

import falcon
import msgspec

from hookline.coordinator import ResponseCoordinator
from hookline.errors import (
    AuthenticationError,
    PayloadError,
    PayloadTooLargeError,
    RoutingError,
    ValidationError,
    WebhookRequestError,
)
from hookline.events import Delivery, WebhookEvent, decode_payload, encode_payload
from hookline.observability import DeliveryEventLogger
from hookline.signature import verify

if typ.TYPE_CHECKING:
    from http import HTTPStatus

    from falcon.asgi import Request, Response

    from hookline.config import WebhookOptions
    from hookline.dispatcher import Dispatcher

__all__ = [
    "PARSED_BODY_KEY",
    "BodySource",
    "DeliveryReceiver",
    "ParsedBody",
    "RawBody",
]

PARSED_BODY_KEY = "webhook_payload"


@dc.dataclass(frozen=True, slots=True)
class RawBody:
    """Body bytes exactly as transmitted."""

    data: bytes


@dc.dataclass(frozen=True, slots=True)
class ParsedBody:
    """Body already decoded by the host before the receiver ran."""

    value: typ.Any


BodySource = RawBody | ParsedBody


@dc.dataclass(frozen=True, slots=True)
class _DeliveryHeaders:
    delivery_id: str
    event_name: str
    signature: str


def _write(resp: Response, status: HTTPStatus, body: str) -> None:
    resp.status = status
    resp.content_type = falcon.MEDIA_TEXT
    resp.text = body


class DeliveryReceiver:
    """Turn one inbound Falcon request into exactly one webhook response.

    Parameters
    ----------
    dispatcher
        Event bus receiving verified events.
    options
        Endpoint, header, size and deadline configuration.
    coordinator
        Deadline coordinator; one is built from ``options`` when omitted.
    event_logger
        Structured logger for receipt and rejection events.

    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        options: WebhookOptions,
        *,
        coordinator: ResponseCoordinator | None = None,
        event_logger: DeliveryEventLogger | None = None,
    ) -> None:
        """Bind the receiver to its dispatcher and options."""
        self._dispatcher = dispatcher
        self._options = options
        self._event_logger = event_logger or DeliveryEventLogger()
        self._coordinator = coordinator or ResponseCoordinator(
            dispatcher,
            deadline=options.response_deadline,
            event_logger=self._event_logger,
        )

    @property
    def coordinator(self) -> ResponseCoordinator:
        """Return the coordinator deciding dispatch responses."""
        return self._coordinator

    def matches(self, req: Request) -> bool:
        """Return whether ``req`` targets the configured webhook endpoint."""
        return req.method == "POST" and req.path == self._options.path

    async def handle(self, req: Request, resp: Response) -> None:
        """Validate, verify, decode and dispatch one delivery.

        The route is assumed to have been checked by the caller.
        """
        try:
            headers = self._read_headers(req)
            self._event_logger.log_delivery_received(
                delivery_id=headers.delivery_id, event_name=headers.event_name
            )
            source = await self._acquire_body(req)
            event = self._build_event(headers, source)
        except WebhookRequestError as exc:
            self._reject(req, resp, exc)
            return

        outcome = await self._coordinator.dispatch(event)
        _write(resp, outcome.status, outcome.body)

    async def handle_unrouted(self, req: Request, resp: Response) -> None:
        """Answer a request outside the webhook endpoint.

        A configured ``on_unhandled_request`` takes full control of the
        response; otherwise the request is answered with ``404``.
        """
        custom = self._options.on_unhandled_request
        if custom is not None:
            result = custom(req, resp)
            if inspect.isawaitable(result):
                await result
            return
        self._reject(req, resp, RoutingError(req.method, req.path))

    def _reject(
        self, req: Request, resp: Response, error: WebhookRequestError
    ) -> None:
        self._event_logger.log_delivery_rejected(
            method=req.method, path=req.path, error=error
        )
        _write(resp, error.status, str(error))

    def _read_headers(self, req: Request) -> _DeliveryHeaders:
        names = self._options.headers.required()
        values = {name: req.get_header(name) for name in names}
        missing = [name for name in names if not values[name]]
        if missing:
            raise ValidationError(missing)

        event_name, signature, delivery_id = (str(values[name]) for name in names)
        return _DeliveryHeaders(
            delivery_id=delivery_id, event_name=event_name, signature=signature
        )

    async def _acquire_body(self, req: Request) -> BodySource:
        if PARSED_BODY_KEY in req.context:
            return ParsedBody(req.context[PARSED_BODY_KEY])
        return RawBody(await self._read_stream(req))

    async def _read_stream(self, req: Request) -> bytes:
        limit = self._options.max_body_bytes
        if req.content_length is not None and req.content_length > limit:
            raise PayloadTooLargeError(limit)

        chunks: list[bytes] = []
        received = 0
        async for chunk in req.stream:
            received += len(chunk)
            if received > limit:
                raise PayloadTooLargeError(limit)
            chunks.append(chunk)
        return b"".join(chunks)

    def _build_event(
        self, headers: _DeliveryHeaders, source: BodySource
    ) -> WebhookEvent:
        # Decoding precedes verification so a malformed body is reported as
        # such even when its signature was computed over different bytes.
        match source:
            case RawBody(data=data):
                raw_body = data
                try:
                    payload = decode_payload(data)
                except msgspec.DecodeError as exc:
                    raise PayloadError(str(exc)) from exc
            case ParsedBody(value=value):
                payload = value
                try:
                    raw_body = encode_payload(value)
                except (msgspec.EncodeError, TypeError) as exc:
                    raise PayloadError(str(exc)) from exc

        delivery = Delivery(
            delivery_id=headers.delivery_id,
            event_name=headers.event_name,
            raw_body=raw_body,
            signature=headers.signature,
        )
        if not verify(self._dispatcher.secret, delivery.raw_body, delivery.signature):
            raise AuthenticationError.signature_mismatch()
        return WebhookEvent.from_delivery(delivery, payload)
