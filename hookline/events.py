"""Typed delivery and event records."""

from __future__ import annotations

import typing as typ

import msgspec

__all__ = ["Delivery", "WebhookEvent", "decode_payload", "encode_payload"]


class Delivery(msgspec.Struct, frozen=True, kw_only=True):
    """One inbound webhook request as transmitted by the provider.

    Attributes
    ----------
    delivery_id : str
        Provider-assigned unique delivery identifier.
    event_name : str
        Event name from the event header, e.g. ``push`` or ``issues``.
    raw_body : bytes
        Exact request body bytes the signature was computed over.
    signature : str
        Value of the signature header, ``sha256=<hex>``.

    """

    delivery_id: str
    event_name: str
    raw_body: bytes
    signature: str


class WebhookEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Verified, decoded event handed to registered handlers.

    Attributes
    ----------
    id : str
        Delivery identifier.
    name : str
        Event name used for handler matching.
    payload : Any
        Decoded JSON body.

    """

    id: str
    name: str
    payload: typ.Any

    @property
    def action(self) -> str | None:
        """Return the payload ``action`` field when it is a string."""
        if isinstance(self.payload, dict):
            action = self.payload.get("action")
            if isinstance(action, str):
                return action
        return None

    @classmethod
    def from_delivery(cls, delivery: Delivery, payload: typ.Any) -> WebhookEvent:  # noqa: ANN401 - JSON values are untyped
        """Build an event from a delivery and its decoded body."""
        return cls(id=delivery.delivery_id, name=delivery.event_name, payload=payload)


def decode_payload(raw: bytes) -> typ.Any:  # noqa: ANN401 - JSON values are untyped
    """Decode a JSON body; raises ``msgspec.DecodeError`` when malformed."""
    return msgspec.json.decode(raw)


def encode_payload(value: typ.Any) -> bytes:  # noqa: ANN401 - JSON values are untyped
    """Serialize a decoded body back to compact JSON.

    Keys keep their insertion order and non-ASCII text stays unescaped, so a
    value decoded from a compact provider body usually round-trips to the
    same bytes. Bodies that were pretty-printed or escaped by the provider do
    not, and will then fail signature verification.
    """
    return msgspec.json.encode(value)
