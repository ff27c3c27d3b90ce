"""Shared webhook delivery builders for tests.

This module provides a deterministic ``push`` payload and helpers that sign
bodies and assemble the headers GitHub sends with each delivery.
"""

from __future__ import annotations

import typing as typ

import msgspec

from hookline.signature import sign

SECRET = "mySecret"
DELIVERY_ID = "123e4567-e89b-12d3-a456-426655440000"
WEBHOOK_PATH = "/api/github/webhooks"

PUSH_PAYLOAD: dict[str, typ.Any] = {
    "ref": "refs/heads/main",
    "before": "6113728f27ae82c7b1a177c8d03f9e96e0adf246",
    "after": "0000000000000000000000000000000000000000",
    "repository": {
        "id": 35129377,
        "name": "public-repo",
        "full_name": "baxterthehacker/public-repo",
        "owner": {"name": "baxterthehacker", "login": "baxterthehacker"},
    },
    "pusher": {"name": "baxterthehacker", "email": "baxter@example.com"},
    "commits": [],
}


def encode(payload: object) -> bytes:
    """Return the compact JSON body for ``payload``."""
    return msgspec.json.encode(payload)


BODY_PUSH = encode(PUSH_PAYLOAD)


def delivery_headers(
    body: bytes | str,
    *,
    event: str = "push",
    secret: str = SECRET,
    signature: str | None = None,
    omit: typ.Collection[str] = (),
) -> dict[str, str]:
    """Build GitHub-style delivery headers.

    ``signature`` overrides the computed signature; names in ``omit``
    (lowercase) are left out.
    """
    headers = {
        "X-GitHub-Event": event,
        "X-Hub-Signature-256": signature if signature is not None else sign(secret, body),
        "X-GitHub-Delivery": DELIVERY_ID,
    }
    return {name: value for name, value in headers.items() if name.lower() not in omit}
