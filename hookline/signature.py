"""HMAC-SHA256 signing and verification for webhook payloads.

Signatures take the textual form sent in the ``X-Hub-Signature-256`` header:
``sha256=`` followed by the lowercase hex digest of the payload.

Usage
-----
>>> signature = sign("mySecret", b'{"zen": "Keep it logically awesome."}')
>>> verify("mySecret", b'{"zen": "Keep it logically awesome."}', signature)
True

"""

from __future__ import annotations

import hashlib
import hmac

__all__ = ["SIGNATURE_PREFIX", "sign", "to_bytes", "verify", "verify_signature"]

SIGNATURE_PREFIX = "sha256="
_SIGNATURE_LENGTH = len(SIGNATURE_PREFIX) + hashlib.sha256().digest_size * 2


def to_bytes(value: str | bytes) -> bytes:
    """Return ``value`` as bytes, encoding text as UTF-8."""
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def sign(secret: str | bytes, payload: str | bytes) -> str:
    """Return the ``sha256=<hex>`` signature of ``payload`` under ``secret``.

    Parameters
    ----------
    secret
        Shared webhook secret.
    payload
        Exact bytes transmitted by the provider. Text is UTF-8 encoded.

    Returns
    -------
    str
        Signature in the provider's header format.

    """
    digest = hmac.new(to_bytes(secret), to_bytes(payload), hashlib.sha256)
    return f"{SIGNATURE_PREFIX}{digest.hexdigest()}"


def verify(secret: str | bytes, payload: str | bytes, signature: str | None) -> bool:
    """Return whether ``signature`` matches ``payload`` under ``secret``.

    Malformed headers (absent, wrong prefix, wrong length, non-ASCII) yield
    ``False`` rather than raising. The final comparison is constant time.
    """
    if not signature or not signature.startswith(SIGNATURE_PREFIX):
        return False
    if len(signature) != _SIGNATURE_LENGTH or not signature.isascii():
        return False

    expected = sign(secret, payload)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii"))


verify_signature = verify
