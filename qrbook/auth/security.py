"""
Token inspection helpers.

The client never holds the signing key, so tokens are only decoded, never
verified: the payload (middle segment) is read for its `exp` claim.
"""

from __future__ import annotations

import json
import time
from typing import Any

from jwt.utils import base64url_decode

from qrbook.core.errors import MalformedToken


def now_epoch_s() -> float:
    return time.time()


def decode_token_payload(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise MalformedToken("Token is empty.")

    parts = raw.split(".")
    if len(parts) < 2 or not parts[1]:
        raise MalformedToken("Token has no payload segment.")

    try:
        payload = json.loads(base64url_decode(parts[1]))
    except (ValueError, TypeError) as exc:
        raise MalformedToken() from exc

    if not isinstance(payload, dict):
        raise MalformedToken("Token payload is not an object.")
    return payload


def token_expiry(token: str) -> float | None:
    """
    Return the `exp` claim in epoch seconds, or None when the token has none.
    """
    exp = decode_token_payload(token).get("exp")
    if exp is None or isinstance(exp, bool):
        return None
    try:
        return float(exp)
    except (TypeError, ValueError):
        return None


def is_expired(token: str, *, now: float | None = None) -> bool:
    """
    True only when the payload decodes and `exp` is at or before `now`.
    Undecodable tokens raise `MalformedToken`.
    """
    exp = token_expiry(token)
    if exp is None:
        return False
    current = now_epoch_s() if now is None else now
    return exp <= current
