from __future__ import annotations

import base64
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)


def decode_jwt_claims(token: str) -> dict[str, Any] | None:
    """Decode the payload segment of a JWT without verifying the signature.

    Signature verification is the backend's job. Returns None for anything
    that is not a three-segment token with a JSON object payload.
    """

    parts = token.split(".")
    if len(parts) != 3 or not parts[1]:
        logger.warning("Credential is not a three-segment JWT")
        return None

    segment = parts[1]
    padded = segment + "=" * (-len(segment) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        claims = json.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeError):
        # binascii.Error and JSONDecodeError are both ValueErrors.
        logger.warning("Failed to decode JWT payload")
        return None

    if not isinstance(claims, dict):
        logger.warning("JWT payload is not a JSON object")
        return None
    return claims


def claims_expiry(claims: dict[str, Any]) -> datetime | None:
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def is_expired(claims: dict[str, Any], now: datetime) -> bool:
    """True when `exp` lies before `now`.

    A token without a numeric `exp` never expires, and neither does one whose
    `exp` is too far ahead to represent as a datetime.
    """

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return False
    return exp < math.floor(now.timestamp())


def login_redirect_url(login_url: str, return_url: str) -> str:
    return f"{login_url}?r={quote(return_url, safe='')}"


def strip_credential_from_url(url: str, param: str = "jwt") -> str:
    parts = urlsplit(url)
    query = [
        (k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != param
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))
