"""Session token codec — HS256 compact JWTs.

PyJWT does the signing and verification.  Two checks run in front of it:

- the token must have exactly three dot-separated segments;
- the signature segment must be *canonical* base64url.  The final character
  of a base64url string carries spare bits that decoders ignore, so several
  spellings decode to the same bytes.  Only the spelling we would emit is
  accepted, which makes every single-character change observable.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import jwt
from jwt.utils import base64url_decode, base64url_encode

logger = logging.getLogger("gymportal.auth")

ALGORITHM = "HS256"

# Signature and a present `exp` are the only checks; registered claims such as
# aud, sub, nbf and iat are carried through untouched and `exp` is compared
# below with no leeway.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "require": ["exp"],
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


class TokenError(Exception):
    """Base class for token rejections."""


class TokenInvalidError(TokenError):
    """Malformed token or signature mismatch."""


class TokenExpiredError(TokenError):
    """Signature verified but ``exp`` is not in the future."""


def _require_secret(secret: str) -> None:
    if not secret:
        raise ValueError("token signing secret must not be empty")


def encode_token(claims: dict[str, Any], secret: str, ttl_seconds: int) -> str:
    """Sign *claims* with ``exp = now + ttl_seconds``.

    A non-positive TTL yields a token that is already expired.
    """
    _require_secret(secret)
    payload = dict(claims)
    payload["exp"] = int(time.time()) + int(ttl_seconds)
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def _is_canonical_segment(segment: str) -> bool:
    try:
        raw = base64url_decode(segment.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        return False
    return base64url_encode(raw).decode("ascii") == segment


def decode_token(token: str, secret: str) -> dict[str, Any]:
    """Verify *token* and return its claims (``exp`` included).

    Raises :class:`TokenInvalidError` or :class:`TokenExpiredError`.
    """
    _require_secret(secret)
    if not isinstance(token, str) or token.count(".") != 2:
        raise TokenInvalidError("token must have three segments")

    header_seg, claims_seg, sig_seg = token.split(".")
    if not header_seg or not claims_seg or not sig_seg:
        raise TokenInvalidError("empty token segment")
    if not all(_is_canonical_segment(s) for s in (header_seg, claims_seg, sig_seg)):
        raise TokenInvalidError("non-canonical base64url segment")

    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM], options=_DECODE_OPTIONS)
    except jwt.PyJWTError as exc:
        logger.debug("Token rejected: %s", exc)
        raise TokenInvalidError(str(exc)) from exc

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, int):
        raise TokenInvalidError("exp must be an integer")
    if exp <= time.time():
        raise TokenExpiredError("token expired")
    return claims
