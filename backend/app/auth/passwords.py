"""Password hashing and the per-provider credential types.

New digests are bcrypt.  Accounts created before the switch carry an
unsalted lowercase-hex SHA-256 digest; those still verify and are flagged by
:func:`needs_rehash` so the login path can upgrade them.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from dataclasses import dataclass
from typing import Union

import bcrypt

_LEGACY_SHA256 = re.compile(r"^[0-9a-f]{64}$")

# bcrypt only reads the first 72 bytes of input
_BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt()).decode("ascii")


def _is_legacy_digest(digest: str) -> bool:
    return bool(_LEGACY_SHA256.match(digest))


def verify_password(password: str, digest: str | None) -> bool:
    """Return True when *password* matches *digest* (bcrypt or legacy SHA-256)."""
    if not digest:
        return False
    if _is_legacy_digest(digest):
        candidate = hashlib.sha256(password.encode("utf-8")).hexdigest()
        return hmac.compare_digest(candidate, digest)
    try:
        return bcrypt.checkpw(_bcrypt_input(password), digest.encode("ascii"))
    except ValueError:
        # Not a bcrypt hash we understand
        return False


def needs_rehash(digest: str | None) -> bool:
    return bool(digest) and _is_legacy_digest(digest)


# ── Credentials ─────────────────────────────────────────────────


@dataclass(frozen=True)
class PasswordCredential:
    """Credential of an ``email`` account."""

    digest: str
    provider: str = "email"

    def check(self, password: str) -> bool:
        return verify_password(password, self.digest)


@dataclass(frozen=True)
class ExternalCredential:
    """Credential of an OAuth account; no password ever matches."""

    provider: str
    subject: str

    def check(self, password: str) -> bool:
        return False


Credential = Union[PasswordCredential, ExternalCredential]


def credential_for(user) -> Credential:
    """Build the credential variant that matches *user*'s provider tag."""
    if user.provider == "email" and user.password_hash:
        return PasswordCredential(digest=user.password_hash)
    return ExternalCredential(provider=user.provider, subject=user.provider_id)
