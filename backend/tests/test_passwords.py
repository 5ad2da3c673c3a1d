"""Tests for password hashing and the credential variants."""

from __future__ import annotations

import hashlib
from types import SimpleNamespace

from app.auth.passwords import (
    ExternalCredential,
    PasswordCredential,
    credential_for,
    hash_password,
    needs_rehash,
    verify_password,
)


def _legacy(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class TestBcrypt:
    def test_hash_then_verify(self):
        digest = hash_password("secret1")
        assert digest.startswith("$2")
        assert verify_password("secret1", digest)
        assert not verify_password("secret2", digest)

    def test_hashes_are_salted(self):
        assert hash_password("secret1") != hash_password("secret1")

    def test_bcrypt_digest_does_not_need_rehash(self):
        assert not needs_rehash(hash_password("secret1"))

    def test_long_password_is_accepted(self):
        long_pw = "x" * 200
        assert verify_password(long_pw, hash_password(long_pw))


class TestLegacyDigest:
    def test_legacy_sha256_verifies(self):
        assert verify_password("secret1", _legacy("secret1"))
        assert not verify_password("nope", _legacy("secret1"))

    def test_legacy_needs_rehash(self):
        assert needs_rehash(_legacy("secret1"))

    def test_uppercase_hex_is_not_legacy(self):
        assert not needs_rehash(_legacy("secret1").upper())
        assert not verify_password("secret1", _legacy("secret1").upper())


class TestGarbageDigest:
    def test_empty_or_none(self):
        assert not verify_password("secret1", None)
        assert not verify_password("secret1", "")
        assert not needs_rehash(None)

    def test_unknown_format(self):
        assert not verify_password("secret1", "not-a-hash")


class TestCredentials:
    def test_email_user_gets_password_credential(self):
        user = SimpleNamespace(provider="email", password_hash=hash_password("pw1234"), provider_id="a@x.com")
        cred = credential_for(user)
        assert isinstance(cred, PasswordCredential)
        assert cred.check("pw1234")
        assert not cred.check("wrong")

    def test_oauth_user_never_matches_a_password(self):
        user = SimpleNamespace(provider="google", password_hash=None, provider_id="g-123")
        cred = credential_for(user)
        assert isinstance(cred, ExternalCredential)
        assert cred.subject == "g-123"
        assert not cred.check("")
        assert not cred.check("anything")

    def test_email_user_without_digest_cannot_log_in(self):
        user = SimpleNamespace(provider="email", password_hash=None, provider_id="a@x.com")
        assert not credential_for(user).check("")
