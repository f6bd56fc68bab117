import time

import jwt
import pytest

from tasktrack.errors import InvalidToken
from tasktrack.passwords import PasswordHasher
from tasktrack.tokens import TokenService

SECRET = "unit-test-secret-that-is-at-least-32-bytes"


class TestTokenService:
    def test_issue_then_verify_returns_owner(self):
        svc = TokenService(SECRET)
        token = svc.issue("user-123")
        assert svc.verify(token) == "user-123"

    def test_token_expires_after_one_hour_by_default(self):
        issued_at = time.time() - 3601
        old = TokenService(SECRET, clock=lambda: issued_at)
        token = old.issue("user-123")
        with pytest.raises(InvalidToken):
            TokenService(SECRET).verify(token)

    def test_token_still_valid_just_before_expiry(self):
        issued_at = time.time() - 3500
        token = TokenService(SECRET, clock=lambda: issued_at).issue("user-123")
        assert TokenService(SECRET).verify(token) == "user-123"

    def test_payload_contains_subject_and_expiry(self):
        token = TokenService(SECRET, ttl_seconds=60).issue("user-123")
        claims = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert claims["sub"] == "user-123"
        assert claims["exp"] - claims["iat"] == 60

    def test_wrong_secret_is_rejected(self):
        token = TokenService("another-secret-that-is-at-least-32-bytes").issue("user-123")
        with pytest.raises(InvalidToken):
            TokenService(SECRET).verify(token)

    def test_tampered_token_is_rejected(self):
        token = TokenService(SECRET).issue("user-123")
        header, payload, signature = token.split(".")
        forged = ".".join([header, payload, signature[::-1]])
        with pytest.raises(InvalidToken):
            TokenService(SECRET).verify(forged)

    @pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer x"])
    def test_malformed_token_is_rejected(self, garbage):
        with pytest.raises(InvalidToken):
            TokenService(SECRET).verify(garbage)

    def test_token_without_subject_is_rejected(self):
        token = jwt.encode({"exp": int(time.time()) + 60}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            TokenService(SECRET).verify(token)


class TestPasswordHasher:
    def test_hash_and_verify(self):
        hasher = PasswordHasher(rounds=4)
        digest = hasher.hash("s3cret")
        assert digest != "s3cret"
        assert hasher.verify("s3cret", digest)
        assert not hasher.verify("wrong", digest)

    def test_digests_are_salted(self):
        hasher = PasswordHasher(rounds=4)
        assert hasher.hash("same") != hasher.hash("same")

    def test_verify_against_garbage_digest_is_false(self):
        assert PasswordHasher(rounds=4).verify("s3cret", "not-a-bcrypt-hash") is False
