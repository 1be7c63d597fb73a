"""
Tests for signed bearer tokens.
"""

import json
from base64 import urlsafe_b64decode, urlsafe_b64encode

import pytest

from auth.jwt import TokenError, TokenService, TokenValidationError


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTokenService:
    def setup_method(self):
        self.clock = FakeClock()
        self.tokens = TokenService("secret", ttl_seconds=3600, clock=self.clock)

    def test_issue_and_validate(self):
        token = self.tokens.issue(subject="user-1", email="u@x.com")
        claim = self.tokens.validate(token)
        assert claim.subject == "user-1"
        assert claim.email == "u@x.com"
        assert claim.expires_at - claim.issued_at == 3600

    def test_payload_carries_only_subject_email_and_times(self):
        token = self.tokens.issue(subject="user-1", email="u@x.com")
        segment = token.split(".")[0]
        payload = json.loads(_decode(segment))
        assert set(payload) == {"sub", "email", "iat", "exp"}

    def test_expired_after_ttl(self):
        token = self.tokens.issue(subject="user-1", email="u@x.com")
        self.clock.now += 3599
        self.tokens.validate(token)
        self.clock.now += 1
        with pytest.raises(TokenValidationError) as info:
            self.tokens.validate(token)
        assert info.value.reason is TokenError.EXPIRED

    def test_zero_ttl_is_expired_immediately(self):
        tokens = TokenService("secret", ttl_seconds=0, clock=self.clock)
        token = tokens.issue(subject="user-1", email="u@x.com")
        with pytest.raises(TokenValidationError) as info:
            tokens.validate(token)
        assert info.value.reason is TokenError.EXPIRED

    def test_other_secret_rejected(self):
        token = TokenService("other", clock=self.clock).issue("user-1", "u@x.com")
        with pytest.raises(TokenValidationError) as info:
            self.tokens.validate(token)
        assert info.value.reason is TokenError.INVALID_SIGNATURE

    def test_tampered_payload_rejected(self):
        token = self.tokens.issue(subject="user-1", email="u@x.com")
        forged = _encode({"sub": "user-2", "email": "u@x.com", "iat": 0, "exp": 2**40})
        with pytest.raises(TokenValidationError) as info:
            self.tokens.validate(forged + "." + token.split(".")[1])
        assert info.value.reason is TokenError.INVALID_SIGNATURE

    @pytest.mark.parametrize("token", ["", "abc", "a.b.c", ".sig", "payload."])
    def test_malformed(self, token):
        with pytest.raises(TokenValidationError) as info:
            self.tokens.validate(token)
        assert info.value.reason is TokenError.MALFORMED

    def test_signed_garbage_is_malformed(self):
        segment = urlsafe_b64encode(b"[1, 2, 3]").decode().rstrip("=")
        token = segment + "." + self.tokens._sign(segment)
        with pytest.raises(TokenValidationError) as info:
            self.tokens.validate(token)
        assert info.value.reason is TokenError.MALFORMED

    def test_non_ascii_signature_rejected(self):
        token = self.tokens.issue(subject="user-1", email="u@x.com")
        with pytest.raises(TokenValidationError):
            self.tokens.validate(token.split(".")[0] + ".zé")

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenService("")


def _encode(payload: dict) -> str:
    return urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")


def _decode(segment: str) -> str:
    return urlsafe_b64decode(segment + "=" * (-len(segment) % 4)).decode()
