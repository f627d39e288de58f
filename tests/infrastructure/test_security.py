"""Tests for admin tokens and the checkout rate limiter."""

import jwt
import pytest

from storefront.infrastructure.security.rate_limiter import SlidingWindowRateLimiter
from storefront.infrastructure.security.tokens import JwtTokenSigner
from tests.fakes import FixedClock


class TestJwtTokenSigner:

    def test_sign_and_verify(self):
        signer = JwtTokenSigner("secret")
        claims = signer.verify(signer.sign({"role": "admin"}, 60))
        assert claims["role"] == "admin"
        assert "exp" in claims

    def test_expired_token_rejected(self):
        # FixedClock sits well in the past, so a short ttl is already spent.
        signer = JwtTokenSigner("secret", clock=FixedClock())
        token = signer.sign({"role": "admin"}, 60)
        assert JwtTokenSigner("secret").verify(token) is None

    def test_wrong_secret_rejected(self):
        token = JwtTokenSigner("secret").sign({"role": "admin"}, 60)
        assert JwtTokenSigner("other").verify(token) is None

    def test_garbage_and_empty_rejected(self):
        signer = JwtTokenSigner("secret")
        assert signer.verify("not-a-jwt") is None
        assert signer.verify("") is None

    def test_tokens_are_hs256(self):
        token = JwtTokenSigner("secret").sign({"role": "admin"}, 60)
        assert jwt.get_unverified_header(token)["alg"] == "HS256"


class TickClock:

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestSlidingWindowRateLimiter:

    def test_allows_up_to_limit(self):
        limiter = SlidingWindowRateLimiter(limit=2, window_seconds=60, clock=TickClock())
        assert limiter.allow("ip:checkout")
        assert limiter.allow("ip:checkout")
        assert not limiter.allow("ip:checkout")

    def test_keys_are_independent(self):
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60, clock=TickClock())
        assert limiter.allow("a:checkout")
        assert limiter.allow("b:checkout")
        assert limiter.allow("a:login")

    def test_window_slides(self):
        clock = TickClock()
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)
        assert limiter.allow("k")
        clock.now = 9.9
        assert not limiter.allow("k")
        clock.now = 10.0
        assert limiter.allow("k")

    def test_rejected_hits_do_not_extend_the_block(self):
        clock = TickClock()
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)
        limiter.allow("k")
        for t in (2.0, 5.0, 9.0):
            clock.now = t
            assert not limiter.allow("k")
        clock.now = 10.5
        assert limiter.allow("k")

    @pytest.mark.parametrize("limit,window", [(0, 60), (5, 0), (-1, -1)])
    def test_invalid_arguments(self, limit, window):
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(limit=limit, window_seconds=window)

