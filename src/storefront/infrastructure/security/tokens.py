"""HS256-signed tokens (PyJWT) implementing the TokenSigner port."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

import jwt

from storefront.application.ports import TokenSigner
from storefront.domain.model.value_objects import utc_now

ALGORITHM = "HS256"


class JwtTokenSigner(TokenSigner):

    def __init__(self, secret: str, clock: Callable[[], datetime] = utc_now) -> None:
        self._secret = secret
        self._clock = clock

    def sign(self, claims: dict, ttl_seconds: int) -> str:
        payload = dict(claims)
        payload["exp"] = self._clock() + timedelta(seconds=ttl_seconds)
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> dict | None:
        if not token:
            return None
        try:
            return jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError:  # includes ExpiredSignatureError
            return None
