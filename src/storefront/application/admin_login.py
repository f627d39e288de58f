"""Application service: Admin Login use case.

Trades the configured admin password for a signed token, and checks
such tokens on every admin command.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass

from storefront.application.ports import TokenSigner
from storefront.domain.exceptions import AuthenticationError
from storefront.logging import get_logger

logger = get_logger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class AdminSession:
    token: str
    expires_in_seconds: int


class AdminLoginHandler:

    def __init__(
        self,
        signer: TokenSigner,
        admin_password: str | None,
        ttl_seconds: int,
    ) -> None:
        self._signer = signer
        self._admin_password = admin_password
        self._ttl_seconds = ttl_seconds

    def handle(self, password: str) -> AdminSession:
        if not self._admin_password:
            raise AuthenticationError("Admin password is not configured")
        if not password or not hmac.compare_digest(
            password.encode("utf-8"), self._admin_password.encode("utf-8")
        ):
            logger.warning("Rejected admin login attempt")
            raise AuthenticationError("Invalid credentials")

        token = self._signer.sign({"role": ADMIN_ROLE}, self._ttl_seconds)
        return AdminSession(token=token, expires_in_seconds=self._ttl_seconds)

    def authorize(self, token: str | None) -> dict:
        """Return the claims of a valid admin token or raise AuthenticationError."""
        claims = self._signer.verify(token or "")
        if not claims or claims.get("role") != ADMIN_ROLE:
            raise AuthenticationError("Admin token is missing, invalid or expired")
        return claims
