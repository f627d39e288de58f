"""Tests for the AdminLogin use case with an in-memory token signer."""

import pytest

from storefront.application.admin_login import AdminLoginHandler
from storefront.application.ports import TokenSigner
from storefront.domain.exceptions import AuthenticationError


class DictTokenSigner(TokenSigner):
    """Hands out opaque ids for claims kept in a dict."""

    def __init__(self) -> None:
        self.issued: dict[str, dict] = {}

    def sign(self, claims: dict, ttl_seconds: int) -> str:
        token = f"tok-{len(self.issued) + 1}"
        self.issued[token] = dict(claims, ttl=ttl_seconds)
        return token

    def verify(self, token: str) -> dict | None:
        return self.issued.get(token)


def _handler(password: str | None = "s3cret") -> tuple[AdminLoginHandler, DictTokenSigner]:
    signer = DictTokenSigner()
    return AdminLoginHandler(signer, password, ttl_seconds=3600), signer


class TestAdminLogin:

    def test_correct_password_issues_token(self):
        handler, signer = _handler()
        session = handler.handle("s3cret")
        assert session.expires_in_seconds == 3600
        assert signer.issued[session.token] == {"role": "admin", "ttl": 3600}

    def test_wrong_password_rejected(self):
        handler, signer = _handler()
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            handler.handle("guess")
        assert signer.issued == {}

    def test_empty_password_rejected(self):
        handler, _ = _handler()
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            handler.handle("")

    def test_unconfigured_password_rejects_everything(self):
        handler, _ = _handler(password=None)
        with pytest.raises(AuthenticationError, match="not configured"):
            handler.handle("")


class TestAuthorize:

    def test_valid_token(self):
        handler, _ = _handler()
        token = handler.handle("s3cret").token
        assert handler.authorize(token)["role"] == "admin"

    @pytest.mark.parametrize("token", [None, "", "tok-404"])
    def test_missing_or_unknown_token(self, token):
        handler, _ = _handler()
        with pytest.raises(AuthenticationError, match="missing, invalid or expired"):
            handler.authorize(token)

    def test_token_without_admin_role(self):
        handler, signer = _handler()
        token = signer.sign({"role": "customer"}, 60)
        with pytest.raises(AuthenticationError):
            handler.authorize(token)
