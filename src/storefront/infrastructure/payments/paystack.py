"""Paystack implementation of the PaymentGateway port.

Amounts go over the wire in kobo (Naira x 100).
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

from storefront.application.ports import (
    PaymentGateway,
    PaymentInitialization,
    PaymentVerification,
)
from storefront.domain.exceptions import PaymentGatewayError
from storefront.domain.model.value_objects import Money
from storefront.logging import get_logger

logger = get_logger(__name__)

KOBO_PER_NAIRA = 100


class PaystackGateway(PaymentGateway):

    def __init__(
        self,
        secret_key: str | None,
        base_url: str = "https://api.paystack.co",
        timeout: float = 15.0,
        opener: Callable[..., Any] = urllib.request.urlopen,
    ) -> None:
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._opener = opener

    def initialize_transaction(
        self,
        amount: Money,
        reference: str,
        email: str,
        callback_url: str,
        metadata: dict | None = None,
    ) -> PaymentInitialization:
        body = self._call(
            "POST",
            "/transaction/initialize",
            {
                "email": email,
                "amount": amount.amount * KOBO_PER_NAIRA,
                "reference": reference,
                "callback_url": callback_url,
                "metadata": metadata or {},
            },
        )
        if not body.get("status"):
            raise PaymentGatewayError(body.get("message") or "Paystack init failed", body)

        data = body.get("data") or {}
        if not data.get("authorization_url") or not data.get("access_code"):
            raise PaymentGatewayError("Paystack response is missing the authorization URL", body)
        return PaymentInitialization(
            authorization_url=data["authorization_url"],
            access_code=data["access_code"],
            reference=data.get("reference", reference),
        )

    def verify_transaction(self, reference: str) -> PaymentVerification:
        body = self._call("GET", f"/transaction/verify/{quote(reference, safe='')}")
        if not body.get("status"):
            return PaymentVerification.FAILED

        status = (body.get("data") or {}).get("status")
        if status == "success":
            return PaymentVerification.SUCCESS
        if status in ("failed", "abandoned", "reversed"):
            return PaymentVerification.FAILED
        return PaymentVerification.PENDING

    # --- HTTP -----------------------------------------------------------------

    def _call(self, method: str, path: str, payload: dict | None = None) -> dict:
        if not self._secret_key:
            raise PaymentGatewayError("PAYSTACK_SECRET_KEY missing")

        request = urllib.request.Request(
            f"{self._base_url}{path}",
            data=json.dumps(payload).encode("utf-8") if payload is not None else None,
            method=method,
            headers={
                "Authorization": f"Bearer {self._secret_key}",
                "Content-Type": "application/json",
            },
        )
        try:
            with self._opener(request, timeout=self._timeout) as response:
                return json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            # Paystack reports rejections as JSON bodies on 4xx responses.
            try:
                return json.loads(exc.read().decode("utf-8"))
            except ValueError:
                raise PaymentGatewayError(f"Paystack returned HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.error("Paystack {} {} failed: {}", method, path, exc)
            raise PaymentGatewayError("Payment gateway unavailable") from exc
