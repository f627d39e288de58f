"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pathlib import Path

from storefront.config import get_config
from storefront.domain.service.risk_scorer import RiskScorer
from storefront.infrastructure.notifications.dispatcher import BackgroundNotifier
from storefront.infrastructure.notifications.email_notifier import EmailNotificationService
from storefront.infrastructure.payments.paystack import PaystackGateway
from storefront.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from storefront.infrastructure.security.rate_limiter import SlidingWindowRateLimiter
from storefront.infrastructure.security.tokens import JwtTokenSigner

# Relative data directories resolve against the project root.
# When installed in editable mode the project root is the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[3]

_notifier: BackgroundNotifier | None = None


def data_dir() -> Path:
    path = Path(get_config().data_dir).expanduser()
    return path if path.is_absolute() else _PROJECT_ROOT / path


def unit_of_work() -> JsonUnitOfWork:
    return JsonUnitOfWork(data_dir())


def notifier() -> BackgroundNotifier:
    global _notifier
    if _notifier is None:
        config = get_config()
        _notifier = BackgroundNotifier(
            EmailNotificationService(config, uow_factory=unit_of_work),
            max_workers=config.notification_workers,
        )
    return _notifier


def shutdown() -> None:
    """Let queued notifications finish before the process exits."""
    global _notifier
    if _notifier is not None:
        _notifier.close(wait=True)
        _notifier = None


def risk_scorer() -> RiskScorer:
    config = get_config()
    return RiskScorer(
        high_amount_threshold=config.risk_high_amount_threshold,
        review_threshold=config.risk_review_threshold,
    )


def rate_limiter() -> SlidingWindowRateLimiter:
    config = get_config()
    return SlidingWindowRateLimiter(
        limit=config.checkout_rate_limit,
        window_seconds=config.checkout_rate_window_seconds,
    )


def payment_gateway() -> PaystackGateway:
    config = get_config()
    return PaystackGateway(
        secret_key=config.paystack_secret_key,
        base_url=config.paystack_base_url,
        timeout=config.paystack_timeout_seconds,
    )


def token_signer() -> JwtTokenSigner:
    return JwtTokenSigner(get_config().admin_token_secret)


def stock_alerts() -> EmailNotificationService:
    """Synchronous notifier; the low-stock job reports what was delivered."""
    return EmailNotificationService(get_config(), uow_factory=unit_of_work)
