"""Email notifications for orders and stock alerts, with a WhatsApp-link fallback.

Every attempt, successful or not, lands in the notification log so the
admin can see who was told what.  Nothing here raises to the caller:
delivery problems are logged and recorded, never propagated.
"""

from __future__ import annotations

import smtplib
from collections.abc import Callable
from email.message import EmailMessage
from urllib.parse import quote

from storefront.application.ports import (
    DeliveryReport,
    NotificationService,
    StockAlertService,
)
from storefront.config import StorefrontSettings
from storefront.domain.model.notification_log import NotificationLog, NotificationStatus
from storefront.domain.model.order import Order, OrderStatus
from storefront.domain.model.product import LowStockSummary
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.logging import get_logger

logger = get_logger(__name__)

STORE_NAME = "Vicbest Store"

# Statuses the customer hears about after checkout.
WATCHED_STATUSES = frozenset(
    {OrderStatus.PROCESSING, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)


class SmtpMailer:
    """Thin wrapper over smtplib; one connection per message."""

    def __init__(self, settings: StorefrontSettings) -> None:
        self._settings = settings

    def send(self, to: str, subject: str, text: str, html: str) -> None:
        s = self._settings
        message = EmailMessage()
        message["From"] = s.sender_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=30) as smtp:
            if s.smtp_use_tls:
                smtp.starttls()
            smtp.login(s.smtp_user, s.smtp_password)
            smtp.send_message(message)


class EmailNotificationService(NotificationService, StockAlertService):

    def __init__(
        self,
        settings: StorefrontSettings,
        uow_factory: Callable[[], UnitOfWork],
        mailer: SmtpMailer | None = None,
    ) -> None:
        self._settings = settings
        self._uow_factory = uow_factory
        self._mailer = mailer or SmtpMailer(settings)

    @property
    def _smtp_ready(self) -> bool:
        return self._settings.smtp_configured

    # --- NotificationService interface ----------------------------------------

    def notify_new_order(self, order: Order) -> None:
        self._notify_customer_order_created(order)
        self._notify_admin_order_created(order)

    def notify_status_changed(
        self,
        order: Order,
        previous_status: OrderStatus,
        next_status: OrderStatus,
    ) -> None:
        if next_status not in WATCHED_STATUSES or previous_status == next_status:
            return

        event_type = "order_status_changed"
        recipient = order.customer.email
        payload = {"previous_status": previous_status.value, "next_status": next_status.value}

        if not self._smtp_ready:
            self._log(order, event_type, "email", recipient, NotificationStatus.SKIPPED,
                      "SMTP not configured", payload)
            return

        subject = f"Order update: {order.reference} is now {next_status.label}"
        text = "\n".join([
            f"Hi {order.customer.name or 'Customer'},",
            "",
            f"Your order {order.reference} status changed from "
            f"{previous_status.label} to {next_status.label}.",
        ])
        html = (
            f"<p>Hi {order.customer.name or 'Customer'},</p>"
            f"<p>Your order <strong>{order.reference}</strong> status changed from "
            f"<strong>{previous_status.label}</strong> to <strong>{next_status.label}</strong>.</p>"
        )
        self._send(order, event_type, recipient, subject, text, html, payload)

    # --- StockAlertService interface ------------------------------------------

    def notify_low_stock_summary(self, summary: LowStockSummary) -> DeliveryReport:
        event_type = "low_stock_daily_summary"
        recipients = self._settings.admin_recipients
        payload = {
            "low_stock_count": summary.low_stock_count,
            "total_in_stock_products": summary.total_in_stock_products,
        }

        if not recipients:
            self._log(None, event_type, "email", "", NotificationStatus.SKIPPED,
                      "ADMIN_NOTIFICATION_EMAILS not configured", payload)
            return DeliveryReport(skipped=True)
        if not self._smtp_ready:
            for recipient in recipients:
                self._log(None, event_type, "email", recipient, NotificationStatus.SKIPPED,
                          "SMTP not configured", payload)
            return DeliveryReport(skipped=True)

        generated = summary.generated_at.isoformat()
        lines = [
            f"{n}. {p.name} ({p.category.value}) - Qty {p.stock_quantity} / "
            f"Threshold {p.low_stock_threshold}"
            for n, p in enumerate(summary.products, start=1)
        ]
        subject = f"Daily low-stock summary: {summary.low_stock_count} alert(s)"
        text = "\n".join([
            f"{STORE_NAME} low-stock daily summary",
            f"Generated: {generated}",
            f"In-stock products tracked: {summary.total_in_stock_products}",
            f"Low-stock alerts: {summary.low_stock_count}",
            "",
            *(lines or ["No low-stock products right now."]),
        ])
        items = "".join(
            f"<li>{p.name} ({p.category.value}) - Qty <strong>{p.stock_quantity}</strong> / "
            f"Threshold <strong>{p.low_stock_threshold}</strong></li>"
            for p in summary.products
        )
        html = (
            f"<h3>{STORE_NAME}: Low-stock daily summary</h3>"
            f"<p><strong>Generated:</strong> {generated}<br>"
            f"<strong>In-stock products tracked:</strong> {summary.total_in_stock_products}<br>"
            f"<strong>Low-stock alerts:</strong> {summary.low_stock_count}</p>"
            f"<ul>{items or '<li>No low-stock products right now.</li>'}</ul>"
        )

        sent = 0
        for recipient in recipients:
            if self._send(None, event_type, recipient, subject, text, html, payload):
                sent += 1
        return DeliveryReport(sent=sent, failed=len(recipients) - sent)

    # --- Customer / admin messages --------------------------------------------

    def _notify_customer_order_created(self, order: Order) -> None:
        event_type = "order_created_customer"
        recipient = order.customer.email

        if not self._smtp_ready:
            self._log(order, event_type, "whatsapp_link", recipient, NotificationStatus.FALLBACK,
                      "SMTP not configured", self.fallback_payload(order))
            return

        subject = f"Order received: {order.reference}"
        text = "\n".join([
            f"Hi {order.customer.name or 'Customer'},",
            "",
            f"Your order has been received by {STORE_NAME}.",
            f"Reference: {order.reference}",
            f"Status: {order.status.label}",
            *_totals_lines(order),
            "",
            "Items:",
            *_item_lines(order),
        ])
        html = (
            f"<h3>{STORE_NAME} Order Confirmation</h3>"
            f"<p>Hi {order.customer.name or 'Customer'}, your order has been received.</p>"
            f"<p><strong>Reference:</strong> {order.reference}<br>"
            f"<strong>Status:</strong> {order.status.label}</p>"
            f"<p>{'<br>'.join(_totals_lines(order))}</p>"
            f"<ul>{_items_html(order)}</ul>"
        )
        self._send(order, event_type, recipient, subject, text, html)

    def _notify_admin_order_created(self, order: Order) -> None:
        event_type = "order_created_admin"
        recipients = self._settings.admin_recipients

        if not recipients:
            self._log(order, event_type, "email", "", NotificationStatus.SKIPPED,
                      "ADMIN_NOTIFICATION_EMAILS not configured")
            return
        if not self._smtp_ready:
            for recipient in recipients:
                self._log(order, event_type, "email", recipient, NotificationStatus.SKIPPED,
                          "SMTP not configured")
            return

        subject = f"New order alert: {order.reference}"
        text = "\n".join([
            "A new order was created.",
            f"Order ID: {order.id}",
            f"Reference: {order.reference}",
            f"Customer: {order.customer.name} ({order.customer.email})",
            f"Status: {order.status.label}",
            f"Grand Total: {order.grand_total}",
            f"Risk: {order.risk_level.value} ({order.risk_score})",
            "",
            "Items:",
            *_item_lines(order),
        ])
        html = (
            "<h3>New Order Alert</h3>"
            f"<p><strong>Order ID:</strong> {order.id}<br>"
            f"<strong>Reference:</strong> {order.reference}<br>"
            f"<strong>Customer:</strong> {order.customer.name} ({order.customer.email})<br>"
            f"<strong>Status:</strong> {order.status.label}<br>"
            f"<strong>Grand Total:</strong> {order.grand_total}</p>"
            f"<ul>{_items_html(order)}</ul>"
        )
        for recipient in recipients:
            self._send(order, event_type, recipient, subject, text, html)

    def fallback_payload(self, order: Order) -> dict:
        """Prefilled WhatsApp message the customer can send the store."""
        text = "\n".join([
            f"Order Confirmation: {order.reference}",
            f"Hello {order.customer.name or 'Customer'}, your order has been received by {STORE_NAME}.",
            "",
            *(
                f"{n}. {item.product_name} x {item.quantity} - {item.line_total}"
                for n, item in enumerate(order.items, start=1)
            ),
            "",
            *_totals_lines(order),
            f"Status: {order.status.label}",
            f"Track: {self._settings.base_url.rstrip('/')}/track/{order.reference}",
        ])
        number = "".join(ch for ch in self._settings.store_whatsapp_number if ch.isdigit())
        return {"text": text, "whatsapp_url": f"https://wa.me/{number}?text={quote(text)}"}

    # --- Delivery + log -------------------------------------------------------

    def _send(
        self,
        order: Order | None,
        event_type: str,
        recipient: str,
        subject: str,
        text: str,
        html: str,
        payload: dict | None = None,
    ) -> bool:
        try:
            self._mailer.send(recipient, subject, text, html)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Email {} to {} failed: {}", event_type, recipient, exc)
            failed_payload = dict(payload or {})
            if event_type == "order_created_customer":
                failed_payload.update(self.fallback_payload(order))
            self._log(order, event_type, "email", recipient, NotificationStatus.FAILED,
                      str(exc), failed_payload)
            return False

        self._log(order, event_type, "email", recipient, NotificationStatus.SENT, None, payload)
        return True

    def _log(
        self,
        order: Order | None,
        event_type: str,
        channel: str,
        recipient: str,
        status: NotificationStatus,
        error: str | None = None,
        payload: dict | None = None,
    ) -> None:
        logger.info(
            "Notification {} for {} via {}: {}",
            event_type,
            order.reference if order else "store",
            channel,
            status.value,
        )
        entry = NotificationLog(
            order_id=order.id if order else None,
            event_type=event_type,
            channel=channel,
            recipient=recipient or "",
            status=status,
            error_message=error[:2000] if error else None,
            payload=payload or {},
        )
        with self._uow_factory() as uow:
            uow.notification_logs.append(entry)
            uow.commit()


def _totals_lines(order: Order) -> list[str]:
    lines = [f"Subtotal: {order.subtotal_amount}"]
    if not order.total_discount.is_zero:
        lines.append(f"Discount: -{order.total_discount}")
    lines.append(f"Delivery: {order.delivery_fee}")
    lines.append(f"Grand Total: {order.grand_total}")
    return lines


def _item_lines(order: Order) -> list[str]:
    return [f"- {i.quantity} x {i.product_name} ({i.line_total})" for i in order.items]


def _items_html(order: Order) -> str:
    lines = "".join(
        f"<li>{i.quantity} &times; {i.product_name} ({i.line_total})</li>" for i in order.items
    )
    return lines or "<li>No items captured</li>"
