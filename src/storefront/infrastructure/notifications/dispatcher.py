"""Fire-and-forget dispatch of notifications on a small thread pool."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor

from storefront.application.ports import NotificationService
from storefront.domain.model.order import Order, OrderStatus
from storefront.logging import get_logger

logger = get_logger(__name__)


class BackgroundNotifier(NotificationService):
    """Runs another NotificationService off the request path.

    The caller gets control back immediately; failures are logged
    against the order reference and go no further.
    """

    def __init__(self, inner: NotificationService, max_workers: int = 2) -> None:
        self._inner = inner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notify"
        )

    def notify_new_order(self, order: Order) -> None:
        self._submit(order, self._inner.notify_new_order, order)

    def notify_status_changed(
        self,
        order: Order,
        previous_status: OrderStatus,
        next_status: OrderStatus,
    ) -> None:
        self._submit(
            order, self._inner.notify_status_changed, order, previous_status, next_status
        )

    def close(self, wait: bool = True) -> None:
        """Stop accepting work; with ``wait`` block until queued sends finish."""
        self._executor.shutdown(wait=wait)

    def _submit(self, order: Order, fn, *args) -> Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda f: self._report(order, f))
        return future

    @staticmethod
    def _report(order: Order, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.opt(exception=exc).error(
                "Notification for order {} failed", order.reference
            )
