"""Custom metrics for the storefront cart service."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("storefront-svc")

cart_upsert_counter = meter.create_counter(
    name="cart_upsert_total",
    description="Total number of cart mirror upserts",
    unit="1",
)

cart_push_failure_counter = meter.create_counter(
    name="cart_push_failure_total",
    description="Client cart pushes that did not reach the cart store",
    unit="1",
)

orders_placed_counter = meter.create_counter(
    name="orders_placed_total",
    description="Total number of orders placed",
    unit="1",
)

orders_rejected_counter = meter.create_counter(
    name="orders_rejected_total",
    description="Order payloads rejected by validation",
    unit="1",
)

order_total_histogram = meter.create_histogram(
    name="order_total_amount",
    description="Client-computed order totals",
    unit="1",
)


def record_cart_upsert(line_count: int) -> None:
    """Record a cart mirror upsert.

    Args:
        line_count: Number of lines in the stored cart
    """
    cart_upsert_counter.add(1, {"empty": line_count == 0})


def record_cart_push_failure(reason: str) -> None:
    """Record a client-side cart push that failed.

    Args:
        reason: Short failure category (e.g., "http_error", "unexpected")
    """
    cart_push_failure_counter.add(1, {"reason": reason})


def record_order_placed(total: Decimal, line_count: int) -> None:
    """Record a successfully persisted order.

    Args:
        total: Order total as sent by the client
        line_count: Number of lines in the order snapshot
    """
    orders_placed_counter.add(1, {"line_count": line_count})
    order_total_histogram.record(float(total))


def record_order_rejected(reason: str) -> None:
    """Record an order payload that failed validation.

    Args:
        reason: Validation failure message
    """
    orders_rejected_counter.add(1, {"reason": reason})
