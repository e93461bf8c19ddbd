"""Dashboard and orders screens.

There is no orders collection in the hosted store yet; both screens serve
the fixed illustrative data below. The orders screen still supports search,
status filtering and sorting over it.
"""

import logging
from datetime import date
from decimal import Decimal

from storefront_service.models.order_models import (
    DashboardStat,
    Order,
    OrderListing,
    OrderSortField,
    OrderStatusEnum,
    SortDirection,
)

logger = logging.getLogger(__name__)

SAMPLE_STATS = [
    DashboardStat(title="Total Revenue", value="$12,345", change="+12.5%", trend="up"),
    DashboardStat(title="Total Orders", value="1,234", change="+8.2%", trend="up"),
    DashboardStat(title="Total Customers", value="567", change="+15.3%", trend="up"),
    DashboardStat(title="Products Sold", value="2,345", change="-3.1%", trend="down"),
]


def _order(
    number: int,
    customer: str,
    amount: str,
    status: OrderStatusEnum,
    placed_on: date,
    items: int,
    payment_method: str,
) -> Order:
    first_name = customer.split()[0].lower()
    return Order(
        id=f"#ORD-{number}",
        customer=customer,
        email=f"{first_name}@example.com",
        amount=Decimal(amount),
        status=status,
        placed_on=placed_on,
        items=items,
        payment_method=payment_method,
    )


SAMPLE_ORDERS = [
    _order(1001, "John Doe", "45.99", OrderStatusEnum.COMPLETED, date(2024, 1, 15), 3, "Credit Card"),
    _order(1002, "Jane Smith", "32.50", OrderStatusEnum.PENDING, date(2024, 1, 15), 2, "PayPal"),
    _order(1003, "Bob Johnson", "78.25", OrderStatusEnum.PROCESSING, date(2024, 1, 14), 5, "Credit Card"),
    _order(1004, "Alice Brown", "55.00", OrderStatusEnum.COMPLETED, date(2024, 1, 14), 4, "Debit Card"),
    _order(1005, "Charlie Wilson", "29.99", OrderStatusEnum.CANCELLED, date(2024, 1, 13), 1, "Credit Card"),
    _order(1006, "Diana Prince", "67.75", OrderStatusEnum.PROCESSING, date(2024, 1, 13), 3, "PayPal"),
    _order(1007, "Edward Smith", "41.25", OrderStatusEnum.COMPLETED, date(2024, 1, 12), 2, "Credit Card"),
    _order(1008, "Fiona Green", "89.50", OrderStatusEnum.PENDING, date(2024, 1, 12), 6, "Debit Card"),
]

_SORT_KEYS = {
    OrderSortField.DATE: lambda order: order.placed_on,
    OrderSortField.AMOUNT: lambda order: order.amount,
    OrderSortField.CUSTOMER: lambda order: order.customer.lower(),
    OrderSortField.ID: lambda order: order.id,
}


class DashboardService:
    """Serves the dashboard stat cards, recent orders and the orders table."""

    def __init__(self, orders: list[Order] | None = None, stats: list[DashboardStat] | None = None) -> None:
        """Initialize the service.

        Args:
            orders: Orders to serve (defaults to the sample orders)
            stats: Stat cards to serve (defaults to the sample stats)
        """
        self.orders = list(SAMPLE_ORDERS if orders is None else orders)
        self.stats = list(SAMPLE_STATS if stats is None else stats)

    def get_stats(self) -> list[DashboardStat]:
        return list(self.stats)

    def get_recent_orders(self, limit: int = 5) -> list[Order]:
        """Most recent orders first.

        Args:
            limit: Maximum number of orders to return

        Returns:
            Up to `limit` orders, newest first
        """
        return sorted(self.orders, key=lambda order: order.placed_on, reverse=True)[:limit]

    def list_orders(
        self,
        search: str = "",
        status: OrderStatusEnum | None = None,
        sort_by: OrderSortField = OrderSortField.DATE,
        direction: SortDirection = SortDirection.DESC,
    ) -> OrderListing:
        """Filter and sort the orders table.

        Args:
            search: Case-insensitive text matched against customer, order id and email
            status: Only orders with this status; None for all
            sort_by: Column to sort by
            direction: Sort direction

        Returns:
            OrderListing with the matching orders and the unfiltered total
        """
        needle = search.strip().lower()

        def matches(order: Order) -> bool:
            if status is not None and order.status != status:
                return False
            if not needle:
                return True
            return any(needle in text.lower() for text in (order.customer, order.id, order.email))

        selected = sorted(
            (order for order in self.orders if matches(order)),
            key=_SORT_KEYS[sort_by],
            reverse=direction == SortDirection.DESC,
        )
        logger.debug(f"Orders listing: {len(selected)} of {len(self.orders)} shown")
        return OrderListing(orders=selected, total=len(self.orders), shown=len(selected))
