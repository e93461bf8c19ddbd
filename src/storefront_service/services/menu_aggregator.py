"""Aggregator joining categories and products into the public menu."""

import logging
import time
from collections import defaultdict

from storefront_service.gateways.base_gateway import DISPLAY_ORDER, TableGateway
from storefront_service.models.menu_models import (
    CATEGORIES_COLLECTION,
    PRODUCTS_COLLECTION,
    Category,
    MenuCategory,
    Product,
    parse_rows,
)
from storefront_service.observability.decorators import traced
from storefront_service.observability.metrics import record_menu_aggregation

logger = logging.getLogger(__name__)


def build_menu(categories: list[Category], products: list[Product]) -> list[MenuCategory]:
    """Nest available products under their active categories.

    The store is asked to filter and order already; the filters and the sort
    are applied again here so the result holds for any input. Sorting is
    stable, so equal display orders keep their incoming (creation) order.
    Products whose category is unknown or inactive are left out.

    Args:
        categories: Categories in any order
        products: Products in any order

    Returns:
        Active categories by ascending display order, each with its
        available products by ascending display order
    """
    active = sorted((c for c in categories if c.is_active), key=lambda c: c.display_order)
    available = sorted((p for p in products if p.is_available), key=lambda p: p.display_order)

    by_category: dict[str, list[Product]] = defaultdict(list)
    for product in available:
        by_category[product.category_id].append(product)

    known_ids = {category.id for category in active}
    uncategorized = sum(
        len(items) for category_id, items in by_category.items() if category_id not in known_ids
    )
    if uncategorized:
        logger.warning(f"{uncategorized} available products reference no active category")

    return [MenuCategory.from_category(c, by_category.get(c.id, [])) for c in active]


class MenuAggregator:
    """Service producing the nested menu served on the public menu page.

    Both reads must succeed; a failure of either yields no menu at all rather
    than a partially joined one.
    """

    def __init__(self, gateway: TableGateway) -> None:
        """Initialize the aggregator.

        Args:
            gateway: Gateway to the hosted data store
        """
        self.gateway = gateway

    @traced("menu.aggregate")
    async def get_menu(self) -> list[MenuCategory] | None:
        """Fetch active categories and available products and join them.

        Returns:
            Ordered list of MenuCategory, or None if either read failed
        """
        started = time.perf_counter()

        category_rows = await self.gateway.select(
            CATEGORIES_COLLECTION, filters={"is_active": True}, order=DISPLAY_ORDER
        )
        if category_rows is None:
            logger.error("Failed to fetch menu categories")
            record_menu_aggregation(time.perf_counter() - started, False)
            return None

        product_rows = await self.gateway.select(
            PRODUCTS_COLLECTION, filters={"is_available": True}, order=DISPLAY_ORDER
        )
        if product_rows is None:
            logger.error("Failed to fetch menu products")
            record_menu_aggregation(time.perf_counter() - started, False)
            return None

        categories = parse_rows(Category.from_row, category_rows, CATEGORIES_COLLECTION)
        products = parse_rows(Product.from_row, product_rows, PRODUCTS_COLLECTION)
        if categories is None or products is None:
            record_menu_aggregation(time.perf_counter() - started, False)
            return None

        menu = build_menu(categories, products)
        record_menu_aggregation(time.perf_counter() - started, True)
        return menu
