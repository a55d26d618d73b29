"""
Mock order catalog.

In production, this would query the order management system for the
customer's recent orders. The experiment uses three fixed orders, one
per status category.
"""

import logging
import re
from datetime import date
from typing import Optional

from order_support.schemas.order_schema import Order, OrderStatus
from order_support.utils import normalize_message

logger = logging.getLogger(__name__)

ORDER_CATALOG: dict[str, Order] = {
    "A": Order(
        id="A",
        product="Product X",
        status=OrderStatus.IN_TRANSIT,
        estimated_delivery=date(2024, 7, 25),
    ),
    "B": Order(
        id="B",
        product="Product Y",
        status=OrderStatus.PROCESSING,
        estimated_delivery=date(2024, 7, 30),
    ),
    "C": Order(
        id="C",
        product="Product Z",
        status=OrderStatus.DELIVERED,
        delivered_on=date(2024, 7, 20),
    ),
}


def _order_pattern(order_id: str) -> re.Pattern[str]:
    letter = re.escape(order_id.lower())
    return re.compile(rf"\b(order\s*{letter}|{letter})\b", re.IGNORECASE)


_ORDER_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (order_id, _order_pattern(order_id)) for order_id in ORDER_CATALOG
]


def get_order(order_id: str) -> Optional[Order]:
    """Return the order with this identifier, or None."""
    return ORDER_CATALOG.get(order_id.upper())


def get_all_orders() -> list[Order]:
    """Return every order in catalog order."""
    return list(ORDER_CATALOG.values())


def order_option_labels() -> list[str]:
    """Option labels for the order-selection prompt."""
    return [order.label for order in ORDER_CATALOG.values()]


def match_order(message: str) -> Optional[Order]:
    """Find the first order a free-text message refers to.

    Accepts the bare letter or ``order <letter>``, case-insensitive and
    whitespace-tolerant. Catalog order decides ties.
    """
    normalized = normalize_message(message)
    for order_id, pattern in _ORDER_PATTERNS:
        if pattern.search(normalized):
            logger.debug("Message %r matched order %s", message, order_id)
            return ORDER_CATALOG[order_id]
    return None
