"""Order catalog data models."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class OrderStatus(str, Enum):
    IN_TRANSIT = "In transit"
    PROCESSING = "Processing"
    DELIVERED = "Delivered"


class Order(BaseModel):
    """A known order. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str
    product: str
    status: OrderStatus
    estimated_delivery: Optional[date] = None
    delivered_on: Optional[date] = None

    @property
    def label(self) -> str:
        """Option label shown to the user, e.g. ``Order A``."""
        return f"Order {self.id}"
