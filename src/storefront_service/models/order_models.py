"""Order and dashboard models.

The dashboard and orders screens show illustrative data only; these models
give that data a shape so it can be filtered, sorted and served like the
live collections.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OrderStatusEnum(str, Enum):
    """Enumeration of order status values."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderSortField(str, Enum):
    """Columns the orders table can be sorted by."""

    DATE = "date"
    AMOUNT = "amount"
    CUSTOMER = "customer"
    ID = "id"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Order(BaseModel):
    """A customer order as listed on the orders screen."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Display identifier, e.g. '#ORD-1001'")
    customer: str = Field(..., description="Customer name")
    email: str = Field(..., description="Customer email")
    amount: Decimal = Field(..., description="Order total", ge=0)
    status: OrderStatusEnum = Field(..., description="Current order status")
    placed_on: date = Field(..., description="Date the order was placed")
    items: int = Field(..., description="Number of items in the order", ge=0)
    payment_method: str = Field(..., description="How the order was paid")


class DashboardStat(BaseModel):
    """A single stat card on the dashboard."""

    title: str
    value: str
    change: str
    trend: str


class OrderListing(BaseModel):
    """Filtered and sorted orders together with the unfiltered total."""

    orders: list[Order]
    total: int
    shown: int
