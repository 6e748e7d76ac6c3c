"""Domain models, ports and errors for orders.

This module contains the dataclasses used as DTOs between the store and the
API adapter, the enumeration of order statuses, the port describing the
order store, and the error taxonomy shared by every layer.
"""

from dataclasses import dataclass
from typing import Protocol, List, Optional
from enum import Enum


# ---- Enums ----
class OrderStatus(str, Enum):
    """Enumeration of the possible order statuses.

    Any status may replace any other; there is no transition graph.
    """

    PENDING = "PENDING"
    PAID = "PAID"
    IN_PROGRESS = "IN_PROGRESS"
    IN_DELIVERY = "IN_DELIVERY"
    DELIVERED = "DELIVERED"


# ---- Errors ----
class StorageFault(Exception):
    """The underlying database could not complete a read or write."""


class ValidationFault(ValueError):
    """Malformed input rejected before any write took place."""


# ---- Entities / DTOs ----
@dataclass
class OrderDraft:
    """Caller-supplied fields for a new order, without an identifier.

    Attributes:
        delivery_address: Non-empty delivery address.
        items: Ordered list of line-item names.
        total: Order total.
        status: Initial status. Never defaulted by the store.
        discount_code: Optional discount code.
        comment: Optional free-text comment.
    """

    delivery_address: str
    items: List[str]
    total: float
    status: str
    discount_code: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class Order:
    """A persisted purchase order as read back from the store.

    Attributes:
        id: UUID string assigned at creation.
        delivery_address: Delivery address.
        items: Decoded list of line-item names.
        total: Order total.
        status: Stored status value, returned verbatim.
        discount_code: Optional discount code.
        comment: Optional comment.
    """

    id: str
    delivery_address: str
    items: List[str]
    total: float
    status: str
    discount_code: Optional[str] = None
    comment: Optional[str] = None


# ---- Ports (DIP) ----
class OrderStorePort(Protocol):
    """Port describing the persistence operations used by the adapter."""

    def list_all(self) -> List[Order]: ...

    def list_by_status(self, status: str) -> List[Order]: ...

    def get_by_id(self, order_id: str) -> Optional[Order]: ...

    def create(self, draft: OrderDraft) -> Order: ...

    def update_status(self, order_id: str, status: str) -> Optional[Order]: ...

    def delete_by_id(self, order_id: str) -> bool: ...
