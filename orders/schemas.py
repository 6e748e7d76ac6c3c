"""Pydantic schemas for orders.

This module exposes the request/validation schema used by the orders API
adapter. External payloads use camelCase field names
(``deliveryAddress``, ``discountCode``); snake_case names are accepted too
so the adapter can be called with plain keyword arguments.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .domain import OrderDraft, OrderStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateOrderDTO(_CamelModel):
    """Schema for creating an order.

    Attributes:
        delivery_address: Non-empty delivery address.
        items: Ordered list of line-item names, possibly empty.
        total: Order total. No sign check is applied.
        discount_code: Optional discount code.
        comment: Optional comment.
        status: Initial status; must be one of ``OrderStatus``.
    """

    delivery_address: str = Field(min_length=1)
    items: list[str]
    total: float
    discount_code: Optional[str] = None
    comment: Optional[str] = None
    status: OrderStatus

    def to_draft(self) -> OrderDraft:
        return OrderDraft(
            delivery_address=self.delivery_address,
            items=list(self.items),
            total=self.total,
            status=self.status.value,
            discount_code=self.discount_code,
            comment=self.comment,
        )
