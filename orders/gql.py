"""GraphQL schema for the orders API.

The schema exposes the ``orders``/``order`` queries and the
``createOrder``/``updateStatus``/``deleteOrder`` mutations. Each resolver
delegates to the ``OrderAPI`` found in the request context, so a missing
order comes back as ``null`` and a deletion as a plain ``Boolean``.
Argument and field names are camelCased by strawberry.
"""

from typing import List, Optional

import strawberry
from fastapi import Request
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from .api import OrderAPI
from .domain import Order, OrderStatus, StorageFault

OrderStatusType = strawberry.enum(OrderStatus, name="OrderStatus")


@strawberry.type(name="Order")
class OrderType:
    id: strawberry.ID
    delivery_address: str
    items: List[str]
    total: float
    discount_code: Optional[str]
    comment: Optional[str]
    status: OrderStatusType

    @classmethod
    def from_order(cls, order: Order) -> "OrderType":
        return cls(
            id=strawberry.ID(order.id),
            delivery_address=order.delivery_address,
            items=order.items,
            total=order.total,
            discount_code=order.discount_code,
            comment=order.comment,
            status=OrderStatus(order.status),
        )


def _api(info: Info) -> OrderAPI:
    return info.context["api"]


def _maybe(order: Optional[Order]) -> Optional[OrderType]:
    return OrderType.from_order(order) if order else None


@strawberry.type
class Query:
    @strawberry.field
    def orders(self, info: Info, status: Optional[OrderStatusType] = None) -> List[OrderType]:
        orders = _api(info).orders(status.value if status else None)
        return [OrderType.from_order(o) for o in orders]

    @strawberry.field
    def order(self, info: Info, id: strawberry.ID) -> Optional[OrderType]:
        return _maybe(_api(info).order(str(id)))


@strawberry.type
class Mutation:
    @strawberry.mutation
    def create_order(
        self,
        info: Info,
        delivery_address: str,
        items: List[str],
        total: float,
        status: OrderStatusType,
        discount_code: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Optional[OrderType]:
        order = _api(info).create_order(
            delivery_address=delivery_address,
            items=items,
            total=total,
            discount_code=discount_code,
            comment=comment,
            status=status.value,
        )
        return OrderType.from_order(order)

    @strawberry.mutation
    def update_status(self, info: Info, id: strawberry.ID, status: OrderStatusType) -> Optional[OrderType]:
        return _maybe(_api(info).update_status(str(id), status.value))

    @strawberry.mutation
    def delete_order(self, info: Info, id: strawberry.ID) -> Optional[bool]:
        return _api(info).delete_order(str(id))


def _is_storage_fault(error: GraphQLError) -> bool:
    return isinstance(error.original_error, StorageFault)


# storage faults reach clients only as STORAGE_UNAVAILABLE
schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[MaskErrors(should_mask_error=_is_storage_fault, error_message="STORAGE_UNAVAILABLE")],
)


def get_context(request: Request) -> dict:
    return {"api": request.app.state.api}


def graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
