"""Order API adapter.

``OrderAPI`` maps the query/mutation operations of the orders API onto a
single call of the injected order store each. It validates inputs with the
pydantic schemas from ``schemas`` so that a malformed request never reaches
the store, and otherwise passes results through unchanged: a missing order
is returned as ``None`` and deletions return the store's boolean.
"""

from typing import List, Optional

from pydantic import ValidationError

from .domain import Order, OrderStatus, OrderStorePort, ValidationFault
from .schemas import CreateOrderDTO


def _validate_status(status: str) -> str:
    try:
        return OrderStatus(status).value
    except ValueError:
        raise ValidationFault(f"Invalid order status: {status!r}") from None


class OrderAPI:
    """Adapter between external order operations and the order store."""

    def __init__(self, store: OrderStorePort):
        """Initialize the adapter with its store.

        Args:
            store: Order store every operation delegates to.
        """
        self.store = store

    def orders(self, status: Optional[str] = None) -> List[Order]:
        """List orders, optionally filtered by status.

        Args:
            status: Optional status to filter on.

        Returns:
            list[Order]: All orders, or those with the given status.

        Raises:
            ValidationFault: If ``status`` is not a known order status.
        """
        if status is None:
            return self.store.list_all()
        return self.store.list_by_status(_validate_status(status))

    def order(self, order_id: str) -> Optional[Order]:
        return self.store.get_by_id(order_id)

    def create_order(self, **fields) -> Order:
        """Create an order from the given fields.

        Accepts either camelCase (``deliveryAddress``) or snake_case
        (``delivery_address``) field names.

        Returns:
            Order: The order as stored.

        Raises:
            ValidationFault: If a required field is missing or malformed.
                Nothing is written in that case.
        """
        try:
            dto = CreateOrderDTO.model_validate(fields)
        except ValidationError as e:
            raise ValidationFault(str(e)) from e
        return self.store.create(dto.to_draft())

    def update_status(self, order_id: str, status: str) -> Optional[Order]:
        """Set the status of an order.

        Args:
            order_id: Id of the order to update.
            status: New status.

        Returns:
            Order | None: The updated order, or None if it does not exist.

        Raises:
            ValidationFault: If ``status`` is not a known order status.
        """
        return self.store.update_status(order_id, _validate_status(status))

    def delete_order(self, order_id: str) -> bool:
        return self.store.delete_by_id(order_id)
