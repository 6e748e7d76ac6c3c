"""SQLAlchemy repository for purchase orders.

This module owns the persistence of orders. The schema is a single
``orders`` table keyed by a UUID string; the ``items`` column stores the
ordered list of line items as a JSON array and is decoded on every read, so
callers only ever see Python lists.

The repository is bound to an explicit ``Engine`` passed at construction.
Every operation opens its own short-lived session and every write is a
single-row statement committed atomically. Any SQLAlchemy error is rolled
back and re-raised as ``StorageFault``.
"""

import json
import logging
import uuid
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import Float, Text, create_engine, delete, func, select, text, update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, mapped_column
from sqlalchemy.pool import StaticPool

from .domain import Order, OrderDraft, StorageFault

logger = logging.getLogger("orders.repo")


class Base(DeclarativeBase):
    pass


class OrderRow(Base):
    """SQLAlchemy model for a stored order.

    Column names keep the camelCase layout of the existing ``orders`` table
    so databases created by earlier deployments remain readable.

    Attributes:
        id: UUID string primary key.
        delivery_address: Delivery address.
        items: JSON-encoded list of line-item names.
        total: Order total.
        discount_code: Optional discount code.
        comment: Optional comment.
        status: Status string, stored verbatim.
    """

    __tablename__ = "orders"

    id = mapped_column(Text, primary_key=True)
    delivery_address = mapped_column("deliveryAddress", Text, nullable=False)
    items = mapped_column(Text, nullable=False)
    total = mapped_column(Float, nullable=False)
    discount_code = mapped_column("discountCode", Text, nullable=True)
    comment = mapped_column(Text, nullable=True)
    status = mapped_column(Text, nullable=False)


def encode_items(items: List[str]) -> str:
    """Serialize line items to the JSON text stored in the ``items`` column.

    ASCII escaping keeps every code point, lone surrogates included,
    representable in the database encoding.

    Args:
        items: Ordered list of strings.

    Returns:
        str: JSON array text.
    """
    return json.dumps(list(items))


def decode_items(raw: str) -> List[str]:
    """Inverse of ``encode_items``.

    Raises:
        StorageFault: When the stored value is not a JSON array of strings,
            for example a NULL or hand-edited row.
    """
    try:
        items = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageFault(f"CORRUPT_ITEMS: {e}") from e
    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise StorageFault("CORRUPT_ITEMS: expected a JSON array of strings")
    return items


def make_engine(database_url: str) -> Engine:
    """Create an engine for ``database_url``.

    sqlite connections are shared across the server's worker threads, and an
    in-memory sqlite database is pinned to a single connection so that every
    session sees the same data.

    Args:
        database_url: SQLAlchemy database URL.

    Returns:
        Engine: A new engine with connection pre-ping enabled.
    """
    url = make_url(database_url)
    kwargs = {"pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def _to_order(row: OrderRow) -> Order:
    return Order(
        id=row.id,
        delivery_address=row.delivery_address,
        items=decode_items(row.items),
        total=row.total,
        status=row.status,
        discount_code=row.discount_code,
        comment=row.comment,
    )


class OrderRepo:
    """Repository class for order operations.

    Reads never validate ``status``: whatever was stored is returned as is,
    and filtering by an unknown status simply matches nothing.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def _session(self):
        """Yield a session and turn database errors into ``StorageFault``.

        Yields:
            Session: Active SQLAlchemy session bound to the repository engine.

        Raises:
            StorageFault: When any SQLAlchemy error escapes the block.
        """
        with Session(self.engine) as s:
            try:
                yield s
            except SQLAlchemyError as e:
                s.rollback()
                logger.error("storage operation failed", extra={"error": str(e)})
                raise StorageFault(str(e)) from e

    def ensure_schema(self) -> None:
        """Create the ``orders`` table if it does not exist yet."""
        try:
            Base.metadata.create_all(self.engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise StorageFault(str(e)) from e

    def ping(self) -> None:
        """Run a trivial query to check the database accepts connections.

        Raises:
            StorageFault: When the database cannot be reached.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("select 1"))
        except SQLAlchemyError as e:
            raise StorageFault(str(e)) from e

    def count(self) -> int:
        with self._session() as s:
            return s.scalar(select(func.count()).select_from(OrderRow))

    def list_all(self) -> List[Order]:
        """Return every stored order, ordered by id.

        Returns:
            list[Order]: All orders with decoded items.
        """
        with self._session() as s:
            rows = s.execute(select(OrderRow).order_by(OrderRow.id)).scalars().all()
            return [_to_order(r) for r in rows]

    def list_by_status(self, status: str) -> List[Order]:
        """Return the orders whose stored status equals ``status`` exactly.

        Args:
            status: Status string to match. Not validated.

        Returns:
            list[Order]: Matching orders, empty when nothing matches.
        """
        with self._session() as s:
            rows = (
                s.execute(select(OrderRow).where(OrderRow.status == status).order_by(OrderRow.id))
                .scalars()
                .all()
            )
            return [_to_order(r) for r in rows]

    def get_by_id(self, order_id: str) -> Optional[Order]:
        """Get an order by id.

        Args:
            order_id: UUID string of the order.

        Returns:
            Order | None: The order, or None when no row has this id.
        """
        with self._session() as s:
            row = s.get(OrderRow, order_id)
            return _to_order(row) if row else None

    def create(self, draft: OrderDraft) -> Order:
        """Persist a new order under a freshly generated id.

        The returned order is read back from the database after commit
        rather than echoed from ``draft``.

        Args:
            draft: Fields of the new order.

        Returns:
            Order: The stored order.

        Raises:
            StorageFault: When the row cannot be committed, for example on a
                primary key collision.
        """
        order_id = str(uuid.uuid4())
        with self._session() as s:
            s.add(
                OrderRow(
                    id=order_id,
                    delivery_address=draft.delivery_address,
                    items=encode_items(draft.items),
                    total=draft.total,
                    discount_code=draft.discount_code,
                    comment=draft.comment,
                    status=draft.status,
                )
            )
            s.commit()
            row = s.get(OrderRow, order_id)
            if row is None:
                raise StorageFault("ORDER_NOT_PERSISTED")
            logger.info("order created", extra={"order_id": order_id})
            return _to_order(row)

    def update_status(self, order_id: str, status: str) -> Optional[Order]:
        """Overwrite the status of one order, leaving other fields untouched.

        Args:
            order_id: UUID string of the order.
            status: New status, written as given.

        Returns:
            Order | None: The updated order, or None when no row matched.
        """
        with self._session() as s:
            result = s.execute(
                update(OrderRow)
                .where(OrderRow.id == order_id)
                .values(status=status)
                .execution_options(synchronize_session=False)
            )
            s.commit()
            if result.rowcount == 0:
                return None
            row = s.get(OrderRow, order_id)
            return _to_order(row) if row else None

    def delete_by_id(self, order_id: str) -> bool:
        """Delete an order.

        Args:
            order_id: UUID string of the order.

        Returns:
            bool: True if a row was removed, False if none matched.
        """
        with self._session() as s:
            result = s.execute(
                delete(OrderRow)
                .where(OrderRow.id == order_id)
                .execution_options(synchronize_session=False)
            )
            s.commit()
            deleted = result.rowcount > 0
            if deleted:
                logger.info("order deleted", extra={"order_id": order_id})
            return deleted
