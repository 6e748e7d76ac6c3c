"""Populate an empty order store with synthetic orders.

Seeding is idempotent: when the store already holds any order nothing is
written, so running the seeder on every deployment never doubles the data.

Usage::

    python -m orders.seeder --count 20 --database-url sqlite:///./database.db
"""

import argparse
import logging
import random
import string
from typing import List, Optional

from .config import load_env
from .domain import OrderDraft, OrderStatus
from .logging_filters import configure_logging
from .repo import OrderRepo, make_engine

logger = logging.getLogger("orders.seeder")

STREETS = ["Main St", "Oak Ave", "Maple Rd", "Cedar Ln", "Elm St", "Pine Ct", "Lake View Dr", "Hillside Blvd"]
CITIES = ["Springfield", "Riverton", "Fairview", "Greenville", "Madison", "Georgetown"]
PRODUCTS = [
    "Chair", "Table", "Keyboard", "Mouse", "Shoes", "Hat", "Gloves", "Towels",
    "Pizza", "Salad", "Cheese", "Bacon", "Soap", "Ball", "Bike", "Computer",
]
WORDS = [
    "lorem", "ipsum", "dolor", "sit", "amet", "consectetur", "adipiscing", "elit",
    "sed", "do", "eiusmod", "tempor", "incididunt", "ut", "labore", "magna",
]


def _address(rng: random.Random) -> str:
    return (
        f"{rng.randint(1, 9999)} {rng.choice(STREETS)} "
        f"Apt. {rng.randint(1, 999)}, {rng.choice(CITIES)}"
    )


def _sentence(rng: random.Random, words: int = 5) -> str:
    text = " ".join(rng.choice(WORDS) for _ in range(words))
    return text.capitalize() + "."


def synthetic_draft(rng: random.Random) -> OrderDraft:
    """Build one random order draft."""
    return OrderDraft(
        delivery_address=_address(rng),
        items=[rng.choice(PRODUCTS) for _ in range(3)],
        total=round(rng.uniform(1, 1000), 2),
        status=rng.choice(list(OrderStatus)).value,
        discount_code="".join(rng.choice(string.ascii_uppercase) for _ in range(5)),
        comment=_sentence(rng),
    )


def seed_orders(store: OrderRepo, count: int = 20, rng: Optional[random.Random] = None) -> int:
    """Insert ``count`` synthetic orders into an empty store.

    Args:
        store: Store to populate.
        count: Number of orders to insert.
        rng: Optional random generator, for reproducible data.

    Returns:
        int: Number of orders inserted; 0 when the store was not empty.
    """
    existing = store.count()
    if existing > 0:
        logger.info("database already seeded, skipping", extra={"existing": existing})
        return 0

    rng = rng or random.Random()
    inserted = 0
    for _ in range(count):
        order = store.create(synthetic_draft(rng))
        inserted += 1
        logger.debug("inserted order", extra={"order_id": order.id})
    logger.info("orders seeded", extra={"count": inserted})
    return inserted


def _non_negative_int(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"count must be >= 0, got {n}")
    return n


def main(argv: Optional[List[str]] = None) -> int:
    config = load_env()
    parser = argparse.ArgumentParser(description="Seed the orders database with synthetic orders.")
    parser.add_argument("--count", type=_non_negative_int, default=config.seed_count, help="number of orders to insert")
    parser.add_argument("--database-url", default=config.database_url, help="SQLAlchemy database URL")
    args = parser.parse_args(argv)

    configure_logging(config.log_level)
    engine = make_engine(args.database_url)
    try:
        store = OrderRepo(engine)
        store.ensure_schema()
        seed_orders(store, args.count)
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
