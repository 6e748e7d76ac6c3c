import pytest
from fastapi.testclient import TestClient

from orders.api import OrderAPI
from orders.config import AppConfig
from orders.main import create_app
from orders.repo import OrderRepo, make_engine


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    repo = OrderRepo(engine)
    repo.ensure_schema()
    return repo


@pytest.fixture
def api(store):
    return OrderAPI(store)


@pytest.fixture
def client(store):
    config = AppConfig(database_url="sqlite://", log_level="WARNING", db_startup_timeout=0, seed_count=0)
    with TestClient(create_app(store=store, config=config)) as c:
        yield c
