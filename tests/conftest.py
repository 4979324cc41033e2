"""Shared fixtures: in-memory database, stores and shopper sessions."""
import os

# Must be set before storefront.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ECHO_NOTIFICATIONS"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.database.collection_schema import ProductSnapshot
from storefront.database.connection import Base, SessionLocal, engine, init_db
from storefront.utils.identity import IdentityService
from storefront.utils.notifications import BufferedNotificationSink
from storefront.utils.reconciliation import StorefrontSession
from storefront.utils.sessions import session_registry
from storefront.utils.storage import MemoryCollectionStore


def make_product(product_id, price="10.00", name=None) -> ProductSnapshot:
    return ProductSnapshot(
        id=product_id,
        name=name or f"Product {product_id}",
        unit_price=Decimal(price),
        image=f"https://img.example.com/{product_id}.jpg"
    )


@pytest.fixture
def store() -> MemoryCollectionStore:
    return MemoryCollectionStore()


@pytest.fixture
def notifier() -> BufferedNotificationSink:
    return BufferedNotificationSink(echo=False)


@pytest.fixture
def identity_service() -> IdentityService:
    return IdentityService()


@pytest.fixture
def shopper(identity_service, store, notifier):
    session = StorefrontSession(identity_service, store, notifier)
    yield session
    session.close()


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    from storefront.main import app
    
    init_db()
    session_registry.reset()
    with TestClient(app) as test_client:
        yield test_client
    session_registry.reset()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def product_factory():
    return make_product
