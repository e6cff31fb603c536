import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pricing_engine import models  # noqa: F401
from pricing_engine.core.security import create_access_token
from pricing_engine.database.connection import Base, enable_sqlite_foreign_keys, get_db
from pricing_engine.main import app
from pricing_engine.models.product import Product
from pricing_engine.schemas.user import Actor

TEST_DB_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def reset_database():
    # services commit and roll back on their own, so each test gets fresh tables
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def admin():
    return Actor(id="admin-1", role="admin")


@pytest.fixture()
def shopper():
    return Actor(id="user-1", role="user")


@pytest.fixture()
def admin_headers():
    token = create_access_token({"sub": "admin-1", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user_headers():
    token = create_access_token({"sub": "user-1", "role": "user"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_product(db):
    counter = {"n": 0}

    def _make(price=100.0, **fields):
        counter["n"] += 1
        n = counter["n"]
        product = Product(
            id=fields.pop("id", f"PROD_{n:03d}"),
            sku=fields.pop("sku", f"SKU-{n:03d}"),
            name=fields.pop("name", f"Product {n}"),
            price=price,
            status=fields.pop("status", "ACTIVE"),
            tags=fields.pop("tags", []),
            **fields,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make
