from datetime import timedelta

import pytest

from pricing_engine.core.clock import utcnow
from pricing_engine.core.errors import InvalidRequestError, NotFoundError
from pricing_engine.models.price_history import PriceHistory
from pricing_engine.schemas.product import BulkProductSaleRequest, ProductCreate
from pricing_engine.services.product_service import (
    bulk_set_product_sale,
    create_product,
    delete_product,
    get_product,
    list_on_sale_products,
    update_product_price,
)


def test_create_product_rejects_duplicate_sku(db, admin):
    created = create_product(db, admin, ProductCreate(sku="JKT-1", name="Jacket", price=59.999))
    assert created.price == 60.0
    assert created.version == 1
    assert created.sale_price is None

    with pytest.raises(InvalidRequestError):
        create_product(db, admin, ProductCreate(sku="JKT-1", name="Other", price=10))


def test_update_price_writes_manual_ledger_row(db, admin, make_product):
    product = make_product(price=25.0)

    updated = update_product_price(db, admin, product.id, 19.5)

    assert updated.price == 19.5
    assert updated.version == 2
    entry = db.query(PriceHistory).one()
    assert (entry.previous_price, entry.new_price, entry.change_reason) == (25.0, 19.5, "manual")


def test_update_to_same_price_is_a_no_op(db, admin, make_product):
    product = make_product(price=25.0)

    update_product_price(db, admin, product.id, 25.0)

    assert db.query(PriceHistory).count() == 0


def test_delete_product_cascades_ledger(db, admin, make_product):
    product = make_product(price=25.0)
    update_product_price(db, admin, product.id, 20.0)

    delete_product(db, admin, product.id)

    assert db.query(PriceHistory).count() == 0
    with pytest.raises(NotFoundError):
        get_product(db, product.id)


def test_on_sale_listing_and_sale_price(db, admin, make_product):
    future = utcnow() + timedelta(days=1)
    make_product(id="PCT", price=80.0, is_on_sale=True, sale_percentage=25, sale_ends_at=future)
    make_product(id="AMT", price=10.0, is_on_sale=True, sale_amount=15, sale_ends_at=future)
    make_product(
        id="OLD",
        price=10.0,
        is_on_sale=True,
        sale_percentage=10,
        sale_ends_at=utcnow() - timedelta(minutes=5),
    )
    make_product(id="OFF", price=10.0)

    products = {p.id: p for p in list_on_sale_products(db)}

    assert set(products) == {"PCT", "AMT"}
    assert products["PCT"].sale_price == 60.0
    assert products["AMT"].sale_price == 0.01
    assert get_product(db, "OLD").sale_price is None


def test_bulk_clear_sale_flag_clears_compare_at_price(db, admin, make_product):
    make_product(id="A", price=50.0, compare_at_price=70.0, is_on_sale=True, sale_percentage=10)
    make_product(id="B", price=50.0)

    updated = bulk_set_product_sale(
        db, admin, BulkProductSaleRequest(product_ids=["A", "missing"], is_on_sale=False)
    )

    assert updated == 1
    a = get_product(db, "A")
    assert a.is_on_sale is False
    assert a.compare_at_price is None
    assert a.sale_percentage is None


def test_bulk_set_sale_flag(db, admin, make_product):
    make_product(id="A", price=50.0)
    ends = utcnow() + timedelta(hours=6)

    bulk_set_product_sale(
        db,
        admin,
        BulkProductSaleRequest(product_ids=["A"], is_on_sale=True, sale_percentage=30, sale_ends_at=ends),
    )

    a = get_product(db, "A")
    assert a.is_on_sale is True
    assert a.sale_price == 35.0
