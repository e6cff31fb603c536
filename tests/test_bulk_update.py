import pytest
from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from pricing_engine.core.errors import AlreadyRevertedError, NotFoundError, PermissionDeniedError
from pricing_engine.enums.pricing import ChangeReason
from pricing_engine.models.bulk_price_update import BulkPriceUpdate
from pricing_engine.models.price_history import PriceHistory
from pricing_engine.models.product import Product
from pricing_engine.schemas.bulk_price import BulkPriceAdjustRequest, CustomPriceItem
from pricing_engine.services.price_history_service import (
    get_price_history,
    get_recent_price_changes,
    record_price_change,
)
from pricing_engine.services.pricing_service import bulk_update as bulk_update_module
from pricing_engine.services.pricing_service.bulk_update import (
    apply_price_changes,
    bulk_set_custom_prices,
    bulk_update_prices,
    create_batch_descriptor,
    revert_price_changes,
)
from pricing_engine.services.product_matcher import ProductSelector
from pricing_engine.services.product_service import update_product_price


def _price(db, product_id):
    return db.query(Product.price).filter(Product.id == product_id).scalar()


def test_bulk_percentage_update_by_category(db, admin, make_product):
    shoe = make_product(price=100.0, category_id="shoes")
    bag = make_product(price=50.0, category_id="bags")

    result = bulk_update_prices(
        db,
        admin,
        BulkPriceAdjustRequest(
            adjustment_type="percentage",
            adjustment_value=-10,
            apply_to="category",
            category_ids=["shoes"],
        ),
    )

    assert result.updated_count == 1
    assert _price(db, shoe.id) == 90.0
    assert _price(db, bag.id) == 50.0

    entry = db.query(PriceHistory).one()
    assert entry.change_reason == "bulk_update"
    assert entry.bulk_update_id == result.bulk_update_id

    descriptor = db.query(BulkPriceUpdate).one()
    assert descriptor.target_ids == ["shoes"]
    assert descriptor.affected_count == 1
    assert descriptor.created_by == admin.id


def test_bulk_update_leaves_compare_at_price_alone(db, admin, make_product):
    product = make_product(price=100.0, compare_at_price=120.0)

    bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=5)
    )

    stored = db.query(Product).filter(Product.id == product.id).one()
    assert stored.price == 105.0
    assert stored.compare_at_price == 120.0


def test_bulk_update_requires_admin(db, shopper, make_product):
    make_product(price=10.0)
    with pytest.raises(PermissionDeniedError):
        bulk_update_prices(
            db, shopper, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=1)
        )
    assert db.query(BulkPriceUpdate).count() == 0


def test_price_changed_underneath_is_reported_as_conflict(db, admin, make_product):
    first = make_product(price=10.0)
    second = make_product(price=20.0)
    descriptor = create_batch_descriptor(
        db, admin, ProductSelector(), adjustment_type="fixed", adjustment_value=1
    )
    products = db.query(Product).order_by(Product.id).all()
    calls = []

    def compute(price):
        if not calls:
            # another writer moves the second product after the batch read it
            db.execute(update(Product).where(Product.id == second.id).values(price=21.0))
            db.commit()
        calls.append(price)
        return price + 1

    result = apply_price_changes(
        db,
        products=products,
        compute=compute,
        actor=admin,
        descriptor=descriptor,
        change_reason=ChangeReason.bulk_update,
    )

    assert result.updated_count == 1
    assert result.conflicts == [second.id]
    assert _price(db, first.id) == 11.0
    assert _price(db, second.id) == 21.0
    assert db.query(PriceHistory).count() == 1


def test_custom_prices_skip_invalid_entries(db, admin, make_product):
    a = make_product(price=10.0)
    b = make_product(price=20.0)
    c = make_product(price=30.0)

    updated = bulk_set_custom_prices(
        db,
        admin,
        [
            CustomPriceItem(product_id=a.id, new_price=12.5),
            CustomPriceItem(product_id=b.id, new_price=-5),
            CustomPriceItem(product_id=c.id, new_price="abc"),
            CustomPriceItem(product_id="missing", new_price=9),
            CustomPriceItem(product_id=None, new_price=9),
            CustomPriceItem(product_id=c.id, new_price=30),
        ],
    )

    assert updated == 1
    assert _price(db, a.id) == 12.5
    assert _price(db, b.id) == 20.0
    assert _price(db, c.id) == 30.0

    entry = db.query(PriceHistory).one()
    assert entry.change_reason == "manual"
    assert entry.bulk_update_id is None


def test_revert_restores_prices_and_records_it(db, admin, make_product):
    a = make_product(price=100.0)
    b = make_product(price=40.0)

    result = bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="percentage", adjustment_value=25)
    )
    assert _price(db, a.id) == 125.0
    assert _price(db, b.id) == 50.0

    reverted = revert_price_changes(db, admin, result.bulk_update_id)

    assert reverted.reverted_count == 2
    assert reverted.conflicts == []
    assert _price(db, a.id) == 100.0
    assert _price(db, b.id) == 40.0

    descriptor = db.query(BulkPriceUpdate).one()
    assert descriptor.is_reverted is True
    assert descriptor.reverted_by == admin.id
    assert descriptor.reverted_at is not None

    history = get_price_history(db, admin, a.id)
    assert [(h.previous_price, h.new_price) for h in history] == [(125.0, 100.0), (100.0, 125.0)]


def test_second_revert_is_a_conflict(db, admin, make_product):
    make_product(price=10.0)
    result = bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=2)
    )
    revert_price_changes(db, admin, result.bulk_update_id)

    with pytest.raises(AlreadyRevertedError):
        revert_price_changes(db, admin, result.bulk_update_id)
    assert db.query(PriceHistory).count() == 2


def test_revert_unknown_batch_is_not_found(db, admin):
    with pytest.raises(NotFoundError):
        revert_price_changes(db, admin, 12345)


def test_revert_does_not_touch_other_batches(db, admin, make_product):
    product = make_product(price=10.0)
    first = bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=1)
    )
    second = bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=1)
    )
    assert _price(db, product.id) == 12.0

    # the second batch moved the product, so the first cannot restore it
    skipped = revert_price_changes(db, admin, first.bulk_update_id)
    assert skipped.reverted_count == 0
    assert skipped.conflicts == [product.id]
    assert _price(db, product.id) == 12.0

    undone = revert_price_changes(db, admin, second.bulk_update_id)
    assert undone.reverted_count == 1
    assert _price(db, product.id) == 11.0
    assert db.query(PriceHistory).count() == 3


def test_revert_keeps_later_manual_edit(db, admin, make_product):
    edited = make_product(price=100.0)
    untouched = make_product(price=40.0)
    batch = bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=10)
    )
    update_product_price(db, admin, edited.id, 150.0)

    result = revert_price_changes(db, admin, batch.bulk_update_id)

    assert result.reverted_count == 1
    assert result.conflicts == [edited.id]
    assert _price(db, edited.id) == 150.0
    assert _price(db, untouched.id) == 40.0

    latest = get_price_history(db, admin, edited.id)[0]
    assert (latest.previous_price, latest.new_price, latest.change_reason) == (110.0, 150.0, "manual")
    restored = get_price_history(db, admin, untouched.id)[0]
    assert (restored.previous_price, restored.new_price) == (50.0, 40.0)
    assert restored.bulk_update_id == batch.bulk_update_id

    # the batch is still spent
    with pytest.raises(AlreadyRevertedError):
        revert_price_changes(db, admin, batch.bulk_update_id)


def test_revert_ledger_row_uses_current_price(db, admin, make_product):
    product = make_product(price=100.0)
    batch = bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=10)
    )

    revert_price_changes(db, admin, batch.bulk_update_id)

    rows = db.query(PriceHistory).order_by(PriceHistory.id).all()
    assert [(r.previous_price, r.new_price) for r in rows] == [(100.0, 110.0), (110.0, 100.0)]
    assert _price(db, product.id) == 100.0


def test_failed_product_is_reported_and_earlier_ones_stay_committed(
    db, admin, make_product, monkeypatch
):
    first = make_product(price=10.0)
    second = make_product(price=20.0)
    calls = []

    def flaky_record(db, **fields):
        calls.append(fields["product_id"])
        if fields["product_id"] == second.id:
            raise SQLAlchemyError("write failed")
        return record_price_change(db, **fields)

    monkeypatch.setattr(bulk_update_module, "record_price_change", flaky_record)

    result = bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=5)
    )

    assert calls == [first.id, second.id]
    assert result.updated_count == 1
    assert result.failed == [second.id]
    assert result.conflicts == []
    assert _price(db, first.id) == 15.0
    assert _price(db, second.id) == 20.0

    descriptor = db.query(BulkPriceUpdate).one()
    assert descriptor.affected_count == 1
    assert db.query(PriceHistory).count() == 1


@pytest.mark.parametrize("value", ["inf", "-inf", "nan"])
def test_non_finite_adjustment_is_rejected(value):
    with pytest.raises(ValidationError):
        BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=value)
    with pytest.raises(ValidationError):
        BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=1, max_price=value)


def test_bulk_update_with_infinite_value_writes_nothing(client, admin_headers, db, make_product):
    product = make_product(price=10.0)

    response = client.post(
        "/pricing/bulk/update",
        json={"adjustment_type": "percentage", "adjustment_value": "inf"},
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert db.query(BulkPriceUpdate).count() == 0
    assert db.query(PriceHistory).count() == 0
    assert _price(db, product.id) == 10.0


def test_recent_changes_include_product_and_batches(db, admin, make_product):
    product = make_product(price=10.0, name="Denim jacket")
    bulk_update_prices(
        db, admin, BulkPriceAdjustRequest(adjustment_type="fixed", adjustment_value=1)
    )

    changes, batches = get_recent_price_changes(db, admin, limit=5)

    assert len(changes) == 1
    assert changes[0].product.name == "Denim jacket"
    assert changes[0].product_id == product.id
    assert len(batches) == 1


def test_history_is_capped_and_newest_first(db, admin, make_product):
    product = make_product(price=10.0)
    for step in range(55):
        bulk_set_custom_prices(
            db, admin, [CustomPriceItem(product_id=product.id, new_price=11 + step)]
        )

    history = get_price_history(db, admin, product.id)

    assert len(history) == 50
    assert history[0].new_price == 65.0
