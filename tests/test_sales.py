from decimal import Decimal

import pytest

from lucy.config import settings
from lucy.crud import sales as crud
from lucy.errors import InsufficientStockError, NotFoundError, ValidationError
from lucy.models import (
    Client, Product, Sale, SaleStatus, StockMovement, StockMovementType, PaymentMethod,
)
from lucy.schemas.sales import SaleCreate, SaleItemCreate, SaleUpdate


def _sale_in(items, **kwargs):
    kwargs.setdefault("payment_method", PaymentMethod.CASH)
    return SaleCreate(items=items, **kwargs)


def test_completed_sale_applies_stock_and_loyalty(db, user, customer, make_product):
    cream = make_product(sku="CR-1", price="10.00", stock=10)
    oil = make_product(sku="AC-1", name="Aceite", price="5.00", stock=3)

    sale = crud.create_sale(db, _sale_in(
        [SaleItemCreate(product_id=cream.id, quantity=2), SaleItemCreate(product_id=oil.id, quantity=1)],
        client_id=customer.id,
        discount_percent=Decimal("10"),
    ), user.id)

    assert sale.sale_number == "V-000001"
    assert sale.subtotal == Decimal("25.00")
    assert sale.discount == Decimal("2.50")
    assert sale.total == Decimal("22.50")
    assert sale.status == SaleStatus.COMPLETED
    assert sale.completed_at is not None
    assert [item.description for item in sale.items] == ["Crema hidratante", "Aceite"]

    db.expire_all()
    assert db.get(Product, cream.id).stock == 8
    assert db.get(Product, oil.id).stock == 2

    movements = db.query(StockMovement).filter(StockMovement.type == StockMovementType.SALE).all()
    assert sorted((m.product_id, m.quantity) for m in movements) == sorted([(cream.id, 2), (oil.id, 1)])
    assert all(m.reference == "V-000001" for m in movements)

    client = db.get(Client, customer.id)
    assert client.loyalty_points == 2
    assert client.total_spent == Decimal("22.50")


def test_sale_numbers_are_sequential(db, user, service):
    first = crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id)]), user.id)
    second = crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id)]), user.id)

    assert first.sale_number == "V-000001"
    assert second.sale_number == "V-000002"


def test_service_line_uses_catalog_price_and_no_stock(db, user, service):
    sale = crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id, quantity=2)]), user.id)

    assert sale.total == Decimal("50.00")
    assert sale.items[0].description == "Cera"
    assert db.query(StockMovement).count() == 0


def test_explicit_line_price_overrides_catalog(db, user, make_product):
    product = make_product(price="10.00")
    sale = crud.create_sale(db, _sale_in([SaleItemCreate(product_id=product.id, price=Decimal("8.00"))]), user.id)
    assert sale.total == Decimal("8.00")


def test_free_line_needs_description_and_price(db, user):
    with pytest.raises(ValidationError):
        crud.create_sale(db, _sale_in([SaleItemCreate(quantity=1)]), user.id)

    sale = crud.create_sale(
        db, _sale_in([SaleItemCreate(description="Propina", price=Decimal("2.00"))]), user.id
    )
    assert sale.total == Decimal("2.00")


def test_sale_without_client_earns_no_points(db, user, customer, make_product):
    product = make_product(price="100.00")
    crud.create_sale(db, _sale_in([SaleItemCreate(product_id=product.id)]), user.id)

    db.expire_all()
    assert db.get(Client, customer.id).loyalty_points == 0


def test_insufficient_stock_rolls_back_the_whole_sale(db, user, customer, make_product):
    plenty = make_product(sku="OK-1", stock=10)
    scarce = make_product(sku="NO-1", name="Sérum", stock=1)

    with pytest.raises(InsufficientStockError):
        crud.create_sale(db, _sale_in(
            [SaleItemCreate(product_id=plenty.id, quantity=3), SaleItemCreate(product_id=scarce.id, quantity=2)],
            client_id=customer.id,
        ), user.id)

    db.expire_all()
    assert db.query(Sale).count() == 0
    assert db.query(StockMovement).count() == 0
    assert db.get(Product, plenty.id).stock == 10
    assert db.get(Product, scarce.id).stock == 1
    assert db.get(Client, customer.id).loyalty_points == 0

    # El folio tampoco se consumió
    sale = crud.create_sale(db, _sale_in([SaleItemCreate(product_id=plenty.id)]), user.id)
    assert sale.sale_number == "V-000001"


def test_invalid_sale_is_rejected_before_numbering(db, user, make_product):
    product = make_product()
    with pytest.raises(ValidationError):
        crud.create_sale(db, _sale_in([SaleItemCreate(product_id=product.id, quantity=0)]), user.id)
    with pytest.raises(ValidationError):
        crud.create_sale(db, _sale_in([]), user.id)

    sale = crud.create_sale(db, _sale_in([SaleItemCreate(product_id=product.id)]), user.id)
    assert sale.sale_number == "V-000001"


def test_unknown_product_or_client(db, user, make_product):
    with pytest.raises(NotFoundError):
        crud.create_sale(db, _sale_in([SaleItemCreate(product_id=999)]), user.id)

    product = make_product()
    with pytest.raises(NotFoundError):
        crud.create_sale(db, _sale_in([SaleItemCreate(product_id=product.id)], client_id=999), user.id)


def test_line_cannot_be_product_and_service(db, user, service, make_product):
    product = make_product()
    with pytest.raises(ValidationError):
        crud.create_sale(db, _sale_in([SaleItemCreate(product_id=product.id, service_id=service.id)]), user.id)


def test_discount_policy_comes_from_settings(db, user, service, monkeypatch):
    with pytest.raises(ValidationError):
        crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id)], discount_percent=Decimal("150")), user.id)

    monkeypatch.setattr(settings, "DISCOUNT_OVERFLOW_POLICY", "clamp")
    sale = crud.create_sale(
        db, _sale_in([SaleItemCreate(service_id=service.id)], discount_percent=Decimal("150")), user.id
    )
    assert sale.total == Decimal("0.00")


def test_pending_sale_defers_side_effects_until_completed(db, user, customer, make_product):
    product = make_product(price="15.00", stock=5)
    sale = crud.create_sale(db, _sale_in(
        [SaleItemCreate(product_id=product.id, quantity=2)],
        client_id=customer.id,
        status=SaleStatus.PENDING,
    ), user.id)

    db.expire_all()
    assert sale.completed_at is None
    assert db.get(Product, product.id).stock == 5
    assert db.get(Client, customer.id).loyalty_points == 0

    crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.COMPLETED))
    db.expire_all()
    assert db.get(Product, product.id).stock == 3
    assert db.get(Client, customer.id).loyalty_points == 3
    assert db.get(Client, customer.id).total_spent == Decimal("30.00")

    # Completar otra vez no repite efectos
    crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.COMPLETED))
    db.expire_all()
    assert db.get(Product, product.id).stock == 3
    assert db.get(Client, customer.id).loyalty_points == 3


def test_completing_pending_sale_without_stock_keeps_it_pending(db, user, make_product):
    product = make_product(stock=5)
    sale = crud.create_sale(db, _sale_in(
        [SaleItemCreate(product_id=product.id, quantity=4)], status=SaleStatus.PENDING,
    ), user.id)

    product.stock = 1
    db.commit()

    with pytest.raises(InsufficientStockError):
        crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.COMPLETED))

    db.expire_all()
    reloaded = db.get(Sale, sale.id)
    assert reloaded.status == SaleStatus.PENDING
    assert reloaded.completed_at is None


def test_refund_restores_stock_and_points(db, user, customer, make_product):
    product = make_product(price="20.00", stock=5)
    sale = crud.create_sale(db, _sale_in(
        [SaleItemCreate(product_id=product.id, quantity=2)], client_id=customer.id,
    ), user.id)

    crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.REFUNDED))

    db.expire_all()
    assert db.get(Product, product.id).stock == 5
    assert db.get(Client, customer.id).loyalty_points == 0
    assert db.get(Client, customer.id).total_spent == Decimal("0.00")
    returns = db.query(StockMovement).filter(StockMovement.type == StockMovementType.RETURN).all()
    assert [(m.quantity, m.reference) for m in returns] == [(2, "V-000001")]


def test_final_statuses_cannot_change(db, user, service):
    sale = crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id)]), user.id)
    crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.CANCELLED))

    with pytest.raises(ValidationError):
        crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.COMPLETED))


def test_completed_sale_cannot_go_back_to_pending(db, user, service):
    sale = crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id)]), user.id)
    with pytest.raises(ValidationError):
        crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.PENDING))


def test_new_sale_cannot_start_cancelled(db, user, service):
    with pytest.raises(ValidationError):
        crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id)], status=SaleStatus.CANCELLED), user.id)


def test_completed_sale_cannot_be_deleted(db, user, service):
    sale = crud.create_sale(db, _sale_in([SaleItemCreate(service_id=service.id)]), user.id)
    with pytest.raises(ValidationError):
        crud.delete_sale(db, sale)

    crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.CANCELLED))
    crud.delete_sale(db, sale)
    assert db.query(Sale).count() == 0


def test_sub_cent_line_price_is_rejected_before_numbering(db, user):
    with pytest.raises(ValidationError):
        crud.create_sale(db, _sale_in(
            [SaleItemCreate(description="Muestra", price=Decimal("0.005")) for _ in range(3)],
        ), user.id)
    assert db.query(Sale).count() == 0

    sale = crud.create_sale(db, _sale_in([SaleItemCreate(description="Muestra", price=Decimal("0.01"))]), user.id)
    assert sale.sale_number == "V-000001"


def test_line_subtotals_add_up_to_sale_subtotal(db, user):
    sale = crud.create_sale(db, _sale_in(
        [SaleItemCreate(description="Muestra", price=Decimal("0.33"), quantity=3) for _ in range(3)],
        discount_percent=Decimal("12.5"),
        tax=Decimal("0.07"),
    ), user.id)

    assert sum(item.subtotal for item in sale.items) == sale.subtotal == Decimal("2.97")
    assert sale.total == sale.subtotal - sale.discount + sale.tax


def test_refund_reverts_points_against_current_balance(db, user, customer, session_factory, make_product):
    product = make_product(price="30.00", stock=5)
    sale = crud.create_sale(db, _sale_in(
        [SaleItemCreate(product_id=product.id, quantity=1)], client_id=customer.id,
    ), user.id)

    # Otra petición canjea puntos y registra gasto mientras tanto
    other = session_factory()
    other_client = other.get(Client, customer.id)
    other_client.loyalty_points = 1
    other_client.total_spent = other_client.total_spent + Decimal("45.00")
    other.commit()
    other.close()

    crud.update_sale(db, sale, SaleUpdate(status=SaleStatus.REFUNDED))

    db.expire_all()
    reloaded = db.get(Client, customer.id)
    assert reloaded.loyalty_points == 0
    assert reloaded.total_spent == Decimal("45.00")
