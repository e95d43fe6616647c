from decimal import Decimal

from lucy.models import Sale, SaleCounter, PaymentMethod
from lucy.utils.folios import (
    generate_sale_number, next_sale_number, parse_sale_number, highest_issued_number,
)


def test_generate_next_from_previous():
    assert generate_sale_number("V-000007") == "V-000008"


def test_generate_first_number():
    assert generate_sale_number(None) == "V-000001"
    assert generate_sale_number("") == "V-000001"


def test_generate_keeps_zero_padding_and_prefix():
    assert generate_sale_number("T-000099", prefix="T") == "T-000100"


def test_parse_sale_number():
    assert parse_sale_number("V-000042") == 42


def test_counter_starts_at_one(db):
    assert next_sale_number(db) == "V-000001"
    assert next_sale_number(db) == "V-000002"
    db.commit()

    assert db.query(SaleCounter).filter(SaleCounter.prefix == "V").one().value == 2


def test_counter_continues_after_existing_sales(db, user):
    db.add(Sale(
        sale_number="V-000041",
        user_id=user.id,
        subtotal=Decimal("1.00"),
        total=Decimal("1.00"),
        payment_method=PaymentMethod.CASH,
    ))
    db.commit()

    assert highest_issued_number(db) == 41
    assert next_sale_number(db) == "V-000042"


def test_counter_rolls_back_with_the_transaction(db):
    db.add(SaleCounter(prefix="V", value=5))
    db.commit()

    assert next_sale_number(db) == "V-000006"
    db.rollback()

    assert next_sale_number(db) == "V-000006"
