import itertools
from collections import namedtuple
from decimal import Decimal

import pytest

from lucy.models import CashMovementType
from lucy.utils.cash import (
    compute_expected_balance, compute_variance, movement_sign, summarize_movements,
)

Movement = namedtuple("Movement", "type amount")

MIXED = [
    Movement(CashMovementType.INCOME, Decimal("100.00")),
    Movement(CashMovementType.EXPENSE, Decimal("30.00")),
    Movement(CashMovementType.DEPOSIT, Decimal("50.00")),
    Movement(CashMovementType.WITHDRAWAL, Decimal("20.00")),
]


def test_expected_balance_adds_income_and_deposits_and_subtracts_the_rest():
    assert compute_expected_balance(Decimal("200.00"), MIXED) == Decimal("300.00")


def test_expected_balance_without_movements_is_the_opening_balance():
    assert compute_expected_balance(Decimal("150.00"), []) == Decimal("150.00")


def test_expected_balance_does_not_depend_on_movement_order():
    results = {
        compute_expected_balance(Decimal("75.50"), order)
        for order in itertools.permutations(MIXED)
    }
    assert results == {Decimal("175.50")}


def test_expected_balance_can_go_negative():
    movements = [Movement(CashMovementType.EXPENSE, Decimal("80.00"))]
    assert compute_expected_balance(Decimal("50.00"), movements) == Decimal("-30.00")


def test_expected_balance_accepts_plain_string_kinds():
    movements = [Movement("INCOME", Decimal("10.00")), Movement("WITHDRAWAL", Decimal("4.00"))]
    assert compute_expected_balance(Decimal("0"), movements) == Decimal("6.00")


def test_unknown_movement_kind_is_a_programming_error():
    with pytest.raises(ValueError):
        movement_sign("REFUND")
    with pytest.raises(ValueError):
        compute_expected_balance(Decimal("0"), [Movement("REFUND", Decimal("1.00"))])


def test_expected_balance_is_exact_with_cents():
    movements = [Movement(CashMovementType.INCOME, Decimal("0.10"))] * 3
    assert compute_expected_balance(Decimal("0.00"), movements) == Decimal("0.30")


@pytest.mark.parametrize(
    "counted, expected, variance",
    [
        ("300.00", "300.00", "0.00"),
        ("310.00", "300.00", "10.00"),   # sobrante
        ("295.50", "300.00", "-4.50"),   # faltante
    ],
)
def test_variance_sign(counted, expected, variance):
    assert compute_variance(Decimal(counted), Decimal(expected)) == Decimal(variance)


def test_summarize_movements_totals_each_kind():
    totals = summarize_movements(MIXED + [Movement(CashMovementType.INCOME, Decimal("5.00"))])
    assert totals[CashMovementType.INCOME] == Decimal("105.00")
    assert totals[CashMovementType.EXPENSE] == Decimal("30.00")
    assert totals[CashMovementType.DEPOSIT] == Decimal("50.00")
    assert totals[CashMovementType.WITHDRAWAL] == Decimal("20.00")
