# lucy/utils/cash.py
"""
Arqueo de caja: cálculo del saldo esperado y de la diferencia contra lo contado.

Funciones puras; no tocan la base de datos. Se pueden llamar con la caja aún
abierta para mostrar el saldo en vivo.
"""
from decimal import Decimal
from typing import Dict, Iterable

from lucy.models.cash import CashMovementType
from lucy.utils.money import to_decimal

# Signo con el que cada tipo de movimiento afecta al cajón
MOVEMENT_SIGNS = {
    CashMovementType.INCOME: 1,
    CashMovementType.DEPOSIT: 1,
    CashMovementType.EXPENSE: -1,
    CashMovementType.WITHDRAWAL: -1,
}


def movement_sign(kind) -> int:
    """Devuelve +1 / -1. Un tipo desconocido es un error de programación."""
    try:
        return MOVEMENT_SIGNS[CashMovementType(kind)]
    except (ValueError, KeyError):
        raise ValueError(f"Tipo de movimiento de caja desconocido: {kind!r}")


def compute_expected_balance(opening_balance, movements: Iterable) -> Decimal:
    """
    Saldo inicial + ingresos + aportes - gastos - retiros.
    Un resultado negativo es válido (se gastó más de lo que había) y se devuelve tal cual.
    """
    balance = to_decimal(opening_balance, "opening_balance")
    for movement in movements:
        balance += movement_sign(movement.type) * to_decimal(movement.amount, "amount")
    return balance


def compute_variance(counted_closing_balance, expected_balance) -> Decimal:
    """Positivo = sobrante, negativo = faltante."""
    return to_decimal(counted_closing_balance, "closing_balance") - to_decimal(expected_balance, "expected_balance")


def summarize_movements(movements: Iterable) -> Dict[CashMovementType, Decimal]:
    """Totales por tipo de movimiento (para el reporte de caja)."""
    totals = {kind: Decimal("0.00") for kind in CashMovementType}
    for movement in movements:
        kind = CashMovementType(movement.type)
        totals[kind] += to_decimal(movement.amount, "amount")
    return totals
