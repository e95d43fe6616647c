# lucy/utils/totals.py
"""
Totales del ticket y puntos de fidelidad.

total = subtotal - descuento + impuesto, todo en Decimal.
El impuesto es un importe fijo, no una tasa.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from typing import Iterable

from lucy.errors import ValidationError
from lucy.utils.money import to_decimal, to_money, quantize_money

HUNDRED = Decimal(100)

DISCOUNT_POLICIES = ("reject", "clamp", "allow")


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax: Decimal
    total: Decimal


def _field(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def line_subtotal(quantity, unit_price) -> Decimal:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"La cantidad debe ser un entero: {quantity!r}")
    if quantity <= 0:
        raise ValidationError("La cantidad debe ser mayor a cero")
    price = to_money(unit_price, "price")
    if price < 0:
        raise ValidationError("El precio no puede ser negativo")
    return quantity * price


def compute_totals(line_items: Iterable, discount_percent=0, tax=0, overflow_policy: str = "reject") -> SaleTotals:
    """
    Calcula subtotal, descuento y total de una venta.

    `line_items` acepta objetos o dicts con `quantity` y `price`.
    `overflow_policy` decide qué pasa con un descuento > 100%:
      - reject: ValidationError
      - clamp: el descuento se limita al subtotal (total = impuesto)
      - allow: se deja el total negativo
    """
    if overflow_policy not in DISCOUNT_POLICIES:
        raise ValueError(f"Política de descuento desconocida: {overflow_policy!r}")

    items = list(line_items or [])
    if not items:
        raise ValidationError("La venta debe tener al menos una línea")

    subtotal = Decimal("0.00")
    for item in items:
        subtotal += line_subtotal(_field(item, "quantity"), _field(item, "price"))

    pct = to_decimal(discount_percent if discount_percent is not None else 0, "discount_percent")
    tax_amount = to_money(tax if tax is not None else 0, "tax")

    if pct < 0:
        raise ValidationError("El descuento no puede ser negativo")
    if tax_amount < 0:
        raise ValidationError("El impuesto no puede ser negativo")
    if pct > HUNDRED and overflow_policy == "reject":
        raise ValidationError("El descuento no puede superar el 100%")

    discount_amount = quantize_money(subtotal * pct / HUNDRED)
    if overflow_policy == "clamp" and discount_amount > subtotal:
        discount_amount = subtotal

    # Todas las partes ya están en céntimos: el total cuadra exacto
    subtotal = quantize_money(subtotal)
    return SaleTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax=tax_amount,
        total=subtotal - discount_amount + tax_amount,
    )


def accrue_loyalty_points(total, divisor: int = 10) -> int:
    """1 punto por cada `divisor` unidades gastadas, truncando. Nunca negativo."""
    if divisor <= 0:
        raise ValueError(f"El divisor de puntos debe ser positivo: {divisor!r}")
    amount = to_decimal(total, "total")
    if amount <= 0:
        return 0
    return int((amount / Decimal(divisor)).to_integral_value(rounding=ROUND_DOWN))
