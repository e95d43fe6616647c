from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from lucy.models import Sale, SaleCounter

SALE_NUMBER_WIDTH = 6


def format_sale_number(prefix: str, value: int) -> str:
    return f"{prefix}-{value:0{SALE_NUMBER_WIDTH}d}"


def parse_sale_number(sale_number: str) -> int:
    """'V-000042' -> 42"""
    return int(sale_number.rsplit("-", 1)[1])


def generate_sale_number(previous: Optional[str], prefix: str = "V") -> str:
    """
    Siguiente número a partir del anterior. Si no hay ventas, empezamos en 1.
    """
    if not previous:
        return format_sale_number(prefix, 1)
    return format_sale_number(prefix, parse_sale_number(previous) + 1)


def highest_issued_number(db: Session, prefix: str = "V") -> int:
    last = db.query(func.max(Sale.sale_number)).filter(Sale.sale_number.like(f"{prefix}-%")).scalar()
    return parse_sale_number(last) if last else 0


def next_sale_number(db: Session, prefix: str = "V") -> str:
    """
    Reserva el siguiente folio con un UPDATE atómico sobre sale_counters.
    Debe llamarse dentro de la transacción de la venta: si la venta hace
    rollback, el folio también.
    """
    result = db.execute(
        update(SaleCounter)
        .where(SaleCounter.prefix == prefix)
        .values(value=SaleCounter.value + 1)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        # Primera venta con este prefijo: continuamos desde el folio más alto ya guardado
        start = highest_issued_number(db, prefix) + 1
        db.add(SaleCounter(prefix=prefix, value=start))
        db.flush()
        return format_sale_number(prefix, start)

    value = db.query(SaleCounter.value).filter(SaleCounter.prefix == prefix).scalar()
    return format_sale_number(prefix, value)
