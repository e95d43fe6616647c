# lucy/crud/sales.py
"""
Alta y ciclo de vida de ventas.

Toda la venta (folio, líneas, stock, puntos) va en una sola transacción. Los
efectos sobre inventario y cliente se aplican una única vez, cuando la venta
queda COMPLETED; `Sale.completed_at` marca que ya se aplicaron.
"""
import logging
from datetime import datetime

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from lucy.config import settings
from lucy.crud.products import decrement_stock, increment_stock
from lucy.errors import NotFoundError, ValidationError
from lucy.models import (
    Sale, SaleItem, SaleStatus, Client, Product, Service,
    StockMovement, StockMovementType,
)
from lucy.schemas.sales import SaleCreate, SaleItemCreate, SaleUpdate
from lucy.utils.folios import next_sale_number
from lucy.utils.money import quantize_money
from lucy.utils.totals import compute_totals, line_subtotal, accrue_loyalty_points

logger = logging.getLogger(__name__)

# Estados desde los que ya no se sale
FINAL_STATUSES = {SaleStatus.CANCELLED, SaleStatus.REFUNDED}


def get_sale(db: Session, sale_id: int):
    return db.query(Sale).filter(Sale.id == sale_id).first()


def _resolve_line(db: Session, item: SaleItemCreate) -> dict:
    """Completa precio y descripción desde el catálogo si no vienen en la línea."""
    if item.product_id and item.service_id:
        raise ValidationError("Una línea no puede ser producto y servicio a la vez")

    price = item.price
    description = item.description

    if item.product_id:
        product = db.query(Product).filter(Product.id == item.product_id).first()
        if not product:
            raise NotFoundError(f"Producto {item.product_id} no encontrado")
        if not product.is_active:
            raise ValidationError(f"El producto {product.name} está inactivo")
        price = product.price if price is None else price
        description = description or product.name
    elif item.service_id:
        service = db.query(Service).filter(Service.id == item.service_id).first()
        if not service:
            raise NotFoundError(f"Servicio {item.service_id} no encontrado")
        price = service.price if price is None else price
        description = description or service.name
    elif price is None or not description:
        raise ValidationError("Las líneas libres necesitan descripción y precio")

    return {
        "product_id": item.product_id,
        "service_id": item.service_id,
        "description": description,
        "quantity": item.quantity,
        "price": price,
    }


def _apply_completion(db: Session, sale: Sale) -> None:
    """Descuenta stock y acumula puntos. No hace commit."""
    if sale.completed_at is not None:
        return

    for item in sale.items:
        if item.product_id:
            decrement_stock(db, item.product_id, item.quantity)
            db.add(StockMovement(
                product_id=item.product_id,
                type=StockMovementType.SALE,
                quantity=item.quantity,
                reason="Venta",
                reference=sale.sale_number,
            ))

    if sale.client_id:
        points = accrue_loyalty_points(sale.total, settings.LOYALTY_POINTS_DIVISOR)
        db.execute(
            update(Client)
            .where(Client.id == sale.client_id)
            .values(
                loyalty_points=Client.loyalty_points + points,
                total_spent=Client.total_spent + sale.total,
            )
            .execution_options(synchronize_session=False)
        )

    sale.completed_at = datetime.utcnow()


def _revert_completion(db: Session, sale: Sale) -> None:
    """Devuelve el stock y los puntos de una venta completada que se cancela o reembolsa."""
    if sale.completed_at is None:
        return

    for item in sale.items:
        if item.product_id:
            increment_stock(db, item.product_id, item.quantity)
            db.add(StockMovement(
                product_id=item.product_id,
                type=StockMovementType.RETURN,
                quantity=item.quantity,
                reason="Devolución de venta",
                reference=sale.sale_number,
            ))

    if sale.client_id:
        points = accrue_loyalty_points(sale.total, settings.LOYALTY_POINTS_DIVISOR)
        db.execute(
            update(Client)
            .where(Client.id == sale.client_id)
            .values(
                # Los puntos ya canjeados no se pueden recuperar
                loyalty_points=case(
                    (Client.loyalty_points >= points, Client.loyalty_points - points),
                    else_=0,
                ),
                total_spent=Client.total_spent - sale.total,
            )
            .execution_options(synchronize_session=False)
        )


def create_sale(db: Session, sale_in: SaleCreate, user_id: int) -> Sale:
    if sale_in.status not in (SaleStatus.PENDING, SaleStatus.COMPLETED):
        raise ValidationError("Una venta nueva solo puede ser PENDING o COMPLETED")

    try:
        if sale_in.client_id and not db.query(Client.id).filter(Client.id == sale_in.client_id).first():
            raise NotFoundError("Cliente no encontrado")

        lines = [_resolve_line(db, item) for item in sale_in.items]
        totals = compute_totals(
            lines,
            discount_percent=sale_in.discount_percent,
            tax=sale_in.tax,
            overflow_policy=settings.DISCOUNT_OVERFLOW_POLICY,
        )

        sale = Sale(
            sale_number=next_sale_number(db, settings.SALE_NUMBER_PREFIX),
            client_id=sale_in.client_id,
            user_id=user_id,
            subtotal=totals.subtotal,
            discount_percent=sale_in.discount_percent,
            discount=totals.discount_amount,
            tax=totals.tax,
            total=totals.total,
            payment_method=sale_in.payment_method,
            status=sale_in.status,
            notes=sale_in.notes,
        )
        for line in lines:
            sale.items.append(SaleItem(
                product_id=line["product_id"],
                service_id=line["service_id"],
                description=line["description"],
                quantity=line["quantity"],
                price=quantize_money(line["price"]),
                subtotal=quantize_money(line_subtotal(line["quantity"], line["price"])),
            ))
        db.add(sale)
        db.flush()

        if sale.status == SaleStatus.COMPLETED:
            _apply_completion(db, sale)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sale)
    logger.info("Venta %s registrada (%s) por %s", sale.sale_number, sale.status.value, sale.total)
    return sale


def update_sale(db: Session, sale: Sale, sale_in: SaleUpdate) -> Sale:
    data = sale_in.model_dump(exclude_unset=True)
    new_status = data.pop("status", None)

    try:
        for key, value in data.items():
            setattr(sale, key, value)

        if new_status is not None and new_status != sale.status:
            if sale.status in FINAL_STATUSES:
                raise ValidationError(f"La venta {sale.sale_number} ya está {sale.status.value}")
            if new_status == SaleStatus.PENDING:
                raise ValidationError("Una venta no puede volver a PENDING")

            if new_status == SaleStatus.COMPLETED:
                _apply_completion(db, sale)
            else:
                _revert_completion(db, sale)
            sale.status = new_status

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sale)
    if new_status is not None:
        logger.info("Venta %s pasa a %s", sale.sale_number, sale.status.value)
    return sale


def delete_sale(db: Session, sale: Sale) -> None:
    if sale.status == SaleStatus.COMPLETED:
        raise ValidationError("Cancela o reembolsa la venta antes de eliminarla")
    db.delete(sale)
    db.commit()
    logger.info("Venta %s eliminada", sale.sale_number)
