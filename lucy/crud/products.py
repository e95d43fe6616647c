# lucy/crud/products.py
import io
import logging
from decimal import Decimal, InvalidOperation

import pandas as pd
from sqlalchemy import update
from sqlalchemy.orm import Session

from lucy.crud.notifications import create_notification, has_unread
from lucy.errors import InsufficientStockError, NotFoundError, ValidationError
from lucy.models import (
    Product, StockMovement, StockMovementType, INBOUND_MOVEMENTS,
    NotificationType, NotificationPriority,
)
from lucy.schemas.products import StockMovementCreate

logger = logging.getLogger(__name__)


def get_product(db: Session, product_id: int):
    return db.query(Product).filter(Product.id == product_id).first()


def get_product_by_sku(db: Session, sku: str):
    return db.query(Product).filter(Product.sku == sku).first()


# -----------------------------
# Stock
# -----------------------------
def decrement_stock(db: Session, product_id: int, quantity: int) -> None:
    """
    Resta stock solo si alcanza (UPDATE condicional). No hace commit.
    """
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        row = db.query(Product.name, Product.stock).filter(Product.id == product_id).first()
        if row is None:
            raise NotFoundError(f"Producto {product_id} no encontrado")
        logger.warning("Stock insuficiente para %s: hay %s, se piden %s", row.name, row.stock, quantity)
        raise InsufficientStockError(
            f"Stock insuficiente para {row.name}: disponible {row.stock}, solicitado {quantity}"
        )


def increment_stock(db: Session, product_id: int, quantity: int) -> None:
    result = db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"Producto {product_id} no encontrado")


def apply_stock_movement(db: Session, product_id: int, movement_in: StockMovementCreate) -> StockMovement:
    if movement_in.quantity <= 0:
        raise ValidationError("La cantidad debe ser mayor a cero")

    try:
        if movement_in.type in INBOUND_MOVEMENTS:
            increment_stock(db, product_id, movement_in.quantity)
        else:
            decrement_stock(db, product_id, movement_in.quantity)

        movement = StockMovement(
            product_id=product_id,
            type=movement_in.type,
            quantity=movement_in.quantity,
            reason=movement_in.reason,
            reference=movement_in.reference,
        )
        db.add(movement)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(movement)
    logger.info("Movimiento de stock %s x%s en producto #%s", movement.type.value, movement.quantity, product_id)
    return movement


def get_low_stock_products(db: Session):
    return (
        db.query(Product)
        .filter(Product.is_active == True, Product.stock <= Product.min_stock)
        .order_by(Product.stock.asc())
        .all()
    )


def notify_low_stock(db: Session, products) -> int:
    """
    Crea una notificación LOW_STOCK por producto, salvo que ya haya una igual sin leer.
    Devuelve cuántas se crearon.
    """
    created = 0
    for product in products:
        message = f'El producto "{product.name}" tiene stock bajo ({product.stock} {product.unit})'
        if has_unread(db, NotificationType.LOW_STOCK, message):
            continue
        create_notification(
            db,
            NotificationType.LOW_STOCK,
            "Stock bajo",
            message,
            NotificationPriority.HIGH,
        )
        created += 1

    if created:
        db.commit()
        logger.info("%s notificaciones de stock bajo generadas", created)
    return created


# -----------------------------
# Importación masiva
# -----------------------------
def _safe_str(val) -> str:
    if val is None:
        return ""
    if isinstance(val, float) and pd.isna(val):
        return ""
    s = str(val).strip()
    if s.lower() == "nan":
        return ""
    return s


def _safe_decimal(val, default=None):
    s = _safe_str(val)
    if not s:
        return default
    try:
        return Decimal(s.replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"Número inválido: {s}")


def _safe_int(val, default=None):
    number = _safe_decimal(val, None)
    if number is None:
        return default
    if number != number.to_integral_value():
        raise ValueError(f"Se esperaba un entero: {number}")
    return int(number)


def _safe_bool(val, default=True) -> bool:
    s = _safe_str(val).lower()
    if not s:
        return default
    return s in ("1", "true", "si", "sí", "yes", "x", "verdadero")


def read_products_frame(contents: bytes, filename: str) -> pd.DataFrame:
    filename = (filename or "").lower()
    if filename.endswith(".csv"):
        df = pd.read_csv(io.BytesIO(contents), dtype=str)
    elif filename.endswith((".xlsx", ".xlsm", ".xls")):
        df = pd.read_excel(io.BytesIO(contents), engine="openpyxl", dtype=str)
    else:
        raise ValidationError("Formato inválido. Use Excel o CSV.")

    # Normalizamos cabeceras: "Codigo Barras" / "codigoBarras" -> "codigobarras"
    df.columns = [str(c).lower().strip().replace(" ", "").replace("_", "") for c in df.columns]
    return df


def import_products(db: Session, df: pd.DataFrame) -> dict:
    """
    Da de alta los productos de la hoja. Los SKU que ya existen se omiten.
    Cada fila va en su propio commit: una fila mala no tumba las demás.
    """
    results = {"success": 0, "skipped": 0, "errors": []}

    for index, row in df.iterrows():
        row_number = index + 2  # Fila de Excel (la 1 es la cabecera)
        sku = _safe_str(row.get("sku"))
        try:
            name = _safe_str(row.get("nombre"))
            category = _safe_str(row.get("categoria"))
            price = _safe_decimal(row.get("precio"))

            if not name or not sku or price is None:
                raise ValueError("Faltan campos obligatorios (nombre, sku, precio)")
            if price <= 0:
                raise ValueError("El precio debe ser mayor a cero")

            if get_product_by_sku(db, sku):
                results["skipped"] += 1
                continue

            stock = _safe_int(row.get("stock"), 0)
            min_stock = _safe_int(row.get("stockminimo"), 5)
            if stock < 0 or min_stock < 0:
                raise ValueError("El stock no puede ser negativo")

            product = Product(
                name=name,
                description=_safe_str(row.get("descripcion")) or None,
                sku=sku,
                barcode=_safe_str(row.get("codigobarras")) or None,
                category=category or "General",
                brand=_safe_str(row.get("marca")) or None,
                price=price,
                cost=_safe_decimal(row.get("costo"), Decimal("0")),
                stock=stock,
                min_stock=min_stock,
                max_stock=_safe_int(row.get("stockmaximo")),
                unit=_safe_str(row.get("unidad")) or "unidad",
                is_active=_safe_bool(row.get("activo")),
            )
            db.add(product)
            db.flush()

            if stock > 0:
                db.add(StockMovement(
                    product_id=product.id,
                    type=StockMovementType.PURCHASE,
                    quantity=stock,
                    reason="Importación inicial",
                    reference="Excel",
                ))
            db.commit()
            results["success"] += 1
        except ValueError as e:
            db.rollback()
            results["errors"].append({"row": row_number, "sku": sku or None, "error": str(e)})

    logger.info(
        "Importación de productos: %s creados, %s omitidos, %s con error",
        results["success"], results["skipped"], len(results["errors"]),
    )
    return results


def export_products_frame(db: Session) -> pd.DataFrame:
    products = db.query(Product).order_by(Product.name).all()
    data = [
        {
            "nombre": p.name,
            "descripcion": p.description or "",
            "sku": p.sku,
            "codigoBarras": p.barcode or "",
            "categoria": p.category,
            "marca": p.brand or "",
            "precio": float(p.price),
            "costo": float(p.cost),
            "stock": p.stock,
            "stockMinimo": p.min_stock,
            "stockMaximo": p.max_stock if p.max_stock is not None else "",
            "unidad": p.unit,
            "activo": "SI" if p.is_active else "NO",
        }
        for p in products
    ]
    return pd.DataFrame(data, columns=[
        "nombre", "descripcion", "sku", "codigoBarras", "categoria", "marca",
        "precio", "costo", "stock", "stockMinimo", "stockMaximo", "unidad", "activo",
    ])
