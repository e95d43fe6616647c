# lucy/models/products.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lucy.database import Base


class StockMovementType(str, enum.Enum):
    PURCHASE = "PURCHASE"      # Entrada por compra
    SALE = "SALE"              # Salida por venta
    ADJUSTMENT = "ADJUSTMENT"  # Ajuste de inventario (+)
    RETURN = "RETURN"          # Devolución de cliente (+)
    DAMAGED = "DAMAGED"        # Merma (-)


# Tipos que suman al stock; el resto resta
INBOUND_MOVEMENTS = {StockMovementType.PURCHASE, StockMovementType.RETURN, StockMovementType.ADJUSTMENT}


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)

    sku = Column(String, unique=True, index=True, nullable=False)
    barcode = Column(String, index=True, nullable=True)
    category = Column(String, nullable=False, index=True)
    brand = Column(String, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)
    cost = Column(Numeric(10, 2), nullable=False)

    stock = Column(Integer, default=0, nullable=False)
    min_stock = Column(Integer, default=5, nullable=False)
    max_stock = Column(Integer, nullable=True)
    unit = Column(String, default="unidad")

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    stock_movements = relationship(
        "StockMovement",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="desc(StockMovement.id)",
    )


class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    type = Column(Enum(StockMovementType), nullable=False)
    quantity = Column(Integer, nullable=False)  # Siempre positivo, el signo lo da el tipo
    reason = Column(String, nullable=True)
    reference = Column(String, nullable=True)  # Número de venta, factura de proveedor...
    date = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="stock_movements")
