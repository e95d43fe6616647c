# lucy/models/sales.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, Numeric, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lucy.database import Base

# --- Enums ---
class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    MIXED = "MIXED"


class SaleStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# --- Encabezado de Venta ---
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    sale_number = Column(String, unique=True, index=True, nullable=False)  # Ej: V-000042

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    subtotal = Column(Numeric(10, 2), nullable=False)
    discount_percent = Column(Numeric(5, 2), default=0, nullable=False)
    discount = Column(Numeric(10, 2), default=0, nullable=False)  # Monto ya calculado
    tax = Column(Numeric(10, 2), default=0, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    payment_method = Column(Enum(PaymentMethod), nullable=False)
    status = Column(Enum(SaleStatus), default=SaleStatus.COMPLETED, nullable=False)

    # Marca que el stock y los puntos ya se aplicaron (solo una vez por venta)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    notes = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    client = relationship("Client", back_populates="sales")
    user = relationship("User")
    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )


# --- Detalle de Venta ---
class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)

    # Producto o servicio (en la práctica solo uno de los dos)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)

    description = Column(String, nullable=False)  # Copia del nombre al momento de vender
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")
    service = relationship("Service")


# --- Contador de folios ---
class SaleCounter(Base):
    """
    Una fila por prefijo. Se incrementa con un UPDATE atómico dentro de la
    misma transacción que la venta, nunca con MAX()+1.
    """
    __tablename__ = "sale_counters"

    prefix = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
