from pydantic import BaseModel, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from lucy.models.sales import PaymentMethod, SaleStatus
from lucy.schemas.common import ClientBrief, UserBrief

# --- Models for Creation ---

class SaleItemCreate(BaseModel):
    # Una línea es de producto o de servicio
    product_id: Optional[int] = None
    service_id: Optional[int] = None
    description: Optional[str] = None  # Por defecto, el nombre del catálogo
    quantity: int = 1
    price: Optional[Decimal] = None    # Por defecto, el precio del catálogo


class SaleCreate(BaseModel):
    client_id: Optional[int] = None
    items: List[SaleItemCreate]
    discount_percent: Decimal = Decimal("0")
    tax: Decimal = Decimal("0.00")   # Importe fijo, no tasa
    payment_method: PaymentMethod
    status: SaleStatus = SaleStatus.COMPLETED
    notes: Optional[str] = None


class SaleUpdate(BaseModel):
    payment_method: Optional[PaymentMethod] = None
    status: Optional[SaleStatus] = None
    notes: Optional[str] = None

    @field_validator("payment_method", "status")
    @classmethod
    def not_null(cls, value):
        # Se pueden omitir, pero no vaciar: la venta siempre tiene método y estado
        if value is None:
            raise ValueError("No puede ser null")
        return value


# --- Models for Reading (History) ---

class SaleItemRead(BaseModel):
    id: int
    product_id: Optional[int] = None
    service_id: Optional[int] = None
    description: str
    quantity: int
    price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class SaleRead(BaseModel):
    id: int
    sale_number: str
    client_id: Optional[int] = None
    user_id: int

    subtotal: Decimal
    discount_percent: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal

    payment_method: PaymentMethod
    status: SaleStatus
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    date: datetime

    client: Optional[ClientBrief] = None
    user: Optional[UserBrief] = None
    items: List[SaleItemRead] = []

    class Config:
        from_attributes = True
