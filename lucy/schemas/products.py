from typing import Optional, List
from pydantic import BaseModel, Field
from decimal import Decimal
from datetime import datetime

from lucy.models.products import StockMovementType


# --- Producto Crear/Editar (Input) ---
class ProductBase(BaseModel):
    name: str
    description: Optional[str] = None
    sku: str
    barcode: Optional[str] = None
    category: str
    brand: Optional[str] = None

    price: Decimal = Field(..., gt=0)
    cost: Decimal = Field(..., ge=0)

    stock: int = Field(0, ge=0)
    min_stock: int = Field(5, ge=0)
    max_stock: Optional[int] = None
    unit: str = "unidad"
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    # El stock NO se edita aquí; se mueve con /stock-movements para dejar rastro
    name: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    max_stock: Optional[int] = None
    unit: Optional[str] = None
    is_active: Optional[bool] = None


# --- Movimientos de stock ---
class StockMovementCreate(BaseModel):
    type: StockMovementType
    quantity: int = Field(..., gt=0)
    reason: Optional[str] = None
    reference: Optional[str] = None


class StockMovementRead(BaseModel):
    id: int
    product_id: int
    type: StockMovementType
    quantity: int
    reason: Optional[str] = None
    reference: Optional[str] = None
    date: datetime

    class Config:
        from_attributes = True


# --- Producto Lectura (Output) ---
class ProductRead(ProductBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductDetail(ProductRead):
    stock_movements: List[StockMovementRead] = []


# --- Importación Excel ---
class ImportRowError(BaseModel):
    row: int
    sku: Optional[str] = None
    error: str


class ImportResults(BaseModel):
    success: int = 0
    skipped: int = 0
    errors: List[ImportRowError] = []


class ImportResponse(BaseModel):
    message: str
    results: ImportResults
