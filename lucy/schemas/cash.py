# schemas/cash.py
from pydantic import BaseModel
from typing import Optional, List
from decimal import Decimal
from datetime import datetime

from lucy.models.cash import CashRegisterStatus, CashMovementType


class CashRegisterOpen(BaseModel):
    opening_balance: Decimal  # Fondo inicial
    notes: Optional[str] = None


class CashRegisterClose(BaseModel):
    closing_balance: Decimal  # Lo que el cajero contó físicamente
    notes: Optional[str] = None


class CashMovementCreate(BaseModel):
    type: CashMovementType
    amount: Decimal
    category: str
    description: str
    reference: Optional[str] = None


class CashMovementRead(BaseModel):
    id: int
    cash_register_id: int
    user_id: int
    type: CashMovementType
    amount: Decimal
    category: str
    description: str
    reference: Optional[str] = None
    date: datetime
    user_name: Optional[str] = None

    class Config:
        from_attributes = True


class CashRegisterRead(BaseModel):
    id: int
    date: datetime
    status: CashRegisterStatus
    opening_balance: Decimal
    opened_at: datetime
    closed_at: Optional[datetime] = None
    notes: Optional[str] = None

    # Datos de cierre (congelados al cerrar)
    closing_balance: Optional[Decimal] = None
    expected_balance: Optional[Decimal] = None
    difference: Optional[Decimal] = None  # Sobrante (+) o Faltante (-)

    class Config:
        from_attributes = True


class CashRegisterDetail(CashRegisterRead):
    movements: List[CashMovementRead] = []
    current_balance: Decimal = Decimal("0.00")  # Saldo esperado en vivo
