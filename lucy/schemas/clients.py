from pydantic import BaseModel, EmailStr
from typing import Optional, List
from decimal import Decimal
from datetime import date, datetime

from lucy.schemas.appointments import AppointmentRead
from lucy.schemas.sales import SaleRead

# --- CLASES BASE ---

class ClientBase(BaseModel):
    first_name: str
    last_name: str
    phone: str
    email: Optional[EmailStr] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    # Todo opcional: solo se tocan los campos enviados
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class ClientRead(ClientBase):
    id: int
    loyalty_points: int = 0
    total_spent: Decimal = Decimal("0.00")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClientListItem(ClientRead):
    appointment_count: int = 0
    sale_count: int = 0


# --- HISTORIAL (ficha de tratamientos) ---

class ClientHistoryCreate(BaseModel):
    service: str
    amount: Decimal = Decimal("0.00")
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    date: Optional[datetime] = None


class ClientHistoryRead(BaseModel):
    id: int
    client_id: int
    date: datetime
    service: str
    amount: Decimal
    notes: Optional[str] = None
    photo_url: Optional[str] = None

    class Config:
        from_attributes = True


# --- DETALLE ---

class ClientDetail(ClientRead):
    appointments: List[AppointmentRead] = []
    sales: List[SaleRead] = []
    history: List[ClientHistoryRead] = []
