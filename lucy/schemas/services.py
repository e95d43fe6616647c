from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class ServiceBase(BaseModel):
    name: str
    description: Optional[str] = None
    category: str
    price: Decimal = Field(..., gt=0)
    duration: int = Field(..., gt=0)  # minutos
    is_active: bool = True


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    duration: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None


class ServiceRead(ServiceBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
