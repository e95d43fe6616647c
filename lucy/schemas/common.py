# Versiones reducidas para anidar dentro de otras respuestas
from pydantic import BaseModel
from decimal import Decimal


class ClientBrief(BaseModel):
    id: int
    first_name: str
    last_name: str
    phone: str

    class Config:
        from_attributes = True


class ServiceBrief(BaseModel):
    id: int
    name: str
    duration: int
    price: Decimal

    class Config:
        from_attributes = True


class UserBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
