from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

from lucy.models.users import Role


class UserBase(BaseModel):
    email: EmailStr
    name: str
    role: Role = Role.EMPLOYEE
    is_active: bool = True


class UserCreate(UserBase):
    password: str


class UserRead(UserBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
