from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime

from lucy.models.appointments import AppointmentStatus
from lucy.schemas.common import ClientBrief, ServiceBrief, UserBrief

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"  # HH:MM


class AppointmentBase(BaseModel):
    client_id: int
    service_id: int
    user_id: Optional[int] = None  # Si no viene, se asigna al usuario que la crea
    date: datetime
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None
    reminder: bool = True

    @model_validator(mode="after")
    def check_times(self):
        # "HH:MM" con cero a la izquierda se compara bien como texto
        if self.end_time <= self.start_time:
            raise ValueError("La hora de fin debe ser posterior a la de inicio")
        return self


class AppointmentCreate(AppointmentBase):
    pass


class AppointmentUpdate(BaseModel):
    client_id: Optional[int] = None
    service_id: Optional[int] = None
    user_id: Optional[int] = None
    date: Optional[datetime] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None
    reminder: Optional[bool] = None


class AppointmentRead(BaseModel):
    id: int
    client_id: int
    service_id: int
    user_id: int
    date: datetime
    start_time: str
    end_time: str
    status: AppointmentStatus
    notes: Optional[str] = None
    reminder: bool

    client: Optional[ClientBrief] = None
    service: Optional[ServiceBrief] = None
    user: Optional[UserBrief] = None

    class Config:
        from_attributes = True
