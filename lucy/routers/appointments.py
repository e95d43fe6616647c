import logging
from datetime import date as date_type, datetime, time, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lucy.crud.notifications import create_notification
from lucy.database import get_db
from lucy.models import (
    Appointment, AppointmentStatus, Client, Service, User,
    NotificationType, NotificationPriority,
)
from lucy.schemas.appointments import AppointmentCreate, AppointmentRead, AppointmentUpdate
from lucy.schemas.common import MessageResponse
from lucy.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _day_bounds(day: date_type):
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


@router.get("/", response_model=List[AppointmentRead])
def read_appointments(
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    status: Optional[AppointmentStatus] = None,
    client_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Appointment)
    if start_date:
        query = query.filter(Appointment.date >= _day_bounds(start_date)[0])
    if end_date:
        query = query.filter(Appointment.date < _day_bounds(end_date)[1])
    if status:
        query = query.filter(Appointment.status == status)
    if client_id:
        query = query.filter(Appointment.client_id == client_id)
    return query.order_by(Appointment.date.asc(), Appointment.start_time.asc()).all()


@router.get("/date/{day}", response_model=List[AppointmentRead])
def read_appointments_by_date(
    day: date_type,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    start, end = _day_bounds(day)
    return (
        db.query(Appointment)
        .filter(Appointment.date >= start, Appointment.date < end)
        .order_by(Appointment.start_time.asc())
        .all()
    )


@router.get("/{appointment_id}", response_model=AppointmentRead)
def read_appointment(appointment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise HTTPException(status_code=404, detail="Cita no encontrada")
    return appointment


@router.post("/", response_model=AppointmentRead, status_code=201)
def create_appointment(
    appointment_in: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    client = db.query(Client).filter(Client.id == appointment_in.client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    service = db.query(Service).filter(Service.id == appointment_in.service_id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Servicio no encontrado")

    data = appointment_in.model_dump()
    data["user_id"] = data["user_id"] or current_user.id
    appointment = Appointment(**data)
    db.add(appointment)

    if appointment.reminder:
        create_notification(
            db,
            NotificationType.APPOINTMENT,
            "Nueva cita",
            f"Cita con {client.full_name} el {appointment.date:%d/%m/%Y} a las {appointment.start_time} ({service.name})",
            NotificationPriority.NORMAL,
        )

    db.commit()
    db.refresh(appointment)
    logger.info("Cita #%s agendada para %s", appointment.id, client.full_name)
    return appointment


@router.put("/{appointment_id}", response_model=AppointmentRead)
def update_appointment(
    appointment_id: int,
    appointment_in: AppointmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise HTTPException(status_code=404, detail="Cita no encontrada")

    data = appointment_in.model_dump(exclude_unset=True)
    start_time = data.get("start_time", appointment.start_time)
    end_time = data.get("end_time", appointment.end_time)
    if end_time <= start_time:
        raise HTTPException(status_code=400, detail="La hora de fin debe ser posterior a la de inicio")

    for key, value in data.items():
        setattr(appointment, key, value)
    db.commit()
    db.refresh(appointment)
    return appointment


@router.delete("/{appointment_id}", response_model=MessageResponse)
def delete_appointment(appointment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise HTTPException(status_code=404, detail="Cita no encontrada")

    db.delete(appointment)
    db.commit()
    return {"message": "Cita eliminada"}
