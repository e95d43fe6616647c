from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lucy.crud import clients as crud
from lucy.database import get_db
from lucy.models import Appointment, Sale, User
from lucy.schemas.clients import (
    ClientCreate, ClientUpdate, ClientRead, ClientListItem, ClientDetail,
    ClientHistoryCreate, ClientHistoryRead,
)
from lucy.schemas.appointments import AppointmentRead
from lucy.schemas.common import MessageResponse
from lucy.schemas.sales import SaleRead
from lucy.security import get_current_user

router = APIRouter()


@router.get("/", response_model=List[ClientListItem])
def read_clients(
    search: str = "",
    is_active: Optional[bool] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    results = []
    for client, appointment_count, sale_count in crud.get_clients(db, search, is_active, skip, limit):
        item = ClientListItem.model_validate(client)
        item.appointment_count = appointment_count or 0
        item.sale_count = sale_count or 0
        results.append(item)
    return results


# Va antes de /{client_id} para que "birthdays" no se tome como id
@router.get("/birthdays", response_model=List[ClientRead])
def read_birthdays(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return crud.get_birthdays(db)


@router.get("/{client_id}", response_model=ClientDetail)
def read_client(client_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    client = crud.get_client(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")

    detail = ClientDetail.model_validate(client)
    # Solo las 10 más recientes
    appointments = (
        db.query(Appointment)
        .filter(Appointment.client_id == client_id)
        .order_by(Appointment.date.desc())
        .limit(10)
        .all()
    )
    sales = (
        db.query(Sale)
        .filter(Sale.client_id == client_id)
        .order_by(Sale.date.desc(), Sale.id.desc())
        .limit(10)
        .all()
    )
    detail.appointments = [AppointmentRead.model_validate(a) for a in appointments]
    detail.sales = [SaleRead.model_validate(s) for s in sales]
    return detail


@router.post("/", response_model=ClientRead, status_code=201)
def create_client(
    client_in: ClientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud.create_client(db, client_in)


@router.put("/{client_id}", response_model=ClientRead)
def update_client(
    client_id: int,
    client_in: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    client = crud.get_client(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return crud.update_client(db, client, client_in)


@router.delete("/{client_id}", response_model=MessageResponse)
def delete_client(client_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    client = crud.get_client(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")

    db.delete(client)
    db.commit()
    return {"message": "Cliente eliminado"}


# --- Historial de tratamientos ---

@router.get("/{client_id}/history", response_model=List[ClientHistoryRead])
def read_client_history(client_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    client = crud.get_client(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return client.history


@router.post("/{client_id}/history", response_model=ClientHistoryRead, status_code=201)
def add_client_history(
    client_id: int,
    history_in: ClientHistoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not crud.get_client(db, client_id):
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return crud.add_history(db, client_id, history_in)
