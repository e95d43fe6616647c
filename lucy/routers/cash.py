# lucy/routers/cash.py
from datetime import date as date_type, datetime, time, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lucy.crud import cash as crud
from lucy.database import get_db
from lucy.models import CashRegister, CashRegisterStatus, User
from lucy.schemas.cash import (
    CashRegisterOpen, CashRegisterClose, CashRegisterRead, CashRegisterDetail,
    CashMovementCreate, CashMovementRead,
)
from lucy.security import get_current_user

router = APIRouter()


def _detail(session: CashRegister) -> CashRegisterDetail:
    detail = CashRegisterDetail.model_validate(session)
    detail.current_balance = crud.current_balance(session)
    return detail


@router.get("/", response_model=List[CashRegisterRead])
def read_cash_registers(
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    status: Optional[CashRegisterStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    start = datetime.combine(start_date, time.min) if start_date else None
    end = datetime.combine(end_date, time.min) + timedelta(days=1) if end_date else None
    return crud.list_sessions(db, start, end, status)


@router.get("/current", response_model=Optional[CashRegisterDetail])
def read_current_cash_register(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Caja abierta con su saldo en vivo, o null si no hay ninguna."""
    session = crud.get_open_session(db)
    if not session:
        return None
    return _detail(session)


@router.get("/{session_id}", response_model=CashRegisterDetail)
def read_cash_register(session_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _detail(crud.get_session(db, session_id))


@router.post("/open", response_model=CashRegisterDetail, status_code=201)
def open_cash_register(
    data: CashRegisterOpen,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _detail(crud.open_session(db, data.opening_balance, data.notes))


@router.post("/{session_id}/close", response_model=CashRegisterDetail)
def close_cash_register(
    session_id: int,
    data: CashRegisterClose,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _detail(crud.close_session(db, session_id, data.closing_balance, data.notes))


@router.get("/{session_id}/movements", response_model=List[CashMovementRead])
def read_cash_movements(session_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return crud.get_session(db, session_id).movements


@router.post("/{session_id}/movements", response_model=CashMovementRead, status_code=201)
def add_cash_movement(
    session_id: int,
    data: CashMovementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud.add_movement(
        db,
        session_id,
        current_user.id,
        data.type,
        data.amount,
        data.category,
        data.description,
        data.reference,
    )
