from datetime import date as date_type, datetime, time, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lucy.crud import sales as crud
from lucy.database import get_db
from lucy.models import Sale, SaleStatus, User
from lucy.schemas.common import MessageResponse
from lucy.schemas.sales import SaleCreate, SaleRead, SaleUpdate
from lucy.security import get_current_user, get_admin_user

router = APIRouter()


@router.get("/", response_model=List[SaleRead])
def read_sales(
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    client_id: Optional[int] = None,
    status: Optional[SaleStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Sale)
    if start_date:
        query = query.filter(Sale.date >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(Sale.date < datetime.combine(end_date, time.min) + timedelta(days=1))
    if client_id:
        query = query.filter(Sale.client_id == client_id)
    if status:
        query = query.filter(Sale.status == status)
    return query.order_by(Sale.id.desc()).offset(skip).limit(limit).all()


@router.get("/{sale_id}", response_model=SaleRead)
def read_sale(sale_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    sale = crud.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Venta no encontrada")
    return sale


@router.post("/", response_model=SaleRead, status_code=201)
def create_sale(
    sale_in: SaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud.create_sale(db, sale_in, current_user.id)


@router.put("/{sale_id}", response_model=SaleRead)
def update_sale(
    sale_id: int,
    sale_in: SaleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = crud.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Venta no encontrada")
    return crud.update_sale(db, sale, sale_in)


@router.delete("/{sale_id}", response_model=MessageResponse)
def delete_sale(sale_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_admin_user)):
    sale = crud.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Venta no encontrada")
    crud.delete_sale(db, sale)
    return {"message": "Venta eliminada"}
