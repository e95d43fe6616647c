from datetime import date, datetime, time, timedelta
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from lucy.crud.cash import get_open_session, current_balance
from lucy.database import get_db
from lucy.models import (
    Appointment, AppointmentStatus, Client, Notification, Product, Sale, SaleStatus, User,
)
from lucy.schemas.appointments import AppointmentRead
from lucy.schemas.cash import CashRegisterDetail
from lucy.schemas.dashboard import DashboardStats
from lucy.schemas.sales import SaleRead
from lucy.security import get_current_user

router = APIRouter()


def _completed_sales(db: Session, start: datetime, end: datetime):
    return (
        db.query(func.count(Sale.id), func.coalesce(func.sum(Sale.total), 0))
        .filter(Sale.status == SaleStatus.COMPLETED, Sale.date >= start, Sale.date < end)
        .one()
    )


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    today = datetime.combine(date.today(), time.min)
    tomorrow = today + timedelta(days=1)
    month_start = today.replace(day=1)

    today_count, today_revenue = _completed_sales(db, today, tomorrow)
    month_count, month_revenue = _completed_sales(db, month_start, tomorrow)

    today_appointments = (
        db.query(func.count(Appointment.id))
        .filter(Appointment.date >= today, Appointment.date < tomorrow)
        .scalar()
    )

    open_session = get_open_session(db)
    open_detail = None
    if open_session:
        open_detail = CashRegisterDetail.model_validate(open_session)
        open_detail.current_balance = current_balance(open_session)

    upcoming = (
        db.query(Appointment)
        .filter(
            Appointment.date >= today,
            Appointment.date < today + timedelta(days=8),
            Appointment.status.in_([AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED]),
        )
        .order_by(Appointment.date.asc(), Appointment.start_time.asc())
        .limit(5)
        .all()
    )
    recent_sales = (
        db.query(Sale)
        .filter(Sale.status == SaleStatus.COMPLETED)
        .order_by(Sale.date.desc(), Sale.id.desc())
        .limit(5)
        .all()
    )

    # Últimos 7 días, el más antiguo primero
    chart = []
    for offset in range(6, -1, -1):
        day_start = today - timedelta(days=offset)
        count, revenue = _completed_sales(db, day_start, day_start + timedelta(days=1))
        chart.append({"date": day_start.date(), "revenue": _money(revenue), "count": count})

    return {
        "today": {
            "appointments": today_appointments,
            "revenue": _money(today_revenue),
            "sales_count": today_count,
        },
        "month": {"revenue": _money(month_revenue), "sales_count": month_count},
        "totals": {
            "clients": db.query(func.count(Client.id)).filter(Client.is_active == True).scalar(),
            "low_stock_products": (
                db.query(func.count(Product.id))
                .filter(Product.is_active == True, Product.stock <= Product.min_stock)
                .scalar()
            ),
            "unread_notifications": (
                db.query(func.count(Notification.id)).filter(Notification.is_read == False).scalar()
            ),
        },
        "open_cash_register": open_detail,
        "upcoming_appointments": [AppointmentRead.model_validate(a) for a in upcoming],
        "recent_sales": [SaleRead.model_validate(s) for s in recent_sales],
        "sales_chart": chart,
    }
