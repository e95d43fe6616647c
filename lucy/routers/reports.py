# lucy/routers/reports.py
from collections import Counter
from datetime import date as date_type, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from lucy.database import get_db
from lucy.models import (
    Sale, SaleStatus, Client, Appointment, Product, StockMovement, StockMovementType,
    CashRegister, CashRegisterStatus, CashMovementType, User,
)
from lucy.schemas.reports import SalesReport, ClientReport, ProductReport, CashReport
from lucy.security import get_current_user
from lucy.utils.cash import summarize_movements
from lucy.utils.money import quantize_money

router = APIRouter()

ZERO = Decimal("0.00")


def _date_range(query, column, start_date: Optional[date_type], end_date: Optional[date_type]):
    if start_date:
        query = query.filter(column >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(column < datetime.combine(end_date, time.min) + timedelta(days=1))
    return query


# --- 1. Ventas ---
@router.get("/sales", response_model=SalesReport)
def sales_report(
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Sale).filter(Sale.status == SaleStatus.COMPLETED)
    sales = _date_range(query, Sale.date, start_date, end_date).all()

    total_revenue = sum((sale.total for sale in sales), ZERO)
    average_ticket = quantize_money(total_revenue / len(sales)) if sales else ZERO

    payment_methods = {}
    product_sales = Counter()
    for sale in sales:
        key = sale.payment_method.value
        payment_methods[key] = payment_methods.get(key, ZERO) + sale.total
        for item in sale.items:
            if item.product_id:
                product_sales[item.description] += item.quantity

    return {
        "total_sales": len(sales),
        "total_revenue": total_revenue,
        "average_ticket": average_ticket,
        "payment_methods": payment_methods,
        "top_products": [
            {"name": name, "quantity": quantity}
            for name, quantity in product_sales.most_common(10)
        ],
    }


# --- 2. Clientes ---
@router.get("/clients", response_model=ClientReport)
def clients_report(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    clients = db.query(Client).filter(Client.is_active == True).all()

    total_spent = sum((client.total_spent for client in clients), ZERO)
    average_spent = quantize_money(total_spent / len(clients)) if clients else ZERO

    appointment_counts = dict(
        db.query(Appointment.client_id, func.count(Appointment.id)).group_by(Appointment.client_id).all()
    )
    sale_counts = dict(
        db.query(Sale.client_id, func.count(Sale.id)).filter(Sale.client_id.isnot(None)).group_by(Sale.client_id).all()
    )

    top = sorted(clients, key=lambda c: c.total_spent, reverse=True)[:10]
    return {
        "total_clients": len(clients),
        "total_spent": total_spent,
        "average_spent": average_spent,
        "top_clients": [
            {
                "id": c.id,
                "name": c.full_name,
                "total_spent": c.total_spent,
                "loyalty_points": c.loyalty_points,
                "appointment_count": appointment_counts.get(c.id, 0),
                "sale_count": sale_counts.get(c.id, 0),
            }
            for c in top
        ],
    }


# --- 3. Inventario ---
@router.get("/products", response_model=ProductReport)
def products_report(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    products = db.query(Product).filter(Product.is_active == True).all()

    sold = dict(
        db.query(StockMovement.product_id, func.sum(StockMovement.quantity))
        .filter(StockMovement.type == StockMovementType.SALE)
        .group_by(StockMovement.product_id)
        .all()
    )

    product_sales = sorted(
        (
            {
                "id": p.id,
                "name": p.name,
                "total_sold": int(sold.get(p.id) or 0),
                "revenue": p.price * int(sold.get(p.id) or 0),
            }
            for p in products
        ),
        key=lambda row: row["total_sold"],
        reverse=True,
    )[:10]

    return {
        "total_products": len(products),
        "total_value": sum((p.price * p.stock for p in products), ZERO),
        "low_stock_products": [
            {"id": p.id, "name": p.name, "stock": p.stock, "min_stock": p.min_stock}
            for p in products
            if p.stock <= p.min_stock
        ],
        "top_products": product_sales,
    }


# --- 4. Caja ---
@router.get("/cash", response_model=CashReport)
def cash_report(
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sessions = _date_range(db.query(CashRegister), CashRegister.date, start_date, end_date).all()

    movements = [movement for session in sessions for movement in session.movements]
    totals = summarize_movements(movements)

    income = totals[CashMovementType.INCOME]
    expenses = totals[CashMovementType.EXPENSE]
    withdrawals = totals[CashMovementType.WITHDRAWAL]
    deposits = totals[CashMovementType.DEPOSIT]

    closed = [s for s in sessions if s.status == CashRegisterStatus.CLOSED]
    total_difference = sum((s.difference or ZERO for s in closed), ZERO) if closed else None

    return {
        "total_income": income,
        "total_expenses": expenses,
        "total_withdrawals": withdrawals,
        "total_deposits": deposits,
        "net_cash_flow": income - expenses + deposits - withdrawals,
        "sessions": len(sessions),
        "total_difference": total_difference,
    }
