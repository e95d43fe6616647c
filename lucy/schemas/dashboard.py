from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal
from datetime import date

from lucy.schemas.appointments import AppointmentRead
from lucy.schemas.cash import CashRegisterDetail
from lucy.schemas.sales import SaleRead


class TodayStats(BaseModel):
    appointments: int
    revenue: Decimal
    sales_count: int


class MonthStats(BaseModel):
    revenue: Decimal
    sales_count: int


class TotalsStats(BaseModel):
    clients: int
    low_stock_products: int
    unread_notifications: int


class ChartPoint(BaseModel):
    date: date
    revenue: Decimal
    count: int


class DashboardStats(BaseModel):
    today: TodayStats
    month: MonthStats
    totals: TotalsStats
    open_cash_register: Optional[CashRegisterDetail] = None
    upcoming_appointments: List[AppointmentRead]
    recent_sales: List[SaleRead]
    sales_chart: List[ChartPoint]
