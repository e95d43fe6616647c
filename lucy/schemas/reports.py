from pydantic import BaseModel
from typing import List, Dict, Optional
from decimal import Decimal


class TopProduct(BaseModel):
    name: str
    quantity: int


class SalesReport(BaseModel):
    total_sales: int
    total_revenue: Decimal
    average_ticket: Decimal
    payment_methods: Dict[str, Decimal]
    top_products: List[TopProduct]


class TopClient(BaseModel):
    id: int
    name: str
    total_spent: Decimal
    loyalty_points: int
    appointment_count: int
    sale_count: int


class ClientReport(BaseModel):
    total_clients: int
    total_spent: Decimal
    average_spent: Decimal
    top_clients: List[TopClient]


class LowStockItem(BaseModel):
    id: int
    name: str
    stock: int
    min_stock: int


class ProductSales(BaseModel):
    id: int
    name: str
    total_sold: int
    revenue: Decimal


class ProductReport(BaseModel):
    total_products: int
    total_value: Decimal  # Valor del inventario a precio de venta
    low_stock_products: List[LowStockItem]
    top_products: List[ProductSales]


class CashReport(BaseModel):
    total_income: Decimal
    total_expenses: Decimal
    total_withdrawals: Decimal
    total_deposits: Decimal
    net_cash_flow: Decimal
    sessions: int
    total_difference: Optional[Decimal] = None  # Suma de sobrantes/faltantes de cajas cerradas
