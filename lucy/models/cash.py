# lucy/models/cash.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, Index, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lucy.database import Base


class CashRegisterStatus(str, enum.Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CashMovementType(str, enum.Enum):
    INCOME = "INCOME"          # Ingreso (cobros)
    EXPENSE = "EXPENSE"        # Gasto
    WITHDRAWAL = "WITHDRAWAL"  # Retiro de efectivo
    DEPOSIT = "DEPOSIT"        # Aporte de efectivo


class CashRegister(Base):
    """
    Sesión de caja: desde que se abre el cajón hasta el arqueo de cierre.
    Solo puede haber una ABIERTA a la vez (índice único parcial).
    """
    __tablename__ = "cash_registers"
    __table_args__ = (
        Index(
            "uq_cash_registers_single_open",
            "status",
            unique=True,
            sqlite_where=text("status = 'OPEN'"),
            postgresql_where=text("status = 'OPEN'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime(timezone=True), server_default=func.now(), index=True)  # Fecha de negocio

    # Montos
    opening_balance = Column(Numeric(10, 2), nullable=False)     # Fondo inicial
    closing_balance = Column(Numeric(10, 2), nullable=True)      # Lo que contó el cajero
    expected_balance = Column(Numeric(10, 2), nullable=True)     # Calculado al cerrar
    difference = Column(Numeric(10, 2), nullable=True)           # Sobrante (+) / Faltante (-)

    status = Column(Enum(CashRegisterStatus), default=CashRegisterStatus.OPEN, nullable=False)

    opened_at = Column(DateTime(timezone=True), server_default=func.now())
    closed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    notes = Column(Text, nullable=True)

    # El orden de inserción es el orden cronológico
    movements = relationship(
        "CashMovement",
        back_populates="cash_register",
        cascade="all, delete-orphan",
        order_by="CashMovement.id",
    )


class CashMovement(Base):
    __tablename__ = "cash_movements"

    id = Column(Integer, primary_key=True, index=True)
    cash_register_id = Column(Integer, ForeignKey("cash_registers.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    type = Column(Enum(CashMovementType), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)  # Siempre positivo, el signo lo da el tipo
    category = Column(String, nullable=False)
    description = Column(String, nullable=False)
    reference = Column(String, nullable=True)
    date = Column(DateTime(timezone=True), server_default=func.now())

    cash_register = relationship("CashRegister", back_populates="movements")
    user = relationship("User")

    @property
    def user_name(self):
        return self.user.name if self.user else None
