# lucy/models/clients.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey, DateTime, Date, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lucy.database import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False, index=True)
    last_name = Column(String, nullable=False, index=True)

    email = Column(String, nullable=True)
    phone = Column(String, nullable=False)
    birth_date = Column(Date, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # --- Fidelización ---
    loyalty_points = Column(Integer, default=0, nullable=False)
    total_spent = Column(Numeric(10, 2), default=0, nullable=False)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    appointments = relationship("Appointment", back_populates="client", cascade="all, delete-orphan")
    sales = relationship("Sale", back_populates="client")
    history = relationship(
        "ClientHistory",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="desc(ClientHistory.date)",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ClientHistory(Base):
    """
    Ficha de tratamientos del cliente (qué se le hizo, cuándo y cuánto pagó).
    """
    __tablename__ = "client_history"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)

    date = Column(DateTime(timezone=True), server_default=func.now())
    service = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), default=0, nullable=False)
    photo_url = Column(String, nullable=True)

    client = relationship("Client", back_populates="history")
