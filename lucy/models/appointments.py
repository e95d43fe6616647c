import enum
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Enum, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lucy.database import Base


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"      # Programada
    CONFIRMED = "CONFIRMED"      # Confirmada
    IN_PROGRESS = "IN_PROGRESS"  # En progreso
    COMPLETED = "COMPLETED"      # Completada
    CANCELLED = "CANCELLED"      # Cancelada
    NO_SHOW = "NO_SHOW"          # No asistió


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)  # Profesional que atiende
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    date = Column(DateTime(timezone=True), nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)

    status = Column(Enum(AppointmentStatus), default=AppointmentStatus.SCHEDULED, nullable=False)
    notes = Column(Text, nullable=True)
    reminder = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    client = relationship("Client", back_populates="appointments")
    user = relationship("User")
    service = relationship("Service")
