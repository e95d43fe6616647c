import logging
from datetime import date

from sqlalchemy import extract, func, or_, update
from sqlalchemy.orm import Session

from lucy.errors import ValidationError
from lucy.models import Client, ClientHistory, Appointment, Sale
from lucy.schemas.clients import ClientCreate, ClientUpdate, ClientHistoryCreate
from lucy.utils.money import to_money

logger = logging.getLogger(__name__)


def get_client(db: Session, client_id: int):
    return db.query(Client).filter(Client.id == client_id).first()


def get_clients(db: Session, search: str = "", is_active=None, skip: int = 0, limit: int = 100):
    """Lista de clientes con el número de citas y ventas de cada uno."""
    appointment_count = (
        db.query(func.count(Appointment.id))
        .filter(Appointment.client_id == Client.id)
        .correlate(Client)
        .scalar_subquery()
    )
    sale_count = (
        db.query(func.count(Sale.id))
        .filter(Sale.client_id == Client.id)
        .correlate(Client)
        .scalar_subquery()
    )

    query = db.query(Client, appointment_count.label("appointment_count"), sale_count.label("sale_count"))
    if search:
        term = f"%{search}%"
        query = query.filter(or_(
            Client.first_name.ilike(term),
            Client.last_name.ilike(term),
            Client.email.ilike(term),
            Client.phone.ilike(term),
        ))
    if is_active is not None:
        query = query.filter(Client.is_active == is_active)

    return query.order_by(Client.created_at.desc(), Client.id.desc()).offset(skip).limit(limit).all()


def create_client(db: Session, client_in: ClientCreate) -> Client:
    db_client = Client(**client_in.model_dump())
    db.add(db_client)
    db.commit()
    db.refresh(db_client)
    logger.info("Cliente creado: %s", db_client.full_name)
    return db_client


def update_client(db: Session, db_client: Client, client_in: ClientUpdate) -> Client:
    for key, value in client_in.model_dump(exclude_unset=True).items():
        setattr(db_client, key, value)
    db.commit()
    db.refresh(db_client)
    return db_client


def add_history(db: Session, client_id: int, history_in: ClientHistoryCreate) -> ClientHistory:
    amount = to_money(history_in.amount, "amount")
    if amount < 0:
        raise ValidationError("El importe no puede ser negativo")

    data = history_in.model_dump(exclude_none=True)
    data["amount"] = amount
    entry = ClientHistory(client_id=client_id, **data)
    db.add(entry)
    try:
        db.execute(
            update(Client)
            .where(Client.id == client_id)
            .values(total_spent=Client.total_spent + amount)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)
    return entry


def get_birthdays(db: Session, month: int = None):
    """Clientes activos que cumplen años en el mes indicado (por defecto, el actual)."""
    month = month or date.today().month
    return (
        db.query(Client)
        .filter(
            Client.is_active == True,
            Client.birth_date.isnot(None),
            extract("month", Client.birth_date) == month,
        )
        .order_by(extract("day", Client.birth_date))
        .all()
    )
