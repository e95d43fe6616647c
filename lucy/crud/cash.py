# lucy/crud/cash.py
"""
Apertura, movimientos y cierre de caja.

Cierre y alta de movimientos arrancan con el mismo UPDATE condicional sobre la
fila de la caja (WHERE status = 'OPEN'); así el motor serializa ambas
operaciones y nunca entra un movimiento en una caja que otra petición acaba de
cerrar.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lucy.errors import (
    ValidationError, NotFoundError,
    SessionAlreadyOpenError, AlreadyClosedError, SessionClosedError,
)
from lucy.models import CashRegister, CashMovement, CashRegisterStatus, CashMovementType
from lucy.utils.cash import compute_expected_balance, compute_variance
from lucy.utils.money import to_money

logger = logging.getLogger(__name__)


def get_open_session(db: Session) -> Optional[CashRegister]:
    return db.query(CashRegister).filter(CashRegister.status == CashRegisterStatus.OPEN).first()


def get_session(db: Session, session_id: int) -> CashRegister:
    session = db.query(CashRegister).filter(CashRegister.id == session_id).first()
    if not session:
        raise NotFoundError("Caja no encontrada")
    return session


def current_balance(session: CashRegister) -> Decimal:
    """Saldo esperado con los movimientos registrados hasta ahora."""
    return compute_expected_balance(session.opening_balance, session.movements)


def list_sessions(db: Session, start_date=None, end_date=None, status=None):
    """Cada límite se aplica por separado; `end_date` es exclusivo."""
    query = db.query(CashRegister)
    if start_date:
        query = query.filter(CashRegister.date >= start_date)
    if end_date:
        query = query.filter(CashRegister.date < end_date)
    if status:
        query = query.filter(CashRegister.status == status)
    return query.order_by(CashRegister.date.desc(), CashRegister.id.desc()).all()


def open_session(db: Session, opening_balance, notes: Optional[str] = None) -> CashRegister:
    amount = to_money(opening_balance, "opening_balance")
    if amount < 0:
        raise ValidationError("El saldo inicial no puede ser negativo")

    if get_open_session(db):
        logger.warning("Intento de abrir caja con otra ya abierta")
        raise SessionAlreadyOpenError()

    session = CashRegister(
        opening_balance=amount,
        status=CashRegisterStatus.OPEN,
        notes=notes,
    )
    db.add(session)
    try:
        db.commit()
    except IntegrityError:
        # Otra petición abrió caja entre la comprobación y el INSERT (índice único parcial)
        db.rollback()
        logger.warning("Apertura concurrente rechazada por el índice de caja única")
        raise SessionAlreadyOpenError()

    db.refresh(session)
    logger.info("Caja #%s abierta con fondo %s", session.id, amount)
    return session


def _claim_open_session(db: Session, session_id: int, closed_error) -> CashRegister:
    """
    Bloquea la fila de la caja si sigue ABIERTA. Si está cerrada lanza
    `closed_error` sin haber escrito nada.
    """
    result = db.execute(
        update(CashRegister)
        .where(CashRegister.id == session_id, CashRegister.status == CashRegisterStatus.OPEN)
        .values(updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        exists = db.query(CashRegister.id).filter(CashRegister.id == session_id).first() is not None
        db.rollback()
        if not exists:
            raise NotFoundError("Caja no encontrada")
        logger.warning("Operación rechazada: la caja #%s ya está cerrada", session_id)
        raise closed_error()

    session = db.get(CashRegister, session_id)
    db.expire(session)  # releer estado y movimientos dentro del bloqueo
    return session


def add_movement(
    db: Session,
    session_id: int,
    user_id: int,
    kind,
    amount,
    category: str,
    description: str,
    reference: Optional[str] = None,
) -> CashMovement:
    try:
        kind = CashMovementType(kind)
    except ValueError:
        raise ValidationError(f"Tipo de movimiento inválido: {kind!r}")

    value = to_money(amount, "amount")
    if value <= 0:
        raise ValidationError("El importe del movimiento debe ser mayor a cero")
    if not category or not category.strip():
        raise ValidationError("La categoría es obligatoria")
    if not description or not description.strip():
        raise ValidationError("La descripción es obligatoria")

    _claim_open_session(db, session_id, SessionClosedError)

    movement = CashMovement(
        cash_register_id=session_id,
        user_id=user_id,
        type=kind,
        amount=value,
        category=category.strip(),
        description=description.strip(),
        reference=reference,
    )
    db.add(movement)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(movement)
    logger.info("Movimiento %s de %s en caja #%s", kind.value, value, session_id)
    return movement


def close_session(db: Session, session_id: int, closing_balance, notes: Optional[str] = None) -> CashRegister:
    counted = to_money(closing_balance, "closing_balance")
    if counted < 0:
        raise ValidationError("El efectivo contado no puede ser negativo")

    session = _claim_open_session(db, session_id, AlreadyClosedError)

    try:
        expected = compute_expected_balance(session.opening_balance, session.movements)

        session.expected_balance = expected
        session.difference = compute_variance(counted, expected)
        session.closing_balance = counted
        session.status = CashRegisterStatus.CLOSED
        session.closed_at = datetime.utcnow()
        if notes is not None:
            session.notes = notes

        db.commit()
    except Exception:
        # La caja sigue ABIERTA para reintentar
        db.rollback()
        raise

    db.refresh(session)
    logger.info(
        "Caja #%s cerrada. Esperado: %s, contado: %s, diferencia: %s",
        session.id, session.expected_balance, session.closing_balance, session.difference,
    )
    return session
