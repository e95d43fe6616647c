# lucy/errors.py
"""
Errores de negocio. Cada uno lleva un `code` estable para que la UI pueda
mostrar la acción correctiva adecuada, y el status HTTP con el que se responde.
"""

from typing import Optional


class LucyError(Exception):
    """Base de todos los errores de la app."""

    code = "error"
    status_code = 400
    default_message = "Error de negocio"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LucyError):
    code = "validation_error"
    status_code = 400
    default_message = "Datos inválidos"


class NotFoundError(LucyError):
    code = "not_found"
    status_code = 404
    default_message = "Recurso no encontrado"


class AuthenticationError(LucyError):
    code = "authentication_failed"
    status_code = 401
    default_message = "Credenciales no válidas"


# --- Invariantes (409) ---

class InvariantViolation(LucyError):
    code = "invariant_violation"
    status_code = 409


class SessionAlreadyOpenError(InvariantViolation):
    code = "cash_session_already_open"
    default_message = "Ya hay una caja abierta. Ciérrala antes de abrir una nueva."


class AlreadyClosedError(InvariantViolation):
    code = "cash_session_already_closed"
    default_message = "La caja ya está cerrada."


class SessionClosedError(InvariantViolation):
    code = "cash_session_closed"
    default_message = "No se pueden añadir movimientos a una caja cerrada."


class InsufficientStockError(InvariantViolation):
    code = "insufficient_stock"
    default_message = "Stock insuficiente."
