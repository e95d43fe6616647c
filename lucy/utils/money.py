from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from lucy.errors import ValidationError

CENT = Decimal("0.01")


def to_decimal(value, field: str = "importe") -> Decimal:
    """
    Convierte a Decimal sin pasar por float binario.
    Los float se convierten vía str() para no arrastrar 0.1 + 0.2 = 0.30000000000000004.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"El campo '{field}' es obligatorio")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"El campo '{field}' no es un número válido: {value!r}")
    if not number.is_finite():
        raise ValidationError(f"El campo '{field}' no es un número válido: {value!r}")
    return number


def quantize_money(value: Decimal) -> Decimal:
    """Redondea a céntimos (mitad hacia arriba)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value, field: str = "importe") -> Decimal:
    """
    Importe monetario con como mucho dos decimales, devuelto en céntimos.
    No se redondea en silencio: 0.005 se rechaza.
    """
    number = to_decimal(value, field)
    try:
        cents = number.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(f"El campo '{field}' no es un importe válido: {value!r}")
    if cents != number:
        raise ValidationError(f"El campo '{field}' admite como mucho dos decimales: {value!r}")
    return cents
