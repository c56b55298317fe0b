"""
Utilidades de moneda para importes en pesos argentinos (ARS)

Los importes llegan desde formularios con formato local
(punto como separador de miles y coma decimal) y se devuelven
formateados de la misma manera para tickets y respuestas.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")


def to_decimal(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Convierte cualquier valor numérico a Decimal sin arrastrar errores de float."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Redondeo comercial a 2 decimales (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_argentine_currency(value: str) -> Decimal:
    """
    Parsea un string de monto en formato argentino.

    Ejemplos válidos:
    - "4220,40"   → 4220.40
    - "4.220,40"  → 4220.40
    - "4220"      → 4220
    - "$4.220,40" → 4220.40
    - "4220.40"   → 4220.40 (un solo punto con hasta 2 decimales)
    - "4.220"     → 4220    (un solo punto con 3 dígitos = miles)

    Entradas vacías o inválidas devuelven 0.
    """
    if not value:
        return Decimal("0")

    cleaned = re.sub(r"[$\s]", "", value)

    if "." in cleaned and "," in cleaned:
        # Punto = miles, coma = decimal
        cleaned = cleaned.replace(".", "").replace(",", ".")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".")
    elif "." in cleaned:
        parts = cleaned.split(".")
        if len(parts) > 2:
            cleaned = cleaned.replace(".", "")
        elif len(parts[1]) > 2:
            cleaned = cleaned.replace(".", "")

    try:
        parsed = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")
    return parsed if parsed.is_finite() else Decimal("0")


def format_argentine_currency(value: Union[Decimal, int, float, str]) -> str:
    """
    Formatea un número como moneda argentina.
    4220.40 → "$4.220,40"
    """
    amount = round_money(value)
    sign = "-" if amount < 0 else ""
    integer, decimals = f"{abs(amount):.2f}".split(".")
    integer = f"{int(integer):,}".replace(",", ".")
    return f"{sign}${integer},{decimals}"
