"""
Validadores específicos para Argentina
"""
import re
from typing import Optional


CUIT_WEIGHTS = [5, 4, 3, 2, 7, 6, 5, 4, 3, 2]

# Prefijos asignados por ARCA: personas físicas (20, 23, 24, 25, 26, 27) y jurídicas (30, 33, 34)
CUIT_PREFIXES = ("20", "23", "24", "25", "26", "27", "30", "33", "34")


def clean_cuit(cuit: str) -> str:
    """Quita guiones, puntos y espacios de un CUIT/CUIL."""
    return re.sub(r'[\.\s\-]', '', cuit or "")


def calculate_cuit_check_digit(base: str) -> Optional[int]:
    """
    Calcular dígito verificador de CUIT/CUIL.

    Algoritmo módulo 11 de ARCA sobre los 10 primeros dígitos:
    - Suma ponderada con pesos 5,4,3,2,7,6,5,4,3,2
    - resto = suma % 11
    - DV = 11 - resto; si da 11 el DV es 0; si da 10 el número no es válido
    """
    cleaned = clean_cuit(base)
    if not cleaned.isdigit() or len(cleaned) != 10:
        return None

    total = sum(int(digit) * weight for digit, weight in zip(cleaned, CUIT_WEIGHTS))
    check = 11 - (total % 11)

    if check == 11:
        return 0
    if check == 10:
        return None
    return check


def validate_cuit(cuit: str) -> bool:
    """
    Valida CUIT/CUIL argentino.
    Formatos válidos:
    - XX-XXXXXXXX-X
    - XXXXXXXXXXX (11 dígitos)
    """
    cleaned = clean_cuit(cuit)

    if not cleaned.isdigit() or len(cleaned) != 11:
        return False

    if not cleaned.startswith(CUIT_PREFIXES):
        return False

    expected = calculate_cuit_check_digit(cleaned[:10])
    if expected is None:
        return False

    return int(cleaned[10]) == expected


def format_cuit(cuit: str) -> str:
    """
    Formatea CUIT al formato estándar XX-XXXXXXXX-X
    """
    cleaned = clean_cuit(cuit)
    if len(cleaned) != 11 or not cleaned.isdigit():
        return cuit  # Retorna sin cambios si no es válido
    return f"{cleaned[:2]}-{cleaned[2:10]}-{cleaned[10]}"
