"""
Helper para tipos de comprobante fiscal

Reglas de ARCA para elegir el comprobante según la condición frente al IVA
del emisor (la organización) y del receptor (el cliente). Funciones puras,
usadas por el checkout de ventas y por el endpoint de tipos disponibles.
"""

from enum import Enum
from typing import List, Optional


class VoucherType(str, Enum):
    COMPROBANTE_X = "COMPROBANTE_X"  # Comprobante interno, no fiscal
    FACTURA_A = "FACTURA_A"
    FACTURA_B = "FACTURA_B"
    FACTURA_C = "FACTURA_C"
    NC_A = "NC_A"  # Nota de crédito A
    NC_B = "NC_B"
    NC_C = "NC_C"


VOUCHER_DISPLAY_NAMES = {
    VoucherType.COMPROBANTE_X.value: "Comprobante X",
    VoucherType.FACTURA_A.value: "Factura A",
    VoucherType.FACTURA_B.value: "Factura B",
    VoucherType.FACTURA_C.value: "Factura C",
    VoucherType.NC_A.value: "Nota de Crédito A",
    VoucherType.NC_B.value: "Nota de Crédito B",
    VoucherType.NC_C.value: "Nota de Crédito C",
}


def _is_responsable_inscripto(condition: str) -> bool:
    return "responsable inscripto" in condition or condition == "ri"


def determine_voucher_type(
    issuer_vat_condition: str,
    receiver_tax_category: Optional[str] = None
) -> str:
    """
    Determinar el comprobante fiscal según emisor y receptor

    Reglas ARCA:
    - Emisor RI → Receptor RI = Factura A
    - Emisor RI → Receptor otro = Factura B
    - Emisor Monotributista o Exento → siempre Factura C
    - Cualquier otro emisor → Factura C
    """
    issuer = (issuer_vat_condition or "").strip().lower()

    if "monotribut" in issuer or "exento" in issuer:
        return VoucherType.FACTURA_C.value

    if _is_responsable_inscripto(issuer):
        receiver = (receiver_tax_category or "").strip().lower()
        if _is_responsable_inscripto(receiver):
            return VoucherType.FACTURA_A.value
        return VoucherType.FACTURA_B.value

    return VoucherType.FACTURA_C.value


def get_available_voucher_types(
    issuer_vat_condition: str,
    receiver_tax_category: Optional[str] = None
) -> List[str]:
    """Tipos disponibles para la combinación emisor/receptor. Siempre incluye COMPROBANTE_X."""
    fiscal_type = determine_voucher_type(issuer_vat_condition, receiver_tax_category)
    return [VoucherType.COMPROBANTE_X.value, fiscal_type]


def is_fiscal_voucher(voucher_type: str) -> bool:
    """Un comprobante es fiscal (requiere CAE) si es factura o nota de crédito."""
    return voucher_type.startswith("FACTURA_") or voucher_type.startswith("NC_")


def get_voucher_display_name(voucher_type: str) -> str:
    return VOUCHER_DISPLAY_NAMES.get(voucher_type, voucher_type)
