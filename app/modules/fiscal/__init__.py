"""
Módulo Fiscal - Mostrador

Datos fiscales de la organización frente a ARCA:

- Configuración fiscal (CUIT, condición IVA, agentes, delegación del web service)
- Puntos de venta fiscales (número único por organización)
- Tipos de comprobante (Factura A/B/C, Nota de Crédito, Comprobante X)
- Numeración correlativa de documentos por punto de venta

Tablas principales:
- fiscal_configs: Datos fiscales (uno por organización)
- fiscal_points_of_sale: Puntos de venta
- document_sequences: Secuencias de numeración por punto de venta y tipo
"""

from .models import FiscalConfig, FiscalPointOfSale, DocumentSequence, DocumentType
from .vouchers import (
    VoucherType, determine_voucher_type, get_available_voucher_types,
    is_fiscal_voucher, get_voucher_display_name
)
from .service import FiscalConfigService, FiscalPointOfSaleService, DocumentNumberingService
from .router import fiscal_router

__all__ = [
    "FiscalConfig", "FiscalPointOfSale", "DocumentSequence", "DocumentType",
    "VoucherType", "determine_voucher_type", "get_available_voucher_types",
    "is_fiscal_voucher", "get_voucher_display_name",
    "FiscalConfigService", "FiscalPointOfSaleService", "DocumentNumberingService",
    "fiscal_router",
]
