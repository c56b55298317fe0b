"""
Módulo de Compras - Mostrador

Registro de compras a proveedores:

- Proveedores con CUIT validado
- Compras desde el comprobante del proveedor, con control de duplicados
- Numeración interna correlativa (CMP)

Tablas principales:
- suppliers: Proveedores
- purchases: Compras
- purchase_items: Ítems de compra
"""

from .models import Supplier, Purchase, PurchaseItem, PurchaseStatus
from .service import SupplierService, PurchaseService, calculate_purchase_totals
from .router import suppliers_router, purchases_router

__all__ = [
    "Supplier", "Purchase", "PurchaseItem", "PurchaseStatus",
    "SupplierService", "PurchaseService", "calculate_purchase_totals",
    "suppliers_router", "purchases_router",
]
