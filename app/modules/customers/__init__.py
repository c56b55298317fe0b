"""
Módulo de Clientes - Mostrador

- Clientes con condición IVA y documento (DNI o CUIT/CUIL validado)
- Listas de precios asignables a clientes

Tablas principales:
- customers: Clientes
- price_lists: Listas de precios
"""

from .models import Customer, PriceList, PriceAdjustmentType, PriceRounding
from .service import CustomerService, PriceListService
from .router import customers_router, price_lists_router

__all__ = [
    "Customer", "PriceList", "PriceAdjustmentType", "PriceRounding",
    "CustomerService", "PriceListService",
    "customers_router", "price_lists_router",
]
