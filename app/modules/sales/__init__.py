"""
Módulo de Ventas - Mostrador

Punto de venta para comercios argentinos:

- Cálculo del carrito: descuentos por ítem, descuento global con tope por vendedor, IVA contenido
- Listas de precios por cliente (aumento/descuento y redondeo)
- Presupuestos numerados (PRE)
- Pagos divididos entre varios medios de pago
- Checkout con comprobante (X / Factura A, B, C) y numeración por punto de venta
- Cuenta corriente: ventas pendientes con vencimiento y cobros parciales

Tablas principales:
- sales: Ventas
- sale_items: Ítems de venta
- sale_payments: Pagos de la venta
- sellers: Vendedores
- payment_methods: Medios de pago
- quotes: Presupuestos
"""

from .models import Sale, SaleItem, SalePayment, Seller, PaymentMethod, SaleStatus, Quote, QuoteStatus
from .calculator import calculate_item_discount, calculate_item_total, calculate_cart_totals
from .payments import SplitPaymentSession
from .service import SalesService, SellerService, PaymentMethodService
from .router import sales_router

__all__ = [
    "Sale", "SaleItem", "SalePayment", "Seller", "PaymentMethod", "SaleStatus", "Quote", "QuoteStatus",
    "calculate_item_discount", "calculate_item_total", "calculate_cart_totals",
    "SplitPaymentSession",
    "SalesService", "SellerService", "PaymentMethodService",
    "sales_router",
]
