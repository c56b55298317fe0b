from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from app.database.database import get_db
from app.dependencies.organizationDependencies import TenantId
from app.core.config import settings
from app.modules.fiscal.vouchers import VoucherType
from app.modules.sales.service import SalesService, SellerService, PaymentMethodService
from app.modules.sales.schemas import (
    CartQuoteRequest, CartTotals, CartRepriceRequest, CartRepriceResponse,
    SplitPaymentValidationRequest, SplitPaymentValidationResult,
    CheckoutRequest, CheckoutResponse, SaleDetail, SaleList, SaleNotesUpdate, SaleCancel,
    SalePaymentCreate, QuoteCreate, QuoteOut, QuoteList, SellerCreate, SellerOut, SellerList,
    PaymentMethodCreate, PaymentMethodOut, PaymentMethodList, SaleStatus
)

sales_router = APIRouter(prefix="/sales", tags=["Sales"])


# ===== CARRITO =====

@sales_router.post("/quote", response_model=CartTotals)
def quote_cart(
    data: CartQuoteRequest,
    tenant_id: TenantId,
    db: Session = Depends(get_db)
):
    """
    Calcular totales del carrito sin registrar la venta

    - Descuentos por ítem antes del descuento global
    - El descuento global se limita al máximo del vendedor (o de la organización)
    - IVA contenido informado por alícuota
    """
    service = SalesService(db)
    return service.quote(data, tenant_id)


@sales_router.post("/cart/reprice", response_model=CartRepriceResponse)
def reprice_cart(data: CartRepriceRequest, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Aplicar la lista de precios del cliente o una lista indicada (aumento/descuento y redondeo)"""
    service = SalesService(db)
    return service.reprice(data, tenant_id)


@sales_router.post("/split-payments/validate", response_model=SplitPaymentValidationResult)
def validate_split_payments(data: SplitPaymentValidationRequest, tenant_id: TenantId):
    """Validar una secuencia de pagos parciales contra un total"""
    return SalesService.validate_split_payments(data)


# ===== VENDEDORES =====

@sales_router.post("/sellers", response_model=SellerOut, status_code=status.HTTP_201_CREATED)
def create_seller(data: SellerCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Crear vendedor con su porcentaje máximo de descuento"""
    service = SellerService(db)
    return service.create_seller(data, tenant_id)


@sales_router.get("/sellers", response_model=SellerList)
def list_sellers(
    tenant_id: TenantId,
    active_only: bool = Query(True),
    db: Session = Depends(get_db)
):
    service = SellerService(db)
    return service.list_sellers(tenant_id, active_only)


# ===== MEDIOS DE PAGO =====

@sales_router.post("/payment-methods", response_model=PaymentMethodOut, status_code=status.HTTP_201_CREATED)
def create_payment_method(data: PaymentMethodCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Crear medio de pago con comisión porcentual y fija"""
    service = PaymentMethodService(db)
    return service.create_payment_method(data, tenant_id)


@sales_router.get("/payment-methods", response_model=PaymentMethodList)
def list_payment_methods(
    tenant_id: TenantId,
    for_sales: bool = Query(False, description="Solo medios habilitados para ventas"),
    db: Session = Depends(get_db)
):
    service = PaymentMethodService(db)
    return service.list_payment_methods(tenant_id, for_sales)


# ===== PRESUPUESTOS =====

@sales_router.post("/quotes", response_model=QuoteOut, status_code=status.HTTP_201_CREATED)
def create_quote(data: QuoteCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Guardar presupuesto numerado (PRE) con los totales del carrito"""
    service = SalesService(db)
    return service.create_quote(data, tenant_id)


@sales_router.get("/quotes", response_model=QuoteList)
def list_quotes(
    tenant_id: TenantId,
    search: Optional[str] = Query(None, description="Buscar por número o cliente"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = SalesService(db)
    return service.list_quotes(tenant_id, search, date_from, date_to, limit, offset)


@sales_router.get("/quotes/{quote_id}", response_model=QuoteOut)
def get_quote(quote_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SalesService(db)
    return service.get_quote(quote_id, tenant_id)


@sales_router.delete("/quotes/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quote(quote_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Eliminar presupuesto (baja lógica)"""
    service = SalesService(db)
    service.delete_quote(quote_id, tenant_id)


# ===== VENTAS =====

@sales_router.post("/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout(data: CheckoutRequest, tenant_id: TenantId, db: Session = Depends(get_db)):
    """
    Confirmar una venta

    Venta completada: los pagos deben cubrir el total (tolerancia 0.01).
    Cuenta corriente: requiere cliente, admite pago parcial y calcula vencimiento.
    """
    service = SalesService(db)
    return service.checkout(data, tenant_id)


@sales_router.get("", response_model=SaleList)
def list_sales(
    tenant_id: TenantId,
    status_filter: Optional[SaleStatus] = Query(None, alias="status"),
    voucher_type: Optional[VoucherType] = Query(None),
    seller_id: Optional[UUID] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Listar ventas con filtros por estado, comprobante, vendedor y fechas"""
    service = SalesService(db)
    return service.list_sales(
        tenant_id, status_filter,
        voucher_type.value if voucher_type else None,
        seller_id, date_from, date_to, limit, offset
    )


@sales_router.get("/{sale_id}", response_model=SaleDetail)
def get_sale(sale_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SalesService(db)
    return service.get_sale(sale_id, tenant_id)


@sales_router.patch("/{sale_id}/notes", response_model=SaleDetail)
def update_sale_notes(sale_id: UUID, data: SaleNotesUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SalesService(db)
    return service.update_notes(sale_id, data, tenant_id)


@sales_router.post("/{sale_id}/cancel", response_model=SaleDetail)
def cancel_sale(sale_id: UUID, data: SaleCancel, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Anular venta. Solo ventas completadas o en cuenta corriente."""
    service = SalesService(db)
    return service.cancel_sale(sale_id, data, tenant_id)


@sales_router.post("/{sale_id}/payments", response_model=SaleDetail)
def add_sale_payment(sale_id: UUID, data: SalePaymentCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Registrar un cobro sobre una venta en cuenta corriente"""
    service = SalesService(db)
    return service.add_payment(sale_id, data, tenant_id)
