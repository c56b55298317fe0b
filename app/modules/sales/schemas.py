"""
Esquemas Pydantic para el módulo de Ventas

Define la validación de datos de entrada y salida para:
- Carrito: ítems, descuentos y totales calculados
- Listas de precios del cliente
- Pagos divididos (split payments)
- Checkout y consulta de ventas
- Presupuestos guardados
- Vendedores y medios de pago
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime
from enum import Enum

from app.core.config import settings
from app.modules.fiscal.vouchers import VoucherType
from app.modules.customers.models import PriceAdjustmentType, PriceRounding
from app.modules.sales.models import SaleStatus, PaymentMethodType, PaymentMethodAvailability, QuoteStatus


# ===== ENUMS =====

class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# ===== CART SCHEMAS =====

class Discount(BaseModel):
    """Descuento por porcentaje o por monto fijo (por unidad en ítems, total en carrito)"""
    type: DiscountType
    value: Decimal = Field(..., ge=0)


class CartItem(BaseModel):
    product_id: Optional[UUID] = None
    sku: Optional[str] = Field(None, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, description="Precio unitario con IVA incluido")
    base_price: Optional[Decimal] = Field(None, ge=0, description="Precio de lista antes del ajuste del cliente")
    quantity: Decimal = Field(..., gt=0)
    discount: Optional[Discount] = None
    tax_rate: Decimal = Field(default=settings.DEFAULT_TAX_RATE, ge=0, le=100, description="Alícuota de IVA (%)")


class TaxBreakdown(BaseModel):
    tax_rate: Decimal
    base_amount: Decimal
    tax_amount: Decimal


class CartTotals(BaseModel):
    subtotal: Decimal
    item_discounts: Decimal
    global_discount: Decimal
    global_discount_capped: bool = False
    taxes: Decimal
    tax_breakdown: List[TaxBreakdown] = []
    total: Decimal


class CartQuoteRequest(BaseModel):
    items: List[CartItem] = Field(..., min_length=1)
    global_discount: Optional[Discount] = None
    seller_id: Optional[UUID] = None


class CustomerPriceList(BaseModel):
    """Lista de precios del cliente (ajuste porcentual y redondeo)"""
    adjustment_type: Optional[PriceAdjustmentType] = None
    adjustment_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    price_rounding: PriceRounding = PriceRounding.NONE

    class Config:
        from_attributes = True


class CartRepriceRequest(BaseModel):
    """Se indica el cliente (se usa su lista asignada) o una lista explícita"""
    items: List[CartItem] = Field(..., min_length=1)
    customer_id: Optional[UUID] = None
    price_list: Optional[CustomerPriceList] = None

    @model_validator(mode='after')
    def validate_source(self):
        if self.customer_id is None and self.price_list is None:
            raise ValueError('Indique el cliente o la lista de precios')
        return self


class CartRepriceResponse(BaseModel):
    items: List[CartItem]
    price_list_id: Optional[UUID] = None


# ===== SPLIT PAYMENT SCHEMAS =====

class SplitPaymentIn(BaseModel):
    method_id: Optional[UUID] = None
    method_name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal
    reference: Optional[str] = Field(None, max_length=100)


class SplitPaymentValidationRequest(BaseModel):
    total: Decimal = Field(..., ge=0)
    payments: List[SplitPaymentIn]


class SplitPaymentStep(BaseModel):
    index: int
    method_name: str
    amount: Decimal
    accepted: bool
    remaining: Decimal
    error: Optional[str] = None


class SplitPaymentValidationResult(BaseModel):
    total: Decimal
    total_paid: Decimal
    remaining: Decimal
    is_complete: bool
    rejected_index: Optional[int] = None
    steps: List[SplitPaymentStep]


# ===== CHECKOUT SCHEMAS =====

class CheckoutRequest(BaseModel):
    """Esquema para confirmar una venta"""
    items: List[CartItem] = Field(..., min_length=1)
    global_discount: Optional[Discount] = None
    seller_id: Optional[UUID] = None
    customer_id: Optional[UUID] = Field(None, description="Sin cliente se vende a Consumidor Final")
    location_id: Optional[UUID] = Field(None, description="Sucursal o depósito de la venta")
    voucher_type: Optional[VoucherType] = Field(None, description="Si se omite se usa el sugerido")
    point_of_sale: int = Field(default=settings.DEFAULT_POINT_OF_SALE, ge=1, le=99999)
    status: SaleStatus = SaleStatus.COMPLETED
    payments: List[SplitPaymentIn] = []
    sale_date: Optional[date] = None
    due_days: int = Field(default=30, ge=0, le=365, description="Días de vencimiento para cuenta corriente")
    cash_tendered: Optional[Decimal] = Field(None, ge=0, description="Efectivo entregado, para calcular el vuelto")
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode='after')
    def validate_status(self):
        if self.status == SaleStatus.CANCELLED:
            raise ValueError('No se puede crear una venta anulada')
        if self.status == SaleStatus.PENDING and self.customer_id is None:
            raise ValueError('Las ventas en cuenta corriente requieren un cliente')
        return self


class SaleItemOut(BaseModel):
    id: UUID
    product_id: Optional[UUID] = None
    sku: Optional[str] = None
    name: str
    quantity: Decimal
    unit_price: Decimal
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = None
    discount_amount: Decimal
    tax_rate: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True


class SalePaymentOut(BaseModel):
    id: UUID
    payment_method_id: Optional[UUID] = None
    method_name: str
    amount: Decimal
    fee_amount: Decimal
    reference: Optional[str] = None
    receipt_number: Optional[str] = None
    payment_date: date

    class Config:
        from_attributes = True


class SaleOut(BaseModel):
    id: UUID
    number: str
    voucher_type: str
    point_of_sale: int
    status: SaleStatus
    sale_date: date
    due_date: Optional[date] = None
    customer_id: Optional[UUID] = None
    seller_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    subtotal: Decimal
    item_discounts: Decimal
    global_discount: Decimal
    taxes: Decimal
    total: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SaleDetail(SaleOut):
    items: List[SaleItemOut] = []
    payments: List[SalePaymentOut] = []
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None


class CheckoutResponse(BaseModel):
    sale: SaleDetail
    change: Decimal = Decimal("0.00")


class SaleList(BaseModel):
    sales: List[SaleOut]
    total: int
    limit: int
    offset: int


class SaleNotesUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class SaleCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class SalePaymentCreate(BaseModel):
    """Cobro de saldo de una venta en cuenta corriente"""
    method_id: Optional[UUID] = None
    method_name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)
    reference: Optional[str] = Field(None, max_length=100)
    payment_date: Optional[date] = None


# ===== QUOTE SCHEMAS =====

class QuoteCreate(BaseModel):
    """Presupuesto: guarda el carrito y sus totales sin registrar la venta"""
    items: List[CartItem] = Field(..., min_length=1)
    global_discount: Optional[Discount] = None
    seller_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = Field(None, max_length=200, description="Sin cliente registrado")
    location_id: Optional[UUID] = None
    point_of_sale: int = Field(default=settings.DEFAULT_POINT_OF_SALE, ge=1, le=99999)
    quote_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class QuoteOut(BaseModel):
    id: UUID
    number: str
    point_of_sale: int
    status: QuoteStatus
    quote_date: date
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    seller_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    items: List[CartItem]
    global_discount: Optional[Discount] = None
    subtotal: Decimal
    discount: Decimal
    taxes: Decimal
    total: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuoteList(BaseModel):
    quotes: List[QuoteOut]
    total: int
    limit: int
    offset: int


# ===== SELLER SCHEMAS =====

class SellerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    max_discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('El nombre no puede estar vacío')
        return cleaned


class SellerOut(BaseModel):
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    max_discount_percentage: Decimal
    is_active: bool

    class Config:
        from_attributes = True


class SellerList(BaseModel):
    sellers: List[SellerOut]
    total: int


# ===== PAYMENT METHOD SCHEMAS =====

class PaymentMethodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: PaymentMethodType
    fee_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    fee_fixed: Decimal = Field(default=Decimal("0"), ge=0)
    requires_reference: bool = False
    availability: PaymentMethodAvailability = PaymentMethodAvailability.VENTAS_Y_COMPRAS


class PaymentMethodOut(BaseModel):
    id: UUID
    name: str
    type: PaymentMethodType
    fee_percentage: Decimal
    fee_fixed: Decimal
    requires_reference: bool
    availability: PaymentMethodAvailability
    is_active: bool

    class Config:
        from_attributes = True


class PaymentMethodList(BaseModel):
    payment_methods: List[PaymentMethodOut]
    total: int
