from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime

from app.common.validators import validate_cuit, format_cuit
from app.modules.purchases.models import PurchaseStatus, PurchaseItemType


# ===== SUPPLIER SCHEMAS =====

class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    tax_id: Optional[str] = Field(None, description="CUIT del proveedor")
    tax_category: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('El nombre no puede estar vacío')
        return cleaned

    @field_validator('tax_id')
    @classmethod
    def validate_tax_id(cls, v):
        if v is None or v.strip() == "":
            return None
        if not validate_cuit(v):
            raise ValueError('CUIT inválido')
        return format_cuit(v)


class SupplierOut(BaseModel):
    id: UUID
    name: str
    tax_id: Optional[str] = None
    tax_category: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class SupplierList(BaseModel):
    suppliers: List[SupplierOut]
    total: int


# ===== PURCHASE SCHEMAS =====

def clean_voucher_number(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("El número de comprobante no puede estar vacío")
    return cleaned


class PurchaseItemCreate(BaseModel):
    product_id: Optional[UUID] = None
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=50)
    type: PurchaseItemType = PurchaseItemType.PRODUCT
    quantity: Decimal = Field(..., gt=0)
    unit_cost: Decimal = Field(..., ge=0)


class PurchaseCreate(BaseModel):
    supplier_id: UUID
    location_id: Optional[UUID] = None
    voucher_type: str = Field(..., min_length=1, max_length=20)
    voucher_number: str = Field(..., min_length=1, max_length=50)
    tax_category: Optional[str] = Field(None, max_length=50)
    invoice_date: date
    due_date: Optional[date] = None
    accounting_date: Optional[date] = None
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    status: PurchaseStatus = PurchaseStatus.COMPLETED
    notes: Optional[str] = Field(None, max_length=1000)
    attachment_key: Optional[str] = Field(None, max_length=500)
    items: List[PurchaseItemCreate] = Field(..., min_length=1)

    @field_validator('voucher_number')
    @classmethod
    def validate_voucher_number(cls, v: str) -> str:
        return clean_voucher_number(v)

    @model_validator(mode='after')
    def validate_dates(self):
        if self.status == PurchaseStatus.CANCELLED:
            raise ValueError('No se puede registrar una compra anulada')
        if self.due_date and self.due_date < self.invoice_date:
            raise ValueError('La fecha de vencimiento no puede ser anterior a la fecha de la factura')
        return self


class PurchaseUpdate(BaseModel):
    location_id: Optional[UUID] = None
    voucher_type: Optional[str] = Field(None, min_length=1, max_length=20)
    voucher_number: Optional[str] = Field(None, min_length=1, max_length=50)
    tax_category: Optional[str] = Field(None, max_length=50)
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    accounting_date: Optional[date] = None
    discount: Optional[Decimal] = Field(None, ge=0)
    tax: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=1000)
    attachment_key: Optional[str] = Field(None, max_length=500)
    items: Optional[List[PurchaseItemCreate]] = Field(None, min_length=1)

    @field_validator('voucher_type', 'voucher_number', 'invoice_date', mode='before')
    @classmethod
    def reject_null(cls, v):
        # Se pueden omitir, pero no vaciar: son obligatorios en la compra
        if v is None:
            raise ValueError('El campo no puede ser nulo')
        return v

    @field_validator('voucher_number')
    @classmethod
    def validate_voucher_number(cls, v: str) -> str:
        return clean_voucher_number(v)

    @model_validator(mode='after')
    def validate_dates(self):
        if self.due_date and self.invoice_date and self.due_date < self.invoice_date:
            raise ValueError('La fecha de vencimiento no puede ser anterior a la fecha de la factura')
        return self


class PurchaseNotesUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class PurchaseItemOut(BaseModel):
    id: UUID
    product_id: Optional[UUID] = None
    name: str
    sku: Optional[str] = None
    type: PurchaseItemType
    quantity: Decimal
    unit_cost: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class PurchaseOut(BaseModel):
    id: UUID
    purchase_number: str
    supplier_id: UUID
    location_id: Optional[UUID] = None
    voucher_type: str
    voucher_number: str
    tax_category: Optional[str] = None
    invoice_date: date
    due_date: Optional[date] = None
    accounting_date: Optional[date] = None
    status: PurchaseStatus
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    notes: Optional[str] = None
    attachment_key: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PurchaseDetail(PurchaseOut):
    supplier: Optional[SupplierOut] = None
    items: List[PurchaseItemOut] = []


class PurchaseList(BaseModel):
    purchases: List[PurchaseOut]
    total: int
    limit: int
    offset: int


class PurchaseTotals(BaseModel):
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
