from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from enum import Enum

from app.common.validators import validate_cuit, format_cuit
from app.modules.customers.models import PriceAdjustmentType, PriceRounding, TaxIdType


class TaxCategory(str, Enum):
    RESPONSABLE_INSCRIPTO = "Responsable Inscripto"
    CONSUMIDOR_FINAL = "Consumidor Final"
    MONOTRIBUTISTA = "Monotributista"
    EXENTO = "Exento"
    IVA_NO_ALCANZADO = "IVA no alcanzado"


def clean_name(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError('El nombre no puede estar vacío')
    return cleaned


# ===== PRICE LIST SCHEMAS =====

class PriceListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    adjustment_type: PriceAdjustmentType = PriceAdjustmentType.AUMENTO
    adjustment_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    price_rounding: PriceRounding = PriceRounding.NONE

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)


class PriceListOut(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    adjustment_type: PriceAdjustmentType
    adjustment_percentage: Decimal
    price_rounding: PriceRounding
    is_active: bool

    class Config:
        from_attributes = True


class PriceListList(BaseModel):
    price_lists: List[PriceListOut]
    total: int


# ===== CUSTOMER SCHEMAS =====

class CustomerBase(BaseModel):
    trade_name: Optional[str] = Field(None, max_length=200)
    tax_id: Optional[str] = Field(None, max_length=20, description="DNI o CUIT/CUIL")
    tax_id_type: TaxIdType = TaxIdType.DNI
    tax_category: TaxCategory = TaxCategory.CONSUMIDOR_FINAL
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    price_list_id: Optional[UUID] = None
    payment_terms: Optional[int] = Field(None, ge=0, le=365, description="Días de plazo de pago")
    notes: Optional[str] = Field(None, max_length=1000)


class CustomerCreate(CustomerBase):
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)

    @model_validator(mode='after')
    def validate_tax_id(self):
        if self.tax_id is None or self.tax_id.strip() == "":
            self.tax_id = None
        elif self.tax_id_type == TaxIdType.CUIT:
            if not validate_cuit(self.tax_id):
                raise ValueError('CUIT inválido')
            self.tax_id = format_cuit(self.tax_id)
        else:
            self.tax_id = self.tax_id.strip()
        return self


class CustomerUpdate(BaseModel):
    """Actualización parcial. El documento no se modifica desde aquí."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    trade_name: Optional[str] = Field(None, max_length=200)
    tax_category: Optional[TaxCategory] = None
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    price_list_id: Optional[UUID] = None
    payment_terms: Optional[int] = Field(None, ge=0, le=365)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator('name', 'tax_category', mode='before')
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError('El campo no puede ser nulo')
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)


class CustomerOut(CustomerBase):
    id: UUID
    name: str
    tax_category: str
    is_active: bool

    class Config:
        from_attributes = True


class CustomerList(BaseModel):
    customers: List[CustomerOut]
    total: int
    limit: int
    offset: int
