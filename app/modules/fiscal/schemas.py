from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from uuid import UUID
from enum import Enum
from datetime import date, datetime

from app.common.validators import validate_cuit, format_cuit
from app.modules.fiscal.vouchers import VoucherType
from app.modules.fiscal.models import DocumentType


class VatCondition(str, Enum):
    RESPONSABLE_INSCRIPTO = "Responsable Inscripto"
    MONOTRIBUTISTA = "Monotributista"
    EXENTO = "Exento"


# ===== FISCAL CONFIG SCHEMAS =====

class FiscalConfigSave(BaseModel):
    cuit: str = Field(..., description="CUIT de la organización (XX-XXXXXXXX-X)")
    legal_name: str = Field(..., min_length=1, max_length=200, description="Razón social")
    vat_condition: VatCondition = Field(..., description="Condición frente al IVA")
    legal_entity_type: Optional[str] = Field(None, max_length=20, description="Persona física o jurídica")
    fiscal_address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=10)
    activity_start_date: Optional[date] = None
    gross_income_number: Optional[str] = Field(None, max_length=50, description="Número de Ingresos Brutos")

    @field_validator('cuit')
    @classmethod
    def validate_cuit_number(cls, v):
        if not validate_cuit(v):
            raise ValueError('CUIT inválido. Verifique el número y el dígito verificador')
        return format_cuit(v)

    @field_validator('legal_name')
    @classmethod
    def validate_legal_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('La razón social no puede estar vacía')
        return cleaned


class FiscalSettingsUpdate(BaseModel):
    gross_income_exempt: Optional[bool] = None
    vat_perception_agent: Optional[bool] = None
    gross_income_perception_agent: Optional[bool] = None
    withholding_agent: Optional[bool] = None
    fce_cbu: Optional[str] = Field(None, description="CBU de 22 dígitos para FCE")
    fiscal_year_close: Optional[str] = Field(None, pattern=r"^\d{2}/\d{2}$", description="Cierre de ejercicio DD/MM")
    web_service_delegation: Optional[bool] = None
    arca_point_of_sale_created: Optional[bool] = None

    @field_validator('fce_cbu')
    @classmethod
    def validate_cbu(cls, v):
        if v is None or v.strip() == "":
            return None
        cleaned = v.strip()
        if not cleaned.isdigit() or len(cleaned) != 22:
            raise ValueError('El CBU debe tener 22 dígitos')
        return cleaned


class FiscalConfigOut(BaseModel):
    id: UUID
    cuit: str
    legal_name: str
    vat_condition: str
    legal_entity_type: Optional[str] = None
    fiscal_address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    activity_start_date: Optional[date] = None
    gross_income_number: Optional[str] = None
    gross_income_exempt: bool
    vat_perception_agent: bool
    gross_income_perception_agent: bool
    withholding_agent: bool
    fce_cbu: Optional[str] = None
    fiscal_year_close: Optional[str] = None
    web_service_delegation: bool
    arca_point_of_sale_created: bool
    delegation_confirmed: bool
    delegation_confirmed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===== FISCAL POINT OF SALE SCHEMAS =====

class FiscalPointOfSaleCreate(BaseModel):
    number: int = Field(..., ge=1, le=99999, description="Número de punto de venta en ARCA")
    name: str = Field(..., min_length=1, max_length=100)
    location_id: Optional[UUID] = Field(None, description="Ubicación física asociada")
    voucher_types: Optional[List[VoucherType]] = Field(None, description="Comprobantes habilitados")


class FiscalPointOfSaleOut(BaseModel):
    id: UUID
    number: int
    name: str
    location_id: Optional[UUID] = None
    voucher_types: Optional[List[str]] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FiscalPointOfSaleList(BaseModel):
    points_of_sale: List[FiscalPointOfSaleOut]
    total: int


# ===== VOUCHERS & NUMBERING =====

class VoucherTypeOption(BaseModel):
    code: str
    name: str
    is_fiscal: bool


class AvailableVoucherTypes(BaseModel):
    default: str
    options: List[VoucherTypeOption]


class NextDocumentNumber(BaseModel):
    document_type: DocumentType
    point_of_sale: int
    next_number: str
    current_sequence: int
