"""
Modelos SQLAlchemy para el módulo Fiscal

- FiscalConfig: datos fiscales de la organización (uno por tenant)
- FiscalPointOfSale: puntos de venta registrados en ARCA
- DocumentSequence: numeración correlativa de comprobantes por punto de venta
"""

from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Enum, JSON, UniqueConstraint, Uuid
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin
import enum


class DocumentType(str, enum.Enum):
    SALE = "sale"                        # Ventas
    PURCHASE = "purchase"                # Compras
    PAYMENT_RECEIPT = "payment_receipt"  # Recibos de cobro (RCB)
    QUOTE = "quote"                      # Presupuestos


class FiscalConfig(Base, TenantMixin, TimestampMixin):
    """Configuración fiscal de la organización (emisor de comprobantes)"""
    __tablename__ = "fiscal_configs"

    id = Column(Uuid, primary_key=True, default=uuid4)
    cuit = Column(String(13), nullable=False)
    legal_name = Column(String(200), nullable=False)  # Razón social
    vat_condition = Column(String(50), nullable=False)  # Condición frente al IVA
    legal_entity_type = Column(String(20), nullable=True)  # Física / Jurídica
    fiscal_address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    postal_code = Column(String(10), nullable=True)
    activity_start_date = Column(Date, nullable=True)
    gross_income_number = Column(String(50), nullable=True)  # Nro. de IIBB

    # Configuración impositiva
    gross_income_exempt = Column(Boolean, nullable=False, default=False)
    vat_perception_agent = Column(Boolean, nullable=False, default=False)
    gross_income_perception_agent = Column(Boolean, nullable=False, default=False)
    withholding_agent = Column(Boolean, nullable=False, default=False)
    fce_cbu = Column(String(22), nullable=True)  # CBU para Factura de Crédito Electrónica
    fiscal_year_close = Column(String(5), nullable=True)  # DD/MM

    # Delegación del web service de facturación en ARCA
    web_service_delegation = Column(Boolean, nullable=False, default=False)
    arca_point_of_sale_created = Column(Boolean, nullable=False, default=False)
    delegation_confirmed = Column(Boolean, nullable=False, default=False)
    delegation_confirmed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", name="uq_fiscal_config_tenant"),
    )


class FiscalPointOfSale(Base, TenantMixin, TimestampMixin):
    """Punto de venta fiscal: número de terminal de facturación asociado a una ubicación"""
    __tablename__ = "fiscal_points_of_sale"

    id = Column(Uuid, primary_key=True, default=uuid4)
    number = Column(Integer, nullable=False)
    name = Column(String(100), nullable=False)
    location_id = Column(Uuid, nullable=True, index=True)
    voucher_types = Column(JSON, nullable=True)  # Tipos habilitados, None = todos
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_fiscal_pos_tenant_number"),
    )


class DocumentSequence(Base, TenantMixin):
    """Tabla para manejar secuencias de numeración por punto de venta y tipo de documento"""
    __tablename__ = "document_sequences"

    id = Column(Uuid, primary_key=True, default=uuid4)
    point_of_sale = Column(Integer, nullable=False)
    document_type = Column(Enum(DocumentType), nullable=False)
    current_number = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("tenant_id", "point_of_sale", "document_type", name="uq_sequence_tenant_pos_type"),
    )
