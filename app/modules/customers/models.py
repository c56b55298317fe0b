"""
Modelos SQLAlchemy para el módulo de Clientes

- Listas de precios (PriceLists): ajuste porcentual sobre el precio de lista
- Clientes (Customers): condición IVA y lista de precios asignada
"""

from app.database.database import Base
from sqlalchemy import Column, String, Boolean, ForeignKey, Numeric, Enum, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin
import enum


class PriceAdjustmentType(str, enum.Enum):
    AUMENTO = "AUMENTO"
    DESCUENTO = "DESCUENTO"


class PriceRounding(str, enum.Enum):
    NONE = "none"
    MULTIPLES_10 = "multiples_10"
    MULTIPLES_100 = "multiples_100"


class TaxIdType(str, enum.Enum):
    DNI = "DNI"
    CUIT = "CUIT/CUIL"


class PriceList(Base, TenantMixin, TimestampMixin):
    __tablename__ = "price_lists"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    adjustment_type = Column(Enum(PriceAdjustmentType), nullable=False, default=PriceAdjustmentType.AUMENTO)
    adjustment_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    price_rounding = Column(Enum(PriceRounding), nullable=False, default=PriceRounding.NONE)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_price_list_tenant_name"),
    )


class Customer(Base, TenantMixin, TimestampMixin):
    """
    Clientes de la organización

    La condición IVA define el comprobante sugerido en el checkout y la
    lista de precios ajusta los precios del carrito.
    """
    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False, index=True)
    trade_name = Column(String(200), nullable=True)
    tax_id = Column(String(13), nullable=True)
    tax_id_type = Column(Enum(TaxIdType), nullable=False, default=TaxIdType.DNI)
    tax_category = Column(String(50), nullable=False, default="Consumidor Final")
    email = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    price_list_id = Column(Uuid, ForeignKey("price_lists.id"), nullable=True)
    payment_terms = Column(Integer, nullable=True)  # Días
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    price_list = relationship("PriceList")
