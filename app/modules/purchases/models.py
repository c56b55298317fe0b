"""
Modelos SQLAlchemy para el módulo de Compras

- Proveedores (Suppliers)
- Compras registradas desde el comprobante del proveedor (Purchases)
- Ítems de compra (PurchaseItems)

Arquitectura multi-tenant: todas las tablas de cabecera incluyen tenant_id
"""

from app.database.database import Base
from sqlalchemy import Column, String, Boolean, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import date
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin
import enum


class PurchaseStatus(str, enum.Enum):
    DRAFT = "draft"            # Borrador
    COMPLETED = "completed"    # Registrada
    CANCELLED = "cancelled"    # Anulada


class PurchaseItemType(str, enum.Enum):
    PRODUCT = "product"  # Producto del catálogo
    CUSTOM = "custom"    # Ítem libre (servicio, flete, etc.)


class Supplier(Base, TenantMixin, TimestampMixin):
    """
    Proveedores de la organización

    El CUIT es opcional pero, si se informa, debe tener dígito verificador válido.
    """
    __tablename__ = "suppliers"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False, index=True)
    tax_id = Column(String(13), nullable=True)  # CUIT
    tax_category = Column(String(50), nullable=True)  # Condición IVA
    email = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    purchases = relationship("Purchase", back_populates="supplier")


class Purchase(Base, TenantMixin, TimestampMixin):
    """
    Compras registradas desde la factura del proveedor

    El par (proveedor, tipo, número de comprobante) no puede repetirse entre
    compras no anuladas.
    """
    __tablename__ = "purchases"

    id = Column(Uuid, primary_key=True, default=uuid4)
    purchase_number = Column(String(30), nullable=False)  # CMP-00001-00000001
    supplier_id = Column(Uuid, ForeignKey("suppliers.id"), nullable=False, index=True)
    location_id = Column(Uuid, nullable=True)

    # Comprobante del proveedor
    voucher_type = Column(String(20), nullable=False)
    voucher_number = Column(String(50), nullable=False, index=True)
    tax_category = Column(String(50), nullable=True)

    # Dates
    invoice_date = Column(Date, nullable=False, default=date.today)
    due_date = Column(Date, nullable=True)
    accounting_date = Column(Date, nullable=True)

    status = Column(Enum(PurchaseStatus), nullable=False, default=PurchaseStatus.COMPLETED, index=True)
    notes = Column(Text, nullable=True)
    attachment_key = Column(String(500), nullable=True)  # Objeto en MinIO

    # Totales calculados
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    discount = Column(Numeric(15, 2), nullable=False, default=0)
    tax = Column(Numeric(15, 2), nullable=False, default=0)
    total = Column(Numeric(15, 2), nullable=False, default=0)

    # Relationships
    supplier = relationship("Supplier", back_populates="purchases")
    items = relationship("PurchaseItem", back_populates="purchase", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("tenant_id", "purchase_number", name="uq_purchase_tenant_number"),
    )


class PurchaseItem(Base, TimestampMixin):
    __tablename__ = "purchase_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    purchase_id = Column(Uuid, ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, nullable=True)

    # Snapshot
    name = Column(String(200), nullable=False)
    sku = Column(String(50), nullable=True)
    type = Column(Enum(PurchaseItemType), nullable=False, default=PurchaseItemType.PRODUCT)

    quantity = Column(Numeric(10, 3), nullable=False)
    unit_cost = Column(Numeric(15, 2), nullable=False)
    subtotal = Column(Numeric(15, 2), nullable=False)

    purchase = relationship("Purchase", back_populates="items")
