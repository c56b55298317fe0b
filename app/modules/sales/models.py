from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint, Uuid, JSON
from sqlalchemy.orm import relationship
from datetime import date
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin
import enum


class SaleStatus(str, enum.Enum):
    COMPLETED = "completed"  # Cobrada en su totalidad
    PENDING = "pending"      # Cuenta corriente, saldo pendiente
    CANCELLED = "cancelled"  # Anulada


class PaymentMethodType(str, enum.Enum):
    EFECTIVO = "EFECTIVO"
    CHEQUE = "CHEQUE"
    TARJETA = "TARJETA"
    TRANSFERENCIA = "TRANSFERENCIA"
    OTRO = "OTRO"


class PaymentMethodAvailability(str, enum.Enum):
    VENTAS = "VENTAS"
    COMPRAS = "COMPRAS"
    VENTAS_Y_COMPRAS = "VENTAS_Y_COMPRAS"


class Seller(Base, TenantMixin, TimestampMixin):
    """
    Vendedores (colaboradores) asociados a ventas

    max_discount_percentage limita el descuento global que el vendedor
    puede aplicar en el checkout.
    """
    __tablename__ = "sellers"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False, index=True)
    email = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    max_discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)


class PaymentMethod(Base, TenantMixin, TimestampMixin):
    """Medios de pago configurables con su comisión"""
    __tablename__ = "payment_methods"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    type = Column(Enum(PaymentMethodType), nullable=False)
    fee_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    fee_fixed = Column(Numeric(15, 2), nullable=False, default=0)
    requires_reference = Column(Boolean, nullable=False, default=False)
    availability = Column(Enum(PaymentMethodAvailability), nullable=False, default=PaymentMethodAvailability.VENTAS_Y_COMPRAS)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_payment_method_tenant_name"),
    )


class Sale(Base, TenantMixin, TimestampMixin):
    __tablename__ = "sales"

    id = Column(Uuid, primary_key=True, default=uuid4)

    # References
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=True, index=True)
    seller_id = Column(Uuid, ForeignKey("sellers.id"), nullable=True, index=True)
    location_id = Column(Uuid, nullable=True)

    # Comprobante
    number = Column(String(30), nullable=False)  # VTA-00001-00000001
    voucher_type = Column(String(20), nullable=False)
    point_of_sale = Column(Integer, nullable=False)
    status = Column(Enum(SaleStatus), nullable=False, default=SaleStatus.COMPLETED)

    # Dates
    sale_date = Column(Date, nullable=False, default=date.today)
    due_date = Column(Date, nullable=True)

    notes = Column(Text, nullable=True)
    currency = Column(String(3), nullable=False, default="ARS")

    # Totals (calculated)
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    item_discounts = Column(Numeric(15, 2), nullable=False, default=0)
    global_discount = Column(Numeric(15, 2), nullable=False, default=0)
    taxes = Column(Numeric(15, 2), nullable=False, default=0)
    total = Column(Numeric(15, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(15, 2), nullable=False, default=0)

    # Cancellation
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)

    # Relationships
    seller = relationship("Seller")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    payments = relationship("SalePayment", back_populates="sale", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_sale_tenant_number"),
    )

    @property
    def balance_due(self):
        """Saldo pendiente"""
        return self.total - self.amount_paid


class SaleItem(Base, TimestampMixin):
    __tablename__ = "sale_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    sale_id = Column(Uuid, ForeignKey("sales.id"), nullable=False)
    product_id = Column(Uuid, nullable=True)

    # Snapshot del producto al momento de la venta
    name = Column(String(200), nullable=False)
    sku = Column(String(50), nullable=True)

    quantity = Column(Numeric(10, 3), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)  # IVA incluido
    discount_type = Column(String(20), nullable=True)
    discount_value = Column(Numeric(15, 2), nullable=True)
    discount_amount = Column(Numeric(15, 2), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2), nullable=False)
    line_total = Column(Numeric(15, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")


class SalePayment(Base, TenantMixin, TimestampMixin):
    __tablename__ = "sale_payments"

    id = Column(Uuid, primary_key=True, default=uuid4)
    sale_id = Column(Uuid, ForeignKey("sales.id"), nullable=False)
    payment_method_id = Column(Uuid, ForeignKey("payment_methods.id"), nullable=True)

    method_name = Column(String(100), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    fee_amount = Column(Numeric(15, 2), nullable=False, default=0)
    reference = Column(String(100), nullable=True)
    receipt_number = Column(String(30), nullable=True)  # RCB-00001-00000001, solo cobros de saldo
    payment_date = Column(Date, nullable=False, default=date.today)

    sale = relationship("Sale", back_populates="payments")


class QuoteStatus(str, enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class Quote(Base, TenantMixin, TimestampMixin):
    """
    Presupuestos (PRE-00001-00000001)

    Guardan el carrito tal como se cotizó: los ítems y el descuento global
    quedan en JSON para poder retomarlo en el checkout.
    """
    __tablename__ = "quotes"

    id = Column(Uuid, primary_key=True, default=uuid4)
    number = Column(String(30), nullable=False)
    point_of_sale = Column(Integer, nullable=False)
    status = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.ACTIVE, index=True)
    quote_date = Column(Date, nullable=False, default=date.today)

    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = Column(String(200), nullable=True)
    seller_id = Column(Uuid, ForeignKey("sellers.id"), nullable=True)
    location_id = Column(Uuid, nullable=True)

    items = Column(JSON, nullable=False)
    global_discount = Column(JSON, nullable=True)

    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    discount = Column(Numeric(15, 2), nullable=False, default=0)  # Ítems + global
    taxes = Column(Numeric(15, 2), nullable=False, default=0)
    total = Column(Numeric(15, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_quote_tenant_number"),
    )
