"""
Pagos divididos y utilidades de cobro

Una venta puede cobrarse con varios medios (efectivo + tarjeta + transferencia).
SplitPaymentSession lleva el saldo restante mientras se cargan los pagos
parciales; el checkout usa la misma sesión para validar que los pagos
cubran el total.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Dict, Iterable, Any
from uuid import UUID, uuid4

from app.core.config import settings
from app.common.currency import round_money, to_decimal

ZERO = Decimal("0")


class SplitPaymentError(ValueError):
    """Pago parcial rechazado"""


@dataclass
class SplitPayment:
    method_name: str
    amount: Decimal
    method_id: Optional[UUID] = None
    reference: Optional[str] = None
    id: UUID = field(default_factory=uuid4)


class SplitPaymentSession:
    """
    Sesión de cobro con pagos parciales

    - El saldo restante nunca es negativo
    - Se rechaza un pago <= 0 o mayor al saldo restante
    - El cobro está completo cuando el saldo queda dentro de la tolerancia
    """

    def __init__(self, total, tolerance: Optional[Decimal] = None):
        self.total = round_money(total)
        self.tolerance = to_decimal(tolerance if tolerance is not None else settings.SPLIT_PAYMENT_TOLERANCE)
        self.payments: List[SplitPayment] = []

    @property
    def total_paid(self) -> Decimal:
        return round_money(sum((p.amount for p in self.payments), ZERO))

    @property
    def remaining(self) -> Decimal:
        return max(self.total - self.total_paid, ZERO)

    @property
    def is_complete(self) -> bool:
        return abs(self.total - self.total_paid) <= self.tolerance

    @property
    def suggested_amount(self) -> str:
        """Saldo restante para precargar el próximo pago, "" si no queda saldo"""
        remaining = self.remaining
        return f"{remaining:.2f}" if remaining > 0 else ""

    def add_payment(
        self,
        method_id: Optional[UUID],
        method_name: str,
        amount,
        reference: Optional[str] = None
    ) -> SplitPayment:
        value = round_money(amount)

        if value <= 0:
            raise SplitPaymentError("El monto debe ser mayor a cero")
        if value > self.remaining:
            raise SplitPaymentError(
                f"El monto ({value}) supera el saldo restante ({self.remaining})"
            )

        payment = SplitPayment(
            method_name=method_name,
            amount=value,
            method_id=method_id,
            reference=reference
        )
        self.payments.append(payment)
        return payment

    def remove_payment(self, payment_id: UUID) -> None:
        before = len(self.payments)
        self.payments = [p for p in self.payments if p.id != payment_id]
        if len(self.payments) == before:
            raise SplitPaymentError("Pago no encontrado")

    def edit_last(self) -> Optional[SplitPayment]:
        """Quitar el último pago para volver a cargarlo"""
        if not self.payments:
            return None
        return self.payments.pop()


def calculate_change(total, tendered) -> Decimal:
    """Vuelto para un pago en efectivo, 0 si el efectivo no alcanza"""
    return round_money(max(to_decimal(tendered) - to_decimal(total), ZERO))


def calculate_payment_fee(amount, fee_percentage=ZERO, fee_fixed=ZERO) -> Decimal:
    """Comisión del medio de pago: porcentaje sobre el monto más un fijo"""
    value = to_decimal(amount)
    if value <= 0:
        return round_money(ZERO)
    fee = value * to_decimal(fee_percentage) / Decimal("100") + to_decimal(fee_fixed)
    return round_money(min(fee, value))


def net_amount(amount, fee_percentage=ZERO, fee_fixed=ZERO) -> Decimal:
    """Monto neto recibido después de la comisión"""
    return round_money(to_decimal(amount) - calculate_payment_fee(amount, fee_percentage, fee_fixed))


def summarize_payments(payments: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Totales por medio de pago

    Acepta cualquier objeto con method_name y amount (SplitPayment, SalePayment).
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for payment in payments:
        group = grouped.setdefault(payment.method_name, {
            "method_name": payment.method_name,
            "count": 0,
            "total": ZERO
        })
        group["count"] += 1
        group["total"] += to_decimal(payment.amount)

    return [
        {**group, "total": round_money(group["total"])}
        for group in grouped.values()
    ]
