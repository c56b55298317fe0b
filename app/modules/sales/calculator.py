"""
Helper para cálculo de totales del carrito

Funciones puras, sin acceso a base de datos. Las usan el presupuesto,
el checkout y el recálculo por lista de precios.

Reglas:
- Los descuentos por ítem se aplican antes que el descuento global
- El descuento global se limita al porcentaje máximo permitido
- Un descuento fijo nunca supera el subtotal al que se aplica
- Los precios incluyen IVA: el impuesto se informa, no se suma al total
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Dict

from app.common.currency import round_money, to_decimal
from app.modules.customers.models import PriceAdjustmentType, PriceRounding
from app.modules.sales.schemas import (
    CartItem, CartTotals, Discount, DiscountType, TaxBreakdown,
    CustomerPriceList
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def calculate_item_discount(price: Decimal, quantity: Decimal, discount: Optional[Discount]) -> Decimal:
    """
    Calcular el descuento de un ítem

    - Porcentaje: precio × cantidad × valor / 100
    - Fijo: valor por unidad × cantidad

    El resultado queda entre 0 y el subtotal del ítem.
    """
    subtotal = to_decimal(price) * to_decimal(quantity)
    if discount is None or discount.value <= 0:
        return ZERO.quantize(Decimal("0.01"))

    if discount.type == DiscountType.PERCENTAGE:
        amount = subtotal * discount.value / HUNDRED
    else:
        amount = discount.value * to_decimal(quantity)

    return round_money(min(max(amount, ZERO), subtotal))


def calculate_item_total(item: CartItem) -> Decimal:
    """Total del ítem después de su descuento, nunca negativo"""
    subtotal = item.price * item.quantity
    discount = calculate_item_discount(item.price, item.quantity, item.discount)
    return round_money(max(subtotal - discount, ZERO))


def calculate_global_discount(after_items: Decimal, discount: Optional[Discount]) -> Decimal:
    if discount is None or discount.value <= 0 or after_items <= 0:
        return ZERO

    if discount.type == DiscountType.PERCENTAGE:
        amount = after_items * discount.value / HUNDRED
    else:
        amount = discount.value

    return min(max(amount, ZERO), after_items)


def calculate_cart_totals(
    items: List[CartItem],
    global_discount: Optional[Discount] = None,
    max_discount_percentage: Optional[Decimal] = None
) -> CartTotals:
    """
    Calcular los totales del carrito

    Args:
        items: Ítems del carrito
        global_discount: Descuento sobre el subtotal ya descontado por ítem
        max_discount_percentage: Tope del descuento global (ej. el del vendedor)

    Returns:
        CartTotals con subtotal, descuentos, IVA contenido agrupado por alícuota y total
    """
    subtotal = round_money(sum((item.price * item.quantity for item in items), ZERO))
    line_totals = [calculate_item_total(item) for item in items]
    item_discounts = round_money(sum(
        (calculate_item_discount(item.price, item.quantity, item.discount) for item in items),
        ZERO
    ))
    after_items = subtotal - item_discounts

    global_amount = calculate_global_discount(after_items, global_discount)

    capped = False
    if max_discount_percentage is not None:
        cap = after_items * to_decimal(max_discount_percentage) / HUNDRED
        if global_amount > cap:
            global_amount = cap
            capped = True

    global_amount = round_money(global_amount)
    total = round_money(max(after_items - global_amount, ZERO))

    tax_breakdown = _calculate_included_taxes(items, line_totals, after_items, global_amount)
    taxes = round_money(sum((group.tax_amount for group in tax_breakdown), ZERO))

    return CartTotals(
        subtotal=subtotal,
        item_discounts=item_discounts,
        global_discount=global_amount,
        global_discount_capped=capped,
        taxes=taxes,
        tax_breakdown=tax_breakdown,
        total=total
    )


def _calculate_included_taxes(
    items: List[CartItem],
    line_totals: List[Decimal],
    after_items: Decimal,
    global_amount: Decimal
) -> List[TaxBreakdown]:
    """
    IVA contenido en cada línea, agrupado por alícuota

    El descuento global se reparte entre las líneas en proporción a su total.
    IVA = neto × alícuota / (100 + alícuota)
    """
    grouped: Dict[Decimal, Dict[str, Decimal]] = {}

    for item, line_total in zip(items, line_totals):
        if item.tax_rate <= 0:
            continue

        share = global_amount * line_total / after_items if after_items > 0 else ZERO
        net = line_total - share
        tax = net * item.tax_rate / (HUNDRED + item.tax_rate)

        group = grouped.setdefault(item.tax_rate, {"base_amount": ZERO, "tax_amount": ZERO})
        group["base_amount"] += net - tax
        group["tax_amount"] += tax

    return [
        TaxBreakdown(
            tax_rate=rate,
            base_amount=round_money(values["base_amount"]),
            tax_amount=round_money(values["tax_amount"])
        )
        for rate, values in sorted(grouped.items())
    ]


# ===== LISTAS DE PRECIOS =====

def get_adjusted_price(
    base_price: Decimal,
    adjustment_type: Optional[PriceAdjustmentType],
    adjustment_percentage: Optional[Decimal]
) -> Decimal:
    """
    Precio ajustado por la lista de precios del cliente

    AUMENTO: base × (1 + p/100)
    DESCUENTO: base × (1 − p/100)
    """
    base = to_decimal(base_price)
    if adjustment_type is None or adjustment_percentage is None:
        return base

    factor = to_decimal(adjustment_percentage) / HUNDRED
    if adjustment_type == PriceAdjustmentType.AUMENTO:
        return round_money(base * (1 + factor))
    return round_money(base * (1 - factor))


def apply_price_rounding(price: Decimal, mode: PriceRounding) -> Decimal:
    """Redondear al múltiplo de 10 o 100 más cercano"""
    if mode == PriceRounding.MULTIPLES_10:
        step = Decimal("10")
    elif mode == PriceRounding.MULTIPLES_100:
        step = Decimal("100")
    else:
        return round_money(price)

    return round_money((to_decimal(price) / step).quantize(Decimal("1"), rounding=ROUND_HALF_UP) * step)


def apply_price_list(items: List[CartItem], customer: CustomerPriceList) -> List[CartItem]:
    """Recalcular el precio de cada ítem desde su precio de lista"""
    repriced = []
    for item in items:
        base = item.base_price if item.base_price is not None else item.price
        price = get_adjusted_price(base, customer.adjustment_type, customer.adjustment_percentage)
        price = apply_price_rounding(price, customer.price_rounding)
        repriced.append(item.model_copy(update={"price": price, "base_price": base}))
    return repriced
