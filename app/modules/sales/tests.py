"""
Tests para el módulo de Ventas

Cubren:
- Cálculo del carrito (descuentos por ítem, descuento global, tope, IVA contenido)
- Listas de precios y redondeo
- Pagos divididos, vuelto y comisiones
- Checkout completo y en cuenta corriente, cobros, anulación
- Presupuestos guardados
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from app.modules.customers.models import PriceAdjustmentType, PriceRounding
from app.modules.sales.calculator import (
    calculate_item_discount, calculate_item_total, calculate_cart_totals,
    get_adjusted_price, apply_price_rounding, apply_price_list
)
from app.modules.sales.payments import (
    SplitPaymentSession, SplitPaymentError, SplitPayment,
    calculate_change, calculate_payment_fee, net_amount, summarize_payments
)
from app.modules.sales.schemas import (
    CartItem, Discount, DiscountType, CustomerPriceList
)


def item(price, quantity=1, discount=None, tax_rate="21"):
    return CartItem(
        name="Producto",
        price=Decimal(str(price)),
        quantity=Decimal(str(quantity)),
        discount=discount,
        tax_rate=Decimal(tax_rate)
    )


def pct(value):
    return Discount(type=DiscountType.PERCENTAGE, value=Decimal(str(value)))


def fixed(value):
    return Discount(type=DiscountType.FIXED, value=Decimal(str(value)))


@pytest.fixture
def example_cart():
    """Carrito del ejemplo: 100 × 2 con 10% de descuento por ítem"""
    return {
        "items": [{"name": "Yerba 1kg", "price": "100", "quantity": "2",
                   "discount": {"type": "percentage", "value": "10"}}],
        "global_discount": {"type": "percentage", "value": "10"}
    }


@pytest.fixture
def price_list(client, headers):
    response = client.post("/price-lists", json={
        "name": "Mayorista",
        "adjustment_type": "DESCUENTO",
        "adjustment_percentage": "10",
        "price_rounding": "multiples_100"
    }, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def customer(client, headers):
    response = client.post("/customers", json={
        "name": "Almacén Don José",
        "tax_id": "30-71234567-1",
        "tax_id_type": "CUIT/CUIL",
        "tax_category": "Responsable Inscripto"
    }, headers=headers)
    assert response.status_code == 201
    return response.json()


# ===== TESTS DEL CALCULADOR =====

class TestItemDiscount:
    """Tests para el descuento por ítem"""

    def test_no_discount(self):
        assert calculate_item_discount(Decimal("100"), Decimal("2"), None) == Decimal("0")

    def test_percentage(self):
        assert calculate_item_discount(Decimal("100"), Decimal("2"), pct(10)) == Decimal("20.00")

    def test_percentage_clamped_to_subtotal(self):
        assert calculate_item_discount(Decimal("100"), Decimal("2"), pct(150)) == Decimal("200.00")

    def test_fixed_is_per_unit(self):
        assert calculate_item_discount(Decimal("100"), Decimal("2"), fixed(30)) == Decimal("60.00")

    def test_fixed_never_exceeds_subtotal(self):
        assert calculate_item_discount(Decimal("100"), Decimal("2"), fixed(150)) == Decimal("200.00")
        assert calculate_item_total(item(100, 2, fixed(150))) == Decimal("0.00")

    def test_item_total(self):
        assert calculate_item_total(item(100, 2, pct(10))) == Decimal("180.00")


class TestCartTotals:
    """Tests para los totales del carrito"""

    def test_no_discounts_total_is_sum(self):
        totals = calculate_cart_totals([item(100, 2), item(50, 1), item("12.35", 3)])
        assert totals.subtotal == Decimal("287.05")
        assert totals.total == Decimal("287.05")
        assert totals.item_discounts == Decimal("0.00")
        assert totals.global_discount == Decimal("0.00")

    def test_example_cart(self):
        totals = calculate_cart_totals([item(100, 2, pct(10))], pct(10))
        assert totals.subtotal == Decimal("200.00")
        assert totals.item_discounts == Decimal("20.00")
        assert totals.global_discount == Decimal("18.00")
        assert totals.total == Decimal("162.00")

    def test_global_discount_applies_after_item_discounts(self):
        totals = calculate_cart_totals([item(100, 1, fixed(50)), item(100, 1)], pct(50))
        assert totals.global_discount == Decimal("75.00")
        assert totals.total == Decimal("75.00")

    def test_global_fixed_never_exceeds_subtotal(self):
        totals = calculate_cart_totals([item(100, 1)], fixed(500))
        assert totals.global_discount == Decimal("100.00")
        assert totals.total == Decimal("0.00")

    def test_global_discount_capped(self):
        totals = calculate_cart_totals([item(100, 2)], pct(50), Decimal("10"))
        assert totals.global_discount == Decimal("20.00")
        assert totals.global_discount_capped is True
        assert totals.total == Decimal("180.00")

    def test_global_discount_under_cap(self):
        totals = calculate_cart_totals([item(100, 2)], pct(5), Decimal("10"))
        assert totals.global_discount == Decimal("10.00")
        assert totals.global_discount_capped is False

    def test_included_vat_not_added(self):
        totals = calculate_cart_totals([item(121, 1)])
        assert totals.taxes == Decimal("21.00")
        assert totals.total == Decimal("121.00")
        assert totals.tax_breakdown[0].base_amount == Decimal("100.00")

    def test_vat_grouped_by_rate(self):
        totals = calculate_cart_totals([item(121, 1), item("110.5", 1, tax_rate="10.5"), item(50, 1, tax_rate="0")])
        assert [group.tax_rate for group in totals.tax_breakdown] == [Decimal("10.5"), Decimal("21")]
        assert totals.taxes == Decimal("31.50")
        assert totals.total == Decimal("281.50")

    def test_vat_after_global_discount(self):
        totals = calculate_cart_totals([item(121, 1)], pct(10))
        assert totals.total == Decimal("108.90")
        assert totals.taxes == Decimal("18.90")


class TestPriceLists:
    """Tests para listas de precios y redondeo"""

    def test_adjusted_price(self):
        assert get_adjusted_price(Decimal("1000"), PriceAdjustmentType.AUMENTO, Decimal("10")) == Decimal("1100.00")
        assert get_adjusted_price(Decimal("1000"), PriceAdjustmentType.DESCUENTO, Decimal("15")) == Decimal("850.00")
        assert get_adjusted_price(Decimal("1000"), None, Decimal("15")) == Decimal("1000")

    def test_price_rounding(self):
        assert apply_price_rounding(Decimal("1234.56"), PriceRounding.NONE) == Decimal("1234.56")
        assert apply_price_rounding(Decimal("1234.56"), PriceRounding.MULTIPLES_10) == Decimal("1230.00")
        assert apply_price_rounding(Decimal("1234.56"), PriceRounding.MULTIPLES_100) == Decimal("1200.00")
        assert apply_price_rounding(Decimal("1250"), PriceRounding.MULTIPLES_100) == Decimal("1300.00")

    def test_apply_price_list_keeps_base_price(self):
        customer = CustomerPriceList(
            adjustment_type=PriceAdjustmentType.AUMENTO,
            adjustment_percentage=Decimal("12"),
            price_rounding=PriceRounding.MULTIPLES_10
        )
        repriced = apply_price_list([item(1000)], customer)
        assert repriced[0].price == Decimal("1120.00")
        assert repriced[0].base_price == Decimal("1000")

        again = apply_price_list(repriced, customer)
        assert again[0].price == Decimal("1120.00")


# ===== TESTS DE PAGOS =====

class TestSplitPaymentSession:
    """Tests para pagos divididos"""

    def test_partial_payments(self):
        session = SplitPaymentSession(Decimal("1000"))
        session.add_payment(None, "Efectivo", Decimal("600"))

        assert session.remaining == Decimal("400.00")
        assert session.suggested_amount == "400.00"
        assert session.is_complete is False

        session.add_payment(None, "Tarjeta", Decimal("400"))
        assert session.remaining == Decimal("0")
        assert session.is_complete is True
        assert session.suggested_amount == ""

    def test_rejects_amount_over_remaining(self):
        session = SplitPaymentSession(Decimal("1000"))
        session.add_payment(None, "Efectivo", Decimal("600"))
        with pytest.raises(SplitPaymentError):
            session.add_payment(None, "Tarjeta", Decimal("500"))
        assert session.total_paid == Decimal("600.00")

    def test_rejects_non_positive_amount(self):
        session = SplitPaymentSession(Decimal("100"))
        with pytest.raises(SplitPaymentError):
            session.add_payment(None, "Efectivo", Decimal("0"))
        with pytest.raises(SplitPaymentError):
            session.add_payment(None, "Efectivo", Decimal("-5"))

    def test_edit_last_and_remove(self):
        session = SplitPaymentSession(Decimal("100"))
        first = session.add_payment(None, "Efectivo", Decimal("30"))
        session.add_payment(None, "Transferencia", Decimal("70"))

        last = session.edit_last()
        assert last.method_name == "Transferencia"
        assert session.remaining == Decimal("70.00")

        session.remove_payment(first.id)
        assert session.payments == []
        assert session.edit_last() is None

        with pytest.raises(SplitPaymentError):
            session.remove_payment(uuid4())

    def test_zero_total_is_complete(self):
        assert SplitPaymentSession(Decimal("0")).is_complete is True

    def test_shortfall_within_tolerance_is_complete(self):
        session = SplitPaymentSession(Decimal("162"))
        session.add_payment(None, "Efectivo", Decimal("161.99"))
        assert session.is_complete is True

        session = SplitPaymentSession(Decimal("162"))
        session.add_payment(None, "Efectivo", Decimal("161.98"))
        assert session.is_complete is False


class TestPaymentHelpers:
    """Tests para vuelto, comisiones y resumen por medio de pago"""

    def test_change(self):
        assert calculate_change(Decimal("850"), Decimal("1000")) == Decimal("150.00")
        assert calculate_change(Decimal("1000"), Decimal("500")) == Decimal("0.00")

    def test_fee(self):
        assert calculate_payment_fee(Decimal("1000"), Decimal("3.5"), Decimal("10")) == Decimal("45.00")
        assert net_amount(Decimal("1000"), Decimal("3.5"), Decimal("10")) == Decimal("955.00")
        assert calculate_payment_fee(Decimal("0"), Decimal("3.5"), Decimal("10")) == Decimal("0.00")

    def test_summarize(self):
        summary = summarize_payments([
            SplitPayment(method_name="Efectivo", amount=Decimal("100")),
            SplitPayment(method_name="Tarjeta", amount=Decimal("50")),
            SplitPayment(method_name="Efectivo", amount=Decimal("25.5")),
        ])
        assert summary[0] == {"method_name": "Efectivo", "count": 2, "total": Decimal("125.50")}
        assert summary[1]["total"] == Decimal("50.00")


# ===== TESTS DE ENDPOINTS =====

class TestCartEndpoints:
    """Tests para presupuesto, recálculo y validación de pagos"""

    def test_quote_example(self, client, headers, example_cart):
        response = client.post("/sales/quote", json=example_cart, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["subtotal"] == "200.00"
        assert data["item_discounts"] == "20.00"
        assert data["global_discount"] == "18.00"
        assert data["total"] == "162.00"

    def test_quote_uses_seller_max_discount(self, client, headers, example_cart):
        seller = client.post(
            "/sales/sellers",
            json={"name": "Lucía", "max_discount_percentage": "5"},
            headers=headers
        ).json()
        example_cart["seller_id"] = seller["id"]

        data = client.post("/sales/quote", json=example_cart, headers=headers).json()
        assert data["global_discount"] == "9.00"
        assert data["global_discount_capped"] is True
        assert data["total"] == "171.00"

    def test_quote_unknown_seller(self, client, headers, example_cart):
        example_cart["seller_id"] = str(uuid4())
        response = client.post("/sales/quote", json=example_cart, headers=headers)
        assert response.status_code == 404

    def test_quote_empty_cart(self, client, headers):
        response = client.post("/sales/quote", json={"items": []}, headers=headers)
        assert response.status_code == 422

    def test_reprice(self, client, headers):
        payload = {
            "items": [{"name": "Galletitas", "price": "1000", "quantity": "1"}],
            "price_list": {"adjustment_type": "DESCUENTO", "adjustment_percentage": "10", "price_rounding": "multiples_100"}
        }
        response = client.post("/sales/cart/reprice", json=payload, headers=headers)
        assert response.status_code == 200
        assert response.json()["items"][0]["price"] == "900.00"

    def test_reprice_requires_customer_or_list(self, client, headers):
        payload = {"items": [{"name": "Galletitas", "price": "1000", "quantity": "1"}]}
        assert client.post("/sales/cart/reprice", json=payload, headers=headers).status_code == 422

    def test_reprice_with_customer_price_list(self, client, headers, customer, price_list):
        client.patch(f"/customers/{customer['id']}", json={"price_list_id": price_list["id"]}, headers=headers)
        payload = {
            "items": [{"name": "Galletitas", "price": "1240", "base_price": "1240", "quantity": "1"}],
            "customer_id": customer["id"]
        }
        data = client.post("/sales/cart/reprice", json=payload, headers=headers).json()
        assert data["items"][0]["price"] == "1100.00"
        assert data["items"][0]["base_price"] == "1240"
        assert data["price_list_id"] == price_list["id"]

    def test_reprice_customer_without_list_keeps_prices(self, client, headers, customer):
        payload = {
            "items": [{"name": "Galletitas", "price": "1000", "quantity": "1"}],
            "customer_id": customer["id"]
        }
        data = client.post("/sales/cart/reprice", json=payload, headers=headers).json()
        assert data["items"][0]["price"] == "1000"
        assert data["price_list_id"] is None

    def test_reprice_unknown_customer(self, client, headers):
        payload = {
            "items": [{"name": "Galletitas", "price": "1000", "quantity": "1"}],
            "customer_id": str(uuid4())
        }
        assert client.post("/sales/cart/reprice", json=payload, headers=headers).status_code == 404

    def test_split_validation_reports_rejection(self, client, headers):
        payload = {
            "total": "1000",
            "payments": [
                {"method_name": "Efectivo", "amount": "600"},
                {"method_name": "Tarjeta", "amount": "500"},
                {"method_name": "Tarjeta", "amount": "400"}
            ]
        }
        data = client.post("/sales/split-payments/validate", json=payload, headers=headers).json()
        assert data["rejected_index"] == 1
        assert data["is_complete"] is False
        assert data["remaining"] == "400.00"
        assert len(data["steps"]) == 2
        assert data["steps"][0]["remaining"] == "400.00"


class TestCheckout:
    """Tests para el checkout"""

    def test_completed_sale(self, client, headers, example_cart):
        example_cart["payments"] = [
            {"method_name": "Efectivo", "amount": "100"},
            {"method_name": "Transferencia", "amount": "62"}
        ]
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 201
        sale = response.json()["sale"]
        assert sale["number"] == "VTA-00001-00000001"
        assert sale["voucher_type"] == "COMPROBANTE_X"
        assert sale["status"] == "completed"
        assert sale["total"] == "162.00"
        assert sale["amount_paid"] == "162.00"
        assert len(sale["items"]) == 1
        assert sale["items"][0]["line_total"] == "180.00"
        assert len(sale["payments"]) == 2

        second = client.post("/sales/checkout", json=example_cart, headers=headers).json()
        assert second["sale"]["number"] == "VTA-00001-00000002"

    def test_underpaid_sale_rejected_without_consuming_number(self, client, headers, example_cart):
        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "100"}]
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 409

        assert client.get("/sales", headers=headers).json()["total"] == 0
        peek = client.get("/fiscal/sequences/next", params={"document_type": "sale"}, headers=headers)
        assert peek.json()["next_number"] == "VTA-00001-00000001"

    def test_payment_one_cent_short_completes(self, client, headers, example_cart):
        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "161.99"}]
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 201
        assert response.json()["sale"]["status"] == "completed"

        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "161.98"}]
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 409

    def test_location_recorded(self, client, headers, example_cart):
        location_id = str(uuid4())
        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "162"}]
        example_cart["location_id"] = location_id
        sale = client.post("/sales/checkout", json=example_cart, headers=headers).json()["sale"]
        assert sale["location_id"] == location_id
        assert client.get(f"/sales/{sale['id']}", headers=headers).json()["location_id"] == location_id

    def test_overpayment_rejected(self, client, headers, example_cart):
        example_cart["payments"] = [{"method_name": "Tarjeta", "amount": "200"}]
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 422

    def test_cash_change(self, client, headers, example_cart):
        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "162"}]
        example_cart["cash_tendered"] = "200"
        data = client.post("/sales/checkout", json=example_cart, headers=headers).json()
        assert data["change"] == "38.00"

    def test_pending_requires_customer(self, client, headers, example_cart):
        example_cart["status"] = "pending"
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 422

    def test_pending_requires_existing_customer(self, client, headers, example_cart):
        example_cart.update({"status": "pending", "customer_id": str(uuid4())})
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 404
        assert client.get("/sales", headers=headers).json()["total"] == 0

    def test_archived_customer_rejected(self, client, headers, example_cart, customer):
        client.post(f"/customers/{customer['id']}/archive", headers=headers)
        example_cart.update({"customer_id": customer["id"], "payments": [{"method_name": "Efectivo", "amount": "162"}]})
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 404

    def test_collection_one_cent_short_completes(self, client, headers, example_cart, customer):
        example_cart.update({
            "status": "pending",
            "customer_id": customer["id"],
            "payments": [{"method_name": "Efectivo", "amount": "50"}]
        })
        sale = client.post("/sales/checkout", json=example_cart, headers=headers).json()["sale"]

        response = client.post(f"/sales/{sale['id']}/payments", json={"method_name": "Efectivo", "amount": "111.99"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_customer_price_list_applied_at_checkout(self, client, headers, customer, price_list):
        client.patch(f"/customers/{customer['id']}", json={"price_list_id": price_list["id"]}, headers=headers)
        payload = {
            "customer_id": customer["id"],
            "items": [
                {"name": "Galletitas", "price": "1240", "base_price": "1240", "quantity": "1"},
                {"name": "Servicio", "price": "500", "quantity": "1"}
            ],
            "payments": [{"method_name": "Efectivo", "amount": "1600"}]
        }
        response = client.post("/sales/checkout", json=payload, headers=headers)
        assert response.status_code == 201
        sale = response.json()["sale"]
        assert sale["total"] == "1600.00"
        assert [i["unit_price"] for i in sale["items"]] == ["1100.00", "500.00"]

    def test_pending_sale_and_collection(self, client, headers, example_cart, customer):
        example_cart.update({
            "status": "pending",
            "customer_id": customer["id"],
            "sale_date": "2026-03-01",
            "payments": [{"method_name": "Efectivo", "amount": "50"}]
        })
        sale = client.post("/sales/checkout", json=example_cart, headers=headers).json()["sale"]
        assert sale["status"] == "pending"
        assert sale["due_date"] == "2026-03-31"
        assert sale["amount_paid"] == "50.00"
        assert sale["balance_due"] == "112.00"

        response = client.post(f"/sales/{sale['id']}/payments", json={"method_name": "Efectivo", "amount": "200"}, headers=headers)
        assert response.status_code == 422

        response = client.post(f"/sales/{sale['id']}/payments", json={"method_name": "Efectivo", "amount": "112"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["balance_due"] == "0.00"
        receipts = [p["receipt_number"] for p in data["payments"] if p["receipt_number"]]
        assert receipts == ["RCB-00001-00000001"]

    def test_payment_on_completed_sale_rejected(self, client, headers, example_cart):
        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "162"}]
        sale = client.post("/sales/checkout", json=example_cart, headers=headers).json()["sale"]
        response = client.post(f"/sales/{sale['id']}/payments", json={"method_name": "Efectivo", "amount": "1"}, headers=headers)
        assert response.status_code == 409

    def test_fiscal_voucher_from_config(self, client, headers, example_cart, customer):
        client.put("/fiscal/config", json={
            "cuit": "30712345671",
            "legal_name": "Distribuidora Norte SA",
            "vat_condition": "Responsable Inscripto"
        }, headers=headers)
        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "162"}]
        example_cart["customer_id"] = customer["id"]

        sale = client.post("/sales/checkout", json=example_cart, headers=headers).json()["sale"]
        assert sale["voucher_type"] == "FACTURA_A"

        example_cart["voucher_type"] = "FACTURA_C"
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 400

    def test_payment_method_fee_and_reference(self, client, headers, example_cart):
        method = client.post("/sales/payment-methods", json={
            "name": "Visa crédito",
            "type": "TARJETA",
            "fee_percentage": "3",
            "requires_reference": True
        }, headers=headers).json()

        example_cart["payments"] = [{"method_id": method["id"], "method_name": "Visa", "amount": "162"}]
        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 400

        example_cart["payments"][0]["reference"] = "LOTE-0042"
        sale = client.post("/sales/checkout", json=example_cart, headers=headers).json()["sale"]
        assert sale["payments"][0]["method_name"] == "Visa crédito"
        assert sale["payments"][0]["fee_amount"] == "4.86"

    def test_purchase_only_method_rejected(self, client, headers, example_cart):
        method = client.post("/sales/payment-methods", json={
            "name": "Cheque proveedor", "type": "CHEQUE", "availability": "COMPRAS"
        }, headers=headers).json()
        example_cart["payments"] = [{"method_id": method["id"], "method_name": "Cheque", "amount": "162"}]

        response = client.post("/sales/checkout", json=example_cart, headers=headers)
        assert response.status_code == 400

    def test_duplicate_payment_method_name(self, client, headers):
        payload = {"name": "Efectivo", "type": "EFECTIVO"}
        assert client.post("/sales/payment-methods", json=payload, headers=headers).status_code == 201
        assert client.post("/sales/payment-methods", json=payload, headers=headers).status_code == 409


class TestSaleManagement:
    """Tests para consulta, notas y anulación"""

    @pytest.fixture
    def sale(self, client, headers, example_cart):
        example_cart["payments"] = [{"method_name": "Efectivo", "amount": "162"}]
        return client.post("/sales/checkout", json=example_cart, headers=headers).json()["sale"]

    def test_get_sale(self, client, headers, sale):
        response = client.get(f"/sales/{sale['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json()["number"] == sale["number"]

    def test_sale_isolated_by_organization(self, client, sale):
        other = {"X-Organization-ID": str(uuid4())}
        assert client.get(f"/sales/{sale['id']}", headers=other).status_code == 404

    def test_update_notes(self, client, headers, sale):
        response = client.patch(f"/sales/{sale['id']}/notes", json={"notes": "Entregar el lunes"}, headers=headers)
        assert response.json()["notes"] == "Entregar el lunes"

    def test_cancel_once(self, client, headers, sale):
        response = client.post(f"/sales/{sale['id']}/cancel", json={"reason": "Error de carga"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancellation_reason"] == "Error de carga"

        response = client.post(f"/sales/{sale['id']}/cancel", json={}, headers=headers)
        assert response.status_code == 409

    def test_list_filters(self, client, headers, sale):
        client.post(f"/sales/{sale['id']}/cancel", json={}, headers=headers)

        assert client.get("/sales", params={"status": "cancelled"}, headers=headers).json()["total"] == 1
        assert client.get("/sales", params={"status": "completed"}, headers=headers).json()["total"] == 0
        assert client.get("/sales", params={"voucher_type": "COMPROBANTE_X"}, headers=headers).json()["total"] == 1
        assert client.get("/sales", params={"date_from": "2999-01-01"}, headers=headers).json()["total"] == 0


class TestQuotes:
    """Tests para presupuestos guardados"""

    def test_create_quote(self, client, headers, example_cart, customer):
        example_cart.update({"customer_id": customer["id"], "notes": "Válido por 7 días"})
        response = client.post("/sales/quotes", json=example_cart, headers=headers)
        assert response.status_code == 201
        quote = response.json()
        assert quote["number"] == "PRE-00001-00000001"
        assert quote["status"] == "active"
        assert quote["customer_name"] == "Almacén Don José"
        assert quote["subtotal"] == "200.00"
        assert quote["discount"] == "38.00"
        assert quote["total"] == "162.00"
        assert quote["items"][0]["name"] == "Yerba 1kg"
        assert quote["global_discount"]["type"] == "percentage"

        second = client.post("/sales/quotes", json=example_cart, headers=headers).json()
        assert second["number"] == "PRE-00001-00000002"

    def test_quote_does_not_consume_sale_numbers(self, client, headers, example_cart):
        client.post("/sales/quotes", json=example_cart, headers=headers)
        peek = client.get("/fiscal/sequences/next", params={"document_type": "sale"}, headers=headers)
        assert peek.json()["next_number"] == "VTA-00001-00000001"

    def test_walk_in_quote_keeps_name(self, client, headers, example_cart):
        example_cart["customer_name"] = "Mostrador"
        quote = client.post("/sales/quotes", json=example_cart, headers=headers).json()
        assert quote["customer_id"] is None
        assert quote["customer_name"] == "Mostrador"

    def test_quote_unknown_customer(self, client, headers, example_cart):
        example_cart["customer_id"] = str(uuid4())
        assert client.post("/sales/quotes", json=example_cart, headers=headers).status_code == 404

    def test_list_and_search(self, client, headers, example_cart, customer):
        client.post("/sales/quotes", json=example_cart, headers=headers)
        example_cart["customer_id"] = customer["id"]
        client.post("/sales/quotes", json=example_cart, headers=headers)

        assert client.get("/sales/quotes", headers=headers).json()["total"] == 2
        data = client.get("/sales/quotes", params={"search": "don josé"}, headers=headers).json()
        assert data["total"] == 1
        assert data["quotes"][0]["number"] == "PRE-00001-00000002"
        assert client.get("/sales/quotes", params={"date_from": "2999-01-01"}, headers=headers).json()["total"] == 0

    def test_delete_is_soft(self, client, headers, example_cart):
        quote = client.post("/sales/quotes", json=example_cart, headers=headers).json()
        assert client.get(f"/sales/quotes/{quote['id']}", headers=headers).status_code == 200

        assert client.delete(f"/sales/quotes/{quote['id']}", headers=headers).status_code == 204
        assert client.get(f"/sales/quotes/{quote['id']}", headers=headers).status_code == 404
        assert client.get("/sales/quotes", headers=headers).json()["total"] == 0
        assert client.delete(f"/sales/quotes/{quote['id']}", headers=headers).status_code == 404

        again = client.post("/sales/quotes", json=example_cart, headers=headers).json()
        assert again["number"] == "PRE-00001-00000002"

    def test_quote_isolated_by_organization(self, client, headers, example_cart):
        quote = client.post("/sales/quotes", json=example_cart, headers=headers).json()
        other = {"X-Organization-ID": str(uuid4())}
        assert client.get(f"/sales/quotes/{quote['id']}", headers=other).status_code == 404
