"""
Tests para el módulo de Compras

Cubren:
- Totales de compra
- Proveedores (CUIT, búsqueda, desactivación)
- Control de comprobantes duplicados por proveedor
- Ciclo de vida: edición, notas, cancelación y eliminación
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from app.modules.purchases.schemas import PurchaseItemCreate
from app.modules.purchases.service import calculate_purchase_totals


@pytest.fixture
def supplier(client, headers):
    response = client.post("/suppliers", json={
        "name": "Distribuidora Norte SA",
        "tax_id": "30-71234567-1",
        "tax_category": "Responsable Inscripto"
    }, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def purchase_data(supplier):
    return {
        "supplier_id": supplier["id"],
        "voucher_type": "FACTURA_A",
        "voucher_number": "0003-00012345",
        "invoice_date": "2026-02-10",
        "due_date": "2026-03-10",
        "discount": "50",
        "tax": "210",
        "items": [
            {"name": "Aceite 1.5L", "quantity": "10", "unit_cost": "80"},
            {"name": "Flete", "type": "custom", "quantity": "1", "unit_cost": "200"}
        ]
    }


# ===== TESTS DE TOTALES =====

class TestPurchaseTotals:
    """Tests para el cálculo de totales"""

    def test_totals(self):
        items = [
            PurchaseItemCreate(name="A", quantity=Decimal("3"), unit_cost=Decimal("10.50")),
            PurchaseItemCreate(name="B", quantity=Decimal("2"), unit_cost=Decimal("4")),
        ]
        totals = calculate_purchase_totals(items, Decimal("5"), Decimal("8.40"))
        assert totals.subtotal == Decimal("39.50")
        assert totals.discount == Decimal("5.00")
        assert totals.total == Decimal("42.90")

    def test_discount_clamped(self):
        items = [PurchaseItemCreate(name="A", quantity=Decimal("1"), unit_cost=Decimal("100"))]
        totals = calculate_purchase_totals(items, Decimal("150"), Decimal("0"))
        assert totals.discount == Decimal("100.00")
        assert totals.total == Decimal("0.00")


# ===== TESTS DE PROVEEDORES =====

class TestSuppliers:
    """Tests para proveedores"""

    def test_cuit_formatted(self, supplier):
        assert supplier["tax_id"] == "30-71234567-1"

    def test_invalid_cuit(self, client, headers):
        response = client.post("/suppliers", json={"name": "X", "tax_id": "30-71234567-2"}, headers=headers)
        assert response.status_code == 422

    def test_duplicate_cuit(self, client, headers, supplier):
        response = client.post("/suppliers", json={"name": "Otra", "tax_id": "30712345671"}, headers=headers)
        assert response.status_code == 409

    def test_search_and_deactivate(self, client, headers, supplier):
        client.post("/suppliers", json={"name": "Lácteos del Sur"}, headers=headers)

        data = client.get("/suppliers", params={"search": "norte"}, headers=headers).json()
        assert data["total"] == 1
        assert data["suppliers"][0]["id"] == supplier["id"]

        assert client.get("/suppliers", params={"search": "30-7123"}, headers=headers).json()["total"] == 1

        response = client.delete(f"/suppliers/{supplier['id']}", headers=headers)
        assert response.json()["is_active"] is False
        assert client.get("/suppliers", headers=headers).json()["total"] == 1


# ===== TESTS DE COMPRAS =====

class TestPurchases:
    """Tests para el registro de compras"""

    def test_create_purchase(self, client, headers, purchase_data):
        response = client.post("/purchases", json=purchase_data, headers=headers)
        assert response.status_code == 201
        data = response.json()
        assert data["purchase_number"] == "CMP-00001-00000001"
        assert data["status"] == "completed"
        assert data["subtotal"] == "1000.00"
        assert data["discount"] == "50.00"
        assert data["total"] == "1160.00"
        assert len(data["items"]) == 2
        assert data["supplier"]["name"] == "Distribuidora Norte SA"

    def test_duplicate_voucher_rejected(self, client, headers, purchase_data):
        client.post("/purchases", json=purchase_data, headers=headers)

        response = client.post("/purchases", json=purchase_data, headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Ya existe una compra con ese número de factura para este proveedor"

    def test_duplicate_allowed_after_cancel(self, client, headers, purchase_data):
        first = client.post("/purchases", json=purchase_data, headers=headers).json()
        client.post(f"/purchases/{first['id']}/cancel", headers=headers)

        response = client.post("/purchases", json=purchase_data, headers=headers)
        assert response.status_code == 201
        assert response.json()["purchase_number"] == "CMP-00001-00000002"

    def test_same_number_other_voucher_type(self, client, headers, purchase_data):
        client.post("/purchases", json=purchase_data, headers=headers)
        purchase_data["voucher_type"] = "FACTURA_B"
        assert client.post("/purchases", json=purchase_data, headers=headers).status_code == 201

    def test_inactive_supplier(self, client, headers, supplier, purchase_data):
        client.delete(f"/suppliers/{supplier['id']}", headers=headers)
        response = client.post("/purchases", json=purchase_data, headers=headers)
        assert response.status_code == 400

    def test_unknown_supplier(self, client, headers, purchase_data):
        purchase_data["supplier_id"] = str(uuid4())
        assert client.post("/purchases", json=purchase_data, headers=headers).status_code == 404

    def test_due_date_before_invoice(self, client, headers, purchase_data):
        purchase_data["due_date"] = "2026-01-01"
        assert client.post("/purchases", json=purchase_data, headers=headers).status_code == 422

    def test_update_replaces_items(self, client, headers, purchase_data):
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()

        response = client.patch(f"/purchases/{purchase['id']}", json={
            "items": [{"name": "Aceite 1.5L", "quantity": "5", "unit_cost": "80"}],
            "tax": "0"
        }, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 1
        assert data["subtotal"] == "400.00"
        assert data["total"] == "350.00"

    def test_update_duplicate_voucher(self, client, headers, purchase_data):
        client.post("/purchases", json=purchase_data, headers=headers)
        purchase_data["voucher_number"] = "0003-00099999"
        other = client.post("/purchases", json=purchase_data, headers=headers).json()

        response = client.patch(f"/purchases/{other['id']}", json={"voucher_number": "0003-00012345"}, headers=headers)
        assert response.status_code == 409

        response = client.patch(f"/purchases/{other['id']}", json={"voucher_number": "0003-00099999"}, headers=headers)
        assert response.status_code == 200

    @pytest.mark.parametrize("field", ["invoice_date", "voucher_type", "voucher_number"])
    def test_update_rejects_null_required_fields(self, client, headers, purchase_data, field):
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()
        response = client.patch(f"/purchases/{purchase['id']}", json={field: None}, headers=headers)
        assert response.status_code == 422

        current = client.get(f"/purchases/{purchase['id']}", headers=headers).json()
        assert current[field] == purchase[field]

    def test_update_rejects_blank_voucher_number(self, client, headers, purchase_data):
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()
        response = client.patch(f"/purchases/{purchase['id']}", json={"voucher_number": "   "}, headers=headers)
        assert response.status_code == 422

        current = client.get(f"/purchases/{purchase['id']}", headers=headers).json()
        assert current["voucher_number"] == "0003-00012345"

    def test_update_strips_voucher_number(self, client, headers, purchase_data):
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()
        response = client.patch(f"/purchases/{purchase['id']}", json={"voucher_number": " 0003-00054321 "}, headers=headers)
        assert response.status_code == 200
        assert response.json()["voucher_number"] == "0003-00054321"

    def test_notes(self, client, headers, purchase_data):
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()
        response = client.patch(f"/purchases/{purchase['id']}/notes", json={"notes": "Falta una caja"}, headers=headers)
        assert response.json()["notes"] == "Falta una caja"

    def test_cancel_twice(self, client, headers, purchase_data):
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()
        assert client.post(f"/purchases/{purchase['id']}/cancel", headers=headers).json()["status"] == "cancelled"
        assert client.post(f"/purchases/{purchase['id']}/cancel", headers=headers).status_code == 409

    def test_delete_only_draft_or_cancelled(self, client, headers, purchase_data):
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()
        assert client.delete(f"/purchases/{purchase['id']}", headers=headers).status_code == 409

        client.post(f"/purchases/{purchase['id']}/cancel", headers=headers)
        assert client.delete(f"/purchases/{purchase['id']}", headers=headers).status_code == 204
        assert client.get(f"/purchases/{purchase['id']}", headers=headers).status_code == 404

    def test_delete_draft(self, client, headers, purchase_data):
        purchase_data["status"] = "draft"
        purchase = client.post("/purchases", json=purchase_data, headers=headers).json()
        assert client.delete(f"/purchases/{purchase['id']}", headers=headers).status_code == 204

    def test_list_filters(self, client, headers, purchase_data):
        client.post("/purchases", json=purchase_data, headers=headers)
        purchase_data.update({"voucher_number": "0004-00000001", "invoice_date": "2026-04-01", "due_date": None})
        client.post("/purchases", json=purchase_data, headers=headers)

        assert client.get("/purchases", headers=headers).json()["total"] == 2
        assert client.get("/purchases", params={"search": "0004"}, headers=headers).json()["total"] == 1
        assert client.get("/purchases", params={"date_from": "2026-03-01"}, headers=headers).json()["total"] == 1
        assert client.get("/purchases", params={"supplier_id": str(uuid4())}, headers=headers).json()["total"] == 0

        other = {"X-Organization-ID": str(uuid4())}
        assert client.get("/purchases", headers=other).json()["total"] == 0
