"""
Tests para el módulo de Clientes

Cubren:
- Alta de clientes con DNI o CUIT/CUIL
- Búsqueda, edición y archivo
- Listas de precios y su asignación
"""

import pytest
from uuid import uuid4


@pytest.fixture
def price_list(client, headers):
    response = client.post("/price-lists", json={
        "name": "Gremio",
        "adjustment_type": "AUMENTO",
        "adjustment_percentage": "15"
    }, headers=headers)
    assert response.status_code == 201
    return response.json()


# ===== TESTS DE CLIENTES =====

class TestCustomers:
    """Tests para el CRUD de clientes"""

    def test_create_with_defaults(self, client, headers):
        response = client.post("/customers", json={"name": "  Juan Pérez  ", "tax_id": "28123456"}, headers=headers)
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Juan Pérez"
        assert data["tax_id_type"] == "DNI"
        assert data["tax_category"] == "Consumidor Final"
        assert data["price_list_id"] is None
        assert data["is_active"] is True

    def test_cuit_is_validated_and_formatted(self, client, headers):
        payload = {"name": "Almacén Don José", "tax_id": "30712345671", "tax_id_type": "CUIT/CUIL",
                   "tax_category": "Responsable Inscripto"}
        response = client.post("/customers", json=payload, headers=headers)
        assert response.status_code == 201
        assert response.json()["tax_id"] == "30-71234567-1"

        payload["tax_id"] = "30-71234567-2"
        assert client.post("/customers", json=payload, headers=headers).status_code == 422

    def test_duplicate_document(self, client, headers):
        payload = {"name": "Juan Pérez", "tax_id": "28123456"}
        assert client.post("/customers", json=payload, headers=headers).status_code == 201
        assert client.post("/customers", json=payload, headers=headers).status_code == 409

    def test_invalid_tax_category(self, client, headers):
        response = client.post("/customers", json={"name": "X", "tax_category": "Otro"}, headers=headers)
        assert response.status_code == 422

    def test_blank_name(self, client, headers):
        assert client.post("/customers", json={"name": "   "}, headers=headers).status_code == 422

    def test_search_and_pagination(self, client, headers):
        client.post("/customers", json={"name": "Juan Pérez", "email": "juan@example.com"}, headers=headers)
        client.post("/customers", json={"name": "Kiosco Central", "trade_name": "El Rápido"}, headers=headers)

        assert client.get("/customers", headers=headers).json()["total"] == 2
        assert client.get("/customers", params={"search": "rápido"}, headers=headers).json()["total"] == 1
        assert client.get("/customers", params={"search": "juan@"}, headers=headers).json()["total"] == 1

        page = client.get("/customers", params={"limit": 1, "offset": 1}, headers=headers).json()
        assert page["total"] == 2
        assert [c["name"] for c in page["customers"]] == ["Kiosco Central"]

    def test_update(self, client, headers):
        customer = client.post("/customers", json={"name": "Juan Pérez"}, headers=headers).json()
        response = client.patch(f"/customers/{customer['id']}", json={"tax_category": "Monotributista", "payment_terms": 15}, headers=headers)
        assert response.status_code == 200
        assert response.json()["tax_category"] == "Monotributista"
        assert response.json()["payment_terms"] == 15

        response = client.patch(f"/customers/{customer['id']}", json={"tax_category": None}, headers=headers)
        assert response.status_code == 422

    def test_archive_and_restore(self, client, headers):
        customer = client.post("/customers", json={"name": "Juan Pérez"}, headers=headers).json()

        response = client.post(f"/customers/{customer['id']}/archive", headers=headers)
        assert response.json()["is_active"] is False
        assert client.get("/customers", headers=headers).json()["total"] == 0
        assert client.get("/customers", params={"active": False}, headers=headers).json()["total"] == 1

        response = client.post(f"/customers/{customer['id']}/restore", headers=headers)
        assert response.json()["is_active"] is True

    def test_isolated_by_organization(self, client, headers):
        customer = client.post("/customers", json={"name": "Juan Pérez"}, headers=headers).json()
        other = {"X-Organization-ID": str(uuid4())}
        assert client.get(f"/customers/{customer['id']}", headers=other).status_code == 404


# ===== TESTS DE LISTAS DE PRECIOS =====

class TestPriceLists:
    """Tests para listas de precios"""

    def test_create(self, price_list):
        assert price_list["adjustment_type"] == "AUMENTO"
        assert price_list["adjustment_percentage"] == "15.00"
        assert price_list["price_rounding"] == "none"

    def test_duplicate_name(self, client, headers, price_list):
        response = client.post("/price-lists", json={"name": "Gremio"}, headers=headers)
        assert response.status_code == 409

    def test_percentage_range(self, client, headers):
        response = client.post("/price-lists", json={"name": "X", "adjustment_percentage": "120"}, headers=headers)
        assert response.status_code == 422

    def test_assign_to_customer(self, client, headers, price_list):
        response = client.post("/customers", json={"name": "Juan Pérez", "price_list_id": price_list["id"]}, headers=headers)
        assert response.status_code == 201
        assert response.json()["price_list_id"] == price_list["id"]

    def test_unknown_or_inactive_list_rejected(self, client, headers, price_list):
        response = client.post("/customers", json={"name": "Juan Pérez", "price_list_id": str(uuid4())}, headers=headers)
        assert response.status_code == 404

        client.delete(f"/price-lists/{price_list['id']}", headers=headers)
        assert client.get("/price-lists", headers=headers).json()["total"] == 0
        response = client.post("/customers", json={"name": "Juan Pérez", "price_list_id": price_list["id"]}, headers=headers)
        assert response.status_code == 400
