"""
Tests para el módulo Fiscal

Cubren:
- Reglas de tipo de comprobante (emisor/receptor)
- Numeración correlativa por punto de venta y tipo de documento
- Endpoints de datos fiscales, puntos de venta y comprobantes disponibles
"""

import pytest
from uuid import uuid4

from app.modules.fiscal.models import DocumentType
from app.modules.fiscal.service import DocumentNumberingService, format_document_number
from app.modules.fiscal.vouchers import (
    determine_voucher_type, get_available_voucher_types,
    is_fiscal_voucher, get_voucher_display_name
)


@pytest.fixture
def fiscal_config_data():
    return {
        "cuit": "20123456786",
        "legal_name": "  Almacén Don Pedro  ",
        "vat_condition": "Responsable Inscripto",
        "city": "Rosario",
        "province": "Santa Fe"
    }


# ===== TESTS DE TIPOS DE COMPROBANTE =====

class TestVoucherRules:
    """Tests para la elección del comprobante fiscal"""

    def test_responsable_inscripto_to_responsable_inscripto(self):
        assert determine_voucher_type("Responsable Inscripto", "Responsable Inscripto") == "FACTURA_A"

    def test_responsable_inscripto_to_consumidor_final(self):
        assert determine_voucher_type("Responsable Inscripto", "Consumidor Final") == "FACTURA_B"
        assert determine_voucher_type("Responsable Inscripto", None) == "FACTURA_B"

    def test_monotributista_always_c(self):
        assert determine_voucher_type("Monotributista", "Responsable Inscripto") == "FACTURA_C"
        assert determine_voucher_type("Monotributo Social", None) == "FACTURA_C"

    def test_exento_always_c(self):
        assert determine_voucher_type("IVA Exento", "Responsable Inscripto") == "FACTURA_C"

    def test_unknown_issuer_falls_back_to_c(self):
        assert determine_voucher_type("", None) == "FACTURA_C"

    def test_available_types_include_comprobante_x(self):
        assert get_available_voucher_types("Responsable Inscripto", "RI") == ["COMPROBANTE_X", "FACTURA_A"]

    def test_is_fiscal(self):
        assert is_fiscal_voucher("FACTURA_B") is True
        assert is_fiscal_voucher("NC_C") is True
        assert is_fiscal_voucher("COMPROBANTE_X") is False

    def test_display_names(self):
        assert get_voucher_display_name("NC_A") == "Nota de Crédito A"
        assert get_voucher_display_name("COMPROBANTE_X") == "Comprobante X"
        assert get_voucher_display_name("DESCONOCIDO") == "DESCONOCIDO"


# ===== TESTS DE NUMERACIÓN =====

class TestDocumentNumbering:
    """Tests para la numeración correlativa"""

    def test_format(self):
        assert format_document_number(DocumentType.SALE, 1, 42) == "VTA-00001-00000042"
        assert format_document_number(DocumentType.PAYMENT_RECEIPT, 3, 1) == "RCB-00003-00000001"

    def test_sequential_numbers(self, db_session, tenant_id):
        service = DocumentNumberingService(db_session)

        first = service.next_document_number(tenant_id, 1, DocumentType.SALE)
        second = service.next_document_number(tenant_id, 1, DocumentType.SALE)
        db_session.commit()

        assert first == "VTA-00001-00000001"
        assert second == "VTA-00001-00000002"

    def test_sequences_are_independent(self, db_session, tenant_id):
        service = DocumentNumberingService(db_session)

        service.next_document_number(tenant_id, 1, DocumentType.SALE)
        assert service.next_document_number(tenant_id, 2, DocumentType.SALE) == "VTA-00002-00000001"
        assert service.next_document_number(tenant_id, 1, DocumentType.PURCHASE) == "CMP-00001-00000001"
        assert service.next_document_number(uuid4(), 1, DocumentType.SALE) == "VTA-00001-00000001"

    def test_peek_does_not_consume(self, db_session, tenant_id):
        service = DocumentNumberingService(db_session)
        service.next_document_number(tenant_id, 1, DocumentType.QUOTE)
        db_session.commit()

        peeked = service.peek_next_number(tenant_id, 1, DocumentType.QUOTE)
        assert peeked.next_number == "PRE-00001-00000002"
        assert service.peek_next_number(tenant_id, 1, DocumentType.QUOTE).current_sequence == 2

    def test_rollback_discards_number(self, db_session, tenant_id):
        service = DocumentNumberingService(db_session)
        service.next_document_number(tenant_id, 1, DocumentType.SALE)
        db_session.commit()

        service.next_document_number(tenant_id, 1, DocumentType.SALE)
        db_session.rollback()

        assert service.next_document_number(tenant_id, 1, DocumentType.SALE) == "VTA-00001-00000002"


# ===== TESTS DE ENDPOINTS =====

class TestFiscalConfigEndpoints:
    """Tests para los datos fiscales de la organización"""

    def test_missing_organization_header(self, client):
        response = client.get("/fiscal/config")
        assert response.status_code == 400

    def test_config_not_found(self, client, headers):
        response = client.get("/fiscal/config", headers=headers)
        assert response.status_code == 404

    def test_save_and_update_config(self, client, headers, fiscal_config_data):
        response = client.put("/fiscal/config", json=fiscal_config_data, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["cuit"] == "20-12345678-6"
        assert data["legal_name"] == "Almacén Don Pedro"
        assert data["delegation_confirmed"] is False

        fiscal_config_data["vat_condition"] = "Monotributista"
        response = client.put("/fiscal/config", json=fiscal_config_data, headers=headers)
        assert response.status_code == 200
        assert response.json()["id"] == data["id"]
        assert response.json()["vat_condition"] == "Monotributista"

    def test_invalid_cuit_rejected(self, client, headers, fiscal_config_data):
        fiscal_config_data["cuit"] = "20-12345678-0"
        response = client.put("/fiscal/config", json=fiscal_config_data, headers=headers)
        assert response.status_code == 422

    def test_confirm_delegation_requires_steps(self, client, headers, fiscal_config_data):
        client.put("/fiscal/config", json=fiscal_config_data, headers=headers)

        response = client.post("/fiscal/config/confirm-delegation", headers=headers)
        assert response.status_code == 400

        client.patch(
            "/fiscal/config/settings",
            json={"web_service_delegation": True, "arca_point_of_sale_created": True},
            headers=headers
        )
        response = client.post("/fiscal/config/confirm-delegation", headers=headers)
        assert response.status_code == 200
        assert response.json()["delegation_confirmed"] is True
        assert response.json()["delegation_confirmed_at"] is not None

    def test_invalid_cbu_rejected(self, client, headers, fiscal_config_data):
        client.put("/fiscal/config", json=fiscal_config_data, headers=headers)
        response = client.patch("/fiscal/config/settings", json={"fce_cbu": "123"}, headers=headers)
        assert response.status_code == 422


class TestVoucherTypesEndpoint:
    """Tests para comprobantes disponibles"""

    def test_without_fiscal_config_only_x(self, client, headers):
        response = client.get("/fiscal/voucher-types", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["default"] == "COMPROBANTE_X"
        assert [o["code"] for o in data["options"]] == ["COMPROBANTE_X"]

    def test_responsable_inscripto_receiver(self, client, headers, fiscal_config_data):
        client.put("/fiscal/config", json=fiscal_config_data, headers=headers)

        response = client.get(
            "/fiscal/voucher-types",
            params={"receiver_tax_category": "Responsable Inscripto"},
            headers=headers
        )
        data = response.json()
        assert data["default"] == "FACTURA_A"
        assert data["options"][1] == {"code": "FACTURA_A", "name": "Factura A", "is_fiscal": True}


class TestPointsOfSaleEndpoints:
    """Tests para puntos de venta fiscales"""

    def test_duplicate_number_conflict(self, client, headers):
        payload = {"number": 1, "name": "Caja principal"}
        assert client.post("/fiscal/points-of-sale", json=payload, headers=headers).status_code == 201

        response = client.post("/fiscal/points-of-sale", json=payload, headers=headers)
        assert response.status_code == 409

    def test_same_number_other_organization(self, client, headers):
        payload = {"number": 1, "name": "Caja principal"}
        client.post("/fiscal/points-of-sale", json=payload, headers=headers)

        other = {"X-Organization-ID": str(uuid4())}
        assert client.post("/fiscal/points-of-sale", json=payload, headers=other).status_code == 201

    def test_list_active_ordered(self, client, headers):
        client.post("/fiscal/points-of-sale", json={"number": 3, "name": "Sucursal"}, headers=headers)
        client.post("/fiscal/points-of-sale", json={"number": 1, "name": "Central"}, headers=headers)
        created = client.post("/fiscal/points-of-sale", json={"number": 2, "name": "Depósito"}, headers=headers)

        client.delete(f"/fiscal/points-of-sale/{created.json()['id']}", headers=headers)

        data = client.get("/fiscal/points-of-sale", headers=headers).json()
        assert data["total"] == 2
        assert [p["number"] for p in data["points_of_sale"]] == [1, 3]

    def test_number_out_of_range(self, client, headers):
        response = client.post("/fiscal/points-of-sale", json={"number": 100000, "name": "X"}, headers=headers)
        assert response.status_code == 422

    def test_peek_next_number(self, client, headers):
        response = client.get(
            "/fiscal/sequences/next",
            params={"document_type": "quote", "point_of_sale": 4},
            headers=headers
        )
        assert response.status_code == 200
        assert response.json()["document_type"] == "quote"
        assert response.json()["next_number"] == "PRE-00004-00000001"

    def test_unknown_document_type(self, client, headers):
        response = client.get("/fiscal/sequences/next", params={"document_type": "transfer"}, headers=headers)
        assert response.status_code == 422
