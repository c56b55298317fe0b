"""
Tests para utilidades comunes

Cubren:
- Validación y formato de CUIT/CUIL
- Parseo y formato de montos en pesos
- Middleware de organización y cabeceras de seguridad
"""

import pytest
from decimal import Decimal

from app.common.validators import clean_cuit, calculate_cuit_check_digit, validate_cuit, format_cuit
from app.common.currency import to_decimal, round_money, parse_argentine_currency, format_argentine_currency


# ===== TESTS DE CUIT =====

class TestCuit:
    """Tests para el validador de CUIT"""

    @pytest.mark.parametrize("cuit", [
        "20123456786", "20-12345678-6", "30.71234567.1", "30 71234567 1", "25-12345678-8", "26123456784"
    ])
    def test_valid(self, cuit):
        assert validate_cuit(cuit) is True

    @pytest.mark.parametrize("cuit", ["20123456787", "2012345678", "201234567861", "ab123456786", "", "99123456786"])
    def test_invalid(self, cuit):
        assert validate_cuit(cuit) is False

    def test_check_digit(self):
        assert calculate_cuit_check_digit("2012345678") == 6
        assert calculate_cuit_check_digit("3071234567") == 1
        assert calculate_cuit_check_digit("12345") is None

    def test_clean_and_format(self):
        assert clean_cuit("20-12345678-6") == "20123456786"
        assert format_cuit("20123456786") == "20-12345678-6"
        assert format_cuit("123") == "123"


# ===== TESTS DE MONEDA =====

class TestCurrency:
    """Tests para montos en formato argentino"""

    @pytest.mark.parametrize("raw, expected", [
        ("4220,40", Decimal("4220.40")),
        ("4.220,40", Decimal("4220.40")),
        ("$4.220,40", Decimal("4220.40")),
        ("4220", Decimal("4220")),
        ("4220.40", Decimal("4220.40")),
        ("4.220", Decimal("4220")),
        ("1.234.567", Decimal("1234567")),
    ])
    def test_parse(self, raw, expected):
        assert parse_argentine_currency(raw) == expected

    def test_parse_invalid(self):
        assert parse_argentine_currency("") == Decimal("0")
        assert parse_argentine_currency("abc") == Decimal("0")

    def test_format(self):
        assert format_argentine_currency(Decimal("4220.4")) == "$4.220,40"
        assert format_argentine_currency(-1234.5) == "-$1.234,50"
        assert format_argentine_currency(0) == "$0,00"

    def test_rounding(self):
        assert round_money("2.345") == Decimal("2.35")
        assert round_money(Decimal("2.344")) == Decimal("2.34")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == Decimal("0")


# ===== TESTS DE MIDDLEWARE =====

class TestMiddleware:
    """Tests para el contexto de organización y las cabeceras de seguridad"""

    def test_missing_header(self, client):
        response = client.get("/sales")
        assert response.status_code == 400
        assert response.json()["detail"] == "Falta la cabecera X-Organization-ID"

    def test_invalid_header(self, client):
        response = client.get("/sales", headers={"X-Organization-ID": "no-es-uuid"})
        assert response.status_code == 400
        assert response.json()["detail"] == "X-Organization-ID debe ser un UUID válido"

    def test_public_paths(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "Cache-Control" not in response.headers

    def test_organization_responses_not_cached(self, client, headers):
        response = client.get("/sales", headers=headers)
        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "no-store"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_no_hsts_outside_production(self, client, headers):
        response = client.get("/sales", headers=headers)
        assert "Strict-Transport-Security" not in response.headers
