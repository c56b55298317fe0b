"""
Tests para el módulo de Archivos

Cubren:
- Validación de tipo MIME y tamaño por tipo de archivo
- Formato de las claves de almacenamiento
- Endpoints de URLs prefirmadas (con un cliente de MinIO falso)
"""

import pytest
from uuid import uuid4
from fastapi import HTTPException

from app.main import app
from app.modules.files.schemas import UploadKind
from app.modules.files.service import MinIOService, validate_upload, safe_filename, get_minio_service


class FakeMinio:
    """Cliente que solo arma URLs, sin red"""

    def __init__(self):
        self.calls = []

    def presigned_put_object(self, bucket_name, object_name, expires):
        self.calls.append(("put", object_name))
        return f"http://minio.local/{bucket_name}/{object_name}?upload"

    def presigned_get_object(self, bucket_name, object_name, expires):
        self.calls.append(("get", object_name))
        return f"http://minio.local/{bucket_name}/{object_name}?download"


@pytest.fixture
def fake_minio():
    return FakeMinio()


@pytest.fixture
def storage_client(client, fake_minio):
    service = MinIOService(client=fake_minio)
    app.dependency_overrides[get_minio_service] = lambda: service
    yield client
    app.dependency_overrides.pop(get_minio_service, None)


# ===== TESTS DE VALIDACIÓN =====

class TestValidateUpload:
    """Tests para las reglas de subida"""

    def test_logo_ok(self):
        validate_upload(UploadKind.LOGO, "image/png", 500 * 1024)

    def test_logo_wrong_type(self):
        with pytest.raises(HTTPException) as exc:
            validate_upload(UploadKind.LOGO, "application/pdf", 1000)
        assert exc.value.status_code == 400

    def test_logo_too_large(self):
        with pytest.raises(HTTPException) as exc:
            validate_upload(UploadKind.LOGO, "image/jpeg", 2 * 1024 * 1024 + 1)
        assert exc.value.status_code == 413

    def test_certificate_limit(self):
        validate_upload(UploadKind.ARCA_CERTIFICATE, "application/x-x509-ca-cert", 100 * 1024)
        with pytest.raises(HTTPException) as exc:
            validate_upload(UploadKind.ARCA_CERTIFICATE, "application/x-pem-file", 100 * 1024 + 1)
        assert exc.value.status_code == 413

    def test_attachment_accepts_pdf(self):
        validate_upload(UploadKind.PURCHASE_ATTACHMENT, "application/pdf", 9 * 1024 * 1024)

    def test_empty_file(self):
        with pytest.raises(HTTPException) as exc:
            validate_upload(UploadKind.PURCHASE_ATTACHMENT, "application/pdf", 0)
        assert exc.value.status_code == 400


class TestFileKeys:
    """Tests para las claves de almacenamiento"""

    def test_safe_filename(self):
        assert safe_filename("../../etc/passwd") == "passwd"
        assert safe_filename("factura enero (1).pdf") == "factura_enero__1_.pdf"

    def test_key_structure(self, fake_minio):
        tenant_id = uuid4()
        file_id = uuid4()
        key = MinIOService(client=fake_minio).generate_file_key(tenant_id, UploadKind.LOGO, "logo.png", file_id)

        parts = key.split("/")
        assert parts[0] == str(tenant_id)
        assert parts[1] == "logo"
        assert len(parts) == 6
        assert parts[-1] == f"{file_id}-logo.png"


# ===== TESTS DE ENDPOINTS =====

class TestFileEndpoints:
    """Tests para las URLs prefirmadas"""

    def test_upload_url(self, storage_client, headers, tenant_id, fake_minio):
        response = storage_client.post("/files/upload-url", json={
            "filename": "factura.pdf",
            "content_type": "application/pdf",
            "size": 20480,
            "kind": "purchase_attachment"
        }, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["key"].startswith(f"{tenant_id}/purchase_attachment/")
        assert data["upload_url"].endswith("?upload")
        assert data["expires_in"] == 900
        assert fake_minio.calls == [("put", data["key"])]

    def test_upload_rejected(self, storage_client, headers, fake_minio):
        response = storage_client.post("/files/upload-url", json={
            "filename": "logo.gif",
            "content_type": "image/gif",
            "size": 1024,
            "kind": "logo"
        }, headers=headers)
        assert response.status_code == 400
        assert fake_minio.calls == []

    def test_download_own_key(self, storage_client, headers, tenant_id):
        key = f"{tenant_id}/logo/2026/01/01/{uuid4()}-logo.png"
        response = storage_client.get("/files/download-url", params={"key": key}, headers=headers)
        assert response.status_code == 200
        assert response.json()["key"] == key

    def test_download_other_organization(self, storage_client, headers):
        key = f"{uuid4()}/logo/2026/01/01/{uuid4()}-logo.png"
        response = storage_client.get("/files/download-url", params={"key": key}, headers=headers)
        assert response.status_code == 403

    def test_requires_organization_header(self, storage_client):
        response = storage_client.get("/files/download-url", params={"key": "x"})
        assert response.status_code == 400
