"""
File management router with presigned URLs
"""
from fastapi import APIRouter, Depends, Query

from app.dependencies.organizationDependencies import TenantId
from app.modules.files.service import MinIOService, get_minio_service
from app.modules.files.schemas import FileUploadRequest, FileUploadResponse, FileDownloadResponse

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("/upload-url", response_model=FileUploadResponse)
def get_upload_url(
    upload_request: FileUploadRequest,
    tenant_id: TenantId,
    storage: MinIOService = Depends(get_minio_service)
):
    """
    Generate a presigned URL for file upload.
    Client should use this URL to upload the file directly to MinIO.

    - logo: PNG, JPEG o WebP, hasta 2 MB
    - arca_certificate: certificado o clave, hasta 100 KB
    - purchase_attachment: PDF o imagen, hasta 10 MB
    """
    return storage.get_presigned_upload_url(tenant_id, upload_request)


@router.get("/download-url", response_model=FileDownloadResponse)
def get_download_url(
    tenant_id: TenantId,
    key: str = Query(..., min_length=1),
    storage: MinIOService = Depends(get_minio_service)
):
    """Generate a presigned URL for file download."""
    return storage.get_presigned_download_url(tenant_id, key)
