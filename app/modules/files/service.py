"""
MinIO service for file operations with presigned URLs
"""
from minio import Minio
from minio.error import S3Error
from fastapi import HTTPException, status
from typing import Optional
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4
import logging
import re

from app.core.config import settings
from app.modules.files.schemas import UploadKind, FileUploadRequest, FileUploadResponse, FileDownloadResponse

logger = logging.getLogger(__name__)

IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp"}
CERTIFICATE_TYPES = {
    "application/x-x509-ca-cert",
    "application/x-x509-user-cert",
    "application/pkix-cert",
    "application/x-pem-file",
    "application/octet-stream",
}

ALLOWED_TYPES = {
    UploadKind.LOGO: IMAGE_TYPES,
    UploadKind.ARCA_CERTIFICATE: CERTIFICATE_TYPES,
    UploadKind.PURCHASE_ATTACHMENT: IMAGE_TYPES | {"application/pdf"},
}


def max_size_for(kind: UploadKind) -> int:
    return {
        UploadKind.LOGO: settings.MAX_LOGO_SIZE,
        UploadKind.ARCA_CERTIFICATE: settings.MAX_CERTIFICATE_SIZE,
        UploadKind.PURCHASE_ATTACHMENT: settings.MAX_ATTACHMENT_SIZE,
    }[kind]


def validate_upload(kind: UploadKind, content_type: str, size: int) -> None:
    """Validate MIME type and size for an upload kind"""
    if content_type not in ALLOWED_TYPES[kind]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Tipo de archivo {content_type} no permitido para {kind.value}"
        )
    if size <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El archivo está vacío"
        )
    limit = max_size_for(kind)
    if size > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"El archivo supera el tamaño máximo de {limit // 1024} KB"
        )


def safe_filename(filename: str) -> str:
    """Keep the base name and replace characters outside [A-Za-z0-9._-]"""
    base = filename.replace("\\", "/").split("/")[-1]
    return re.sub(r"[^A-Za-z0-9._-]", "_", base) or "file"


class MinIOService:
    """Service for handling MinIO operations with presigned URLs"""

    def __init__(self, client: Optional[Minio] = None):
        self._client = client
        self.bucket_name = settings.MINIO_BUCKET_NAME

    @property
    def client(self) -> Minio:
        # Se conecta recién en el primer uso
        if self._client is None:
            self._client = Minio(
                settings.minio_endpoint,
                access_key=settings.MINIO_ACCESS_KEY,
                secret_key=settings.MINIO_SECRET_KEY,
                secure=settings.MINIO_USE_SSL
            )
            self._ensure_bucket_exists()
        return self._client

    def _ensure_bucket_exists(self):
        """Ensure the bucket exists, create if it doesn't"""
        try:
            if not self._client.bucket_exists(self.bucket_name):
                self._client.make_bucket(self.bucket_name)
                logger.info(f"Created MinIO bucket: {self.bucket_name}")
        except S3Error as e:
            logger.error(f"MinIO bucket setup error: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="File storage service unavailable"
            )

    def generate_file_key(self, tenant_id: UUID, kind: UploadKind, filename: str, file_id: UUID = None) -> str:
        """Structure: tenant_id/kind/yyyy/mm/dd/file_id-filename"""
        if not file_id:
            file_id = uuid4()

        now = datetime.now(timezone.utc)
        return f"{tenant_id}/{kind.value}/{now.year}/{now.month:02d}/{now.day:02d}/{file_id}-{safe_filename(filename)}"

    def get_presigned_upload_url(
        self,
        tenant_id: UUID,
        file_request: FileUploadRequest,
        expires: timedelta = timedelta(minutes=15)
    ) -> FileUploadResponse:
        """Generate presigned URL for file upload"""
        validate_upload(file_request.kind, file_request.content_type, file_request.size)

        file_id = uuid4()
        key = self.generate_file_key(tenant_id, file_request.kind, file_request.filename, file_id)

        try:
            upload_url = self.client.presigned_put_object(
                bucket_name=self.bucket_name,
                object_name=key,
                expires=expires
            )
        except S3Error as e:
            logger.error(f"MinIO upload URL generation error: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not generate upload URL"
            )

        logger.info(f"Upload URL issued for {key}")
        return FileUploadResponse(
            file_id=file_id,
            upload_url=upload_url,
            key=key,
            expires_in=int(expires.total_seconds())
        )

    def get_presigned_download_url(
        self,
        tenant_id: UUID,
        key: str,
        expires: timedelta = timedelta(hours=1)
    ) -> FileDownloadResponse:
        """Generate presigned URL for a key inside the organization's prefix"""
        if not key.startswith(f"{tenant_id}/") or ".." in key:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="El archivo no pertenece a la organización"
            )

        try:
            download_url = self.client.presigned_get_object(
                bucket_name=self.bucket_name,
                object_name=key,
                expires=expires
            )
        except S3Error as e:
            logger.error(f"MinIO download URL generation error: {e}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="File not found"
            )

        return FileDownloadResponse(
            download_url=download_url,
            key=key,
            expires_in=int(expires.total_seconds())
        )


minio_service = MinIOService()


def get_minio_service() -> MinIOService:
    return minio_service
