"""
Módulo de Archivos - Mostrador

Subida y descarga de archivos mediante URLs prefirmadas de MinIO:

- Logo de la organización
- Certificado y clave para ARCA
- Facturas escaneadas adjuntas a compras

Las claves se guardan bajo el prefijo de la organización:
{organization_id}/{tipo}/{aaaa}/{mm}/{dd}/{file_id}-{nombre}
"""

from .schemas import UploadKind, FileUploadRequest, FileUploadResponse, FileDownloadResponse
from .service import MinIOService, validate_upload, get_minio_service
from .router import router as files_router

__all__ = [
    "UploadKind", "FileUploadRequest", "FileUploadResponse", "FileDownloadResponse",
    "MinIOService", "validate_upload", "get_minio_service",
    "files_router",
]
