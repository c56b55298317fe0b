"""
Pydantic schemas for file operations
"""
from pydantic import BaseModel, Field
from uuid import UUID
from enum import Enum


class UploadKind(str, Enum):
    LOGO = "logo"                                # Logo de la organización
    ARCA_CERTIFICATE = "arca_certificate"        # Certificado / clave para ARCA
    PURCHASE_ATTACHMENT = "purchase_attachment"  # Factura escaneada del proveedor


class FileUploadRequest(BaseModel):
    """Request to get a presigned upload URL"""
    filename: str = Field(..., min_length=1, max_length=255, description="Original filename with extension")
    content_type: str = Field(..., description="MIME type of the file")
    size: int = Field(..., gt=0, description="File size in bytes")
    kind: UploadKind = Field(..., description="Upload context")


class FileUploadResponse(BaseModel):
    """Response with presigned upload URL and metadata"""
    file_id: UUID
    upload_url: str
    key: str
    expires_in: int = Field(description="URL expiration time in seconds")


class FileDownloadResponse(BaseModel):
    """Response with presigned download URL"""
    download_url: str
    key: str
    expires_in: int = Field(description="URL expiration time in seconds")
