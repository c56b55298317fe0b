"""
Middleware de contexto de organización y cabeceras de seguridad
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from uuid import UUID
import logging

logger = logging.getLogger(__name__)

ORGANIZATION_HEADER = "X-Organization-ID"

# Rutas sin datos de una organización
PUBLIC_PATHS = ("/docs", "/redoc", "/openapi.json", "/health")


def is_public_path(path: str) -> bool:
    return path == "/" or path.startswith(PUBLIC_PATHS)


class TenantMiddleware(BaseHTTPMiddleware):
    """
    Resuelve la organización de cada request desde X-Organization-ID

    El UUID queda en request.state.tenant_id y lo lee la dependencia TenantId.
    Los preflight de CORS y las rutas públicas no lo requieren.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or is_public_path(request.url.path):
            return await call_next(request)

        raw_value = request.headers.get(ORGANIZATION_HEADER)
        if not raw_value:
            logger.warning(f"{request.method} {request.url.path} rejected: missing {ORGANIZATION_HEADER}")
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"detail": f"Falta la cabecera {ORGANIZATION_HEADER}"}
            )

        try:
            request.state.tenant_id = UUID(raw_value)
        except ValueError:
            logger.warning(f"{request.method} {request.url.path} rejected: invalid {ORGANIZATION_HEADER} '{raw_value}'")
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"detail": f"{ORGANIZATION_HEADER} debe ser un UUID válido"}
            )

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Cabeceras de seguridad para las respuestas de la API

    Las respuestas con datos de una organización no se cachean.
    HSTS solo se envía cuando la API corre detrás de HTTPS (producción).
    """

    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.hsts = hsts

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        if not is_public_path(request.url.path):
            response.headers["Cache-Control"] = "no-store"
        if self.hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
