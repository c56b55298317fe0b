from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import sync_engine, Base

# Import middleware
from app.common.middleware import TenantMiddleware, SecurityHeadersMiddleware

# Import routers
from app.modules.fiscal.router import fiscal_router
from app.modules.customers.router import customers_router, price_lists_router
from app.modules.sales.router import sales_router
from app.modules.purchases.router import suppliers_router, purchases_router
from app.modules.files.router import router as files_router

# Import models for table creation
import app.modules.fiscal.models
import app.modules.customers.models
import app.modules.sales.models
import app.modules.purchases.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="Mostrador API",
    description="API multi-organización para mostrador de ventas, compras y datos fiscales (ARCA)",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware, hsts=settings.ENVIRONMENT == "production")
app.add_middleware(TenantMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(fiscal_router)
app.include_router(customers_router)
app.include_router(price_lists_router)
app.include_router(sales_router)
app.include_router(suppliers_router)
app.include_router(purchases_router)
app.include_router(files_router)

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=sync_engine)


@app.get("/")
async def read_root():
    return {
        "message": "Mostrador API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.on_event("startup")
async def startup_event():
    logger.info("Mostrador API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"Currency: {settings.CURRENCY}, default VAT: {settings.DEFAULT_TAX_RATE}%")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Mostrador API shutting down...")
