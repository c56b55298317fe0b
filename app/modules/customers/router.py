from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.database.database import get_db
from app.dependencies.organizationDependencies import TenantId
from app.core.config import settings
from app.modules.customers.service import CustomerService, PriceListService
from app.modules.customers.schemas import (
    PriceListCreate, PriceListOut, PriceListList,
    CustomerCreate, CustomerUpdate, CustomerOut, CustomerList
)

customers_router = APIRouter(prefix="/customers", tags=["Customers"])
price_lists_router = APIRouter(prefix="/price-lists", tags=["Price Lists"])


# ===== LISTAS DE PRECIOS =====

@price_lists_router.post("", response_model=PriceListOut, status_code=status.HTTP_201_CREATED)
def create_price_list(data: PriceListCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Crear lista de precios (aumento o descuento porcentual y redondeo)"""
    service = PriceListService(db)
    return service.create_price_list(data, tenant_id)


@price_lists_router.get("", response_model=PriceListList)
def list_price_lists(tenant_id: TenantId, active_only: bool = Query(True), db: Session = Depends(get_db)):
    service = PriceListService(db)
    return service.list_price_lists(tenant_id, active_only)


@price_lists_router.get("/{price_list_id}", response_model=PriceListOut)
def get_price_list(price_list_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PriceListService(db)
    return service.get_price_list(price_list_id, tenant_id)


@price_lists_router.delete("/{price_list_id}", response_model=PriceListOut)
def deactivate_price_list(price_list_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PriceListService(db)
    return service.deactivate_price_list(price_list_id, tenant_id)


# ===== CLIENTES =====

@customers_router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Crear cliente. Con documento CUIT/CUIL se valida el dígito verificador."""
    service = CustomerService(db)
    return service.create_customer(data, tenant_id)


@customers_router.get("", response_model=CustomerList)
def list_customers(
    tenant_id: TenantId,
    search: Optional[str] = Query(None, description="Buscar por nombre, documento o email"),
    active: Optional[bool] = Query(True),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = CustomerService(db)
    return service.list_customers(tenant_id, search, active, limit, offset)


@customers_router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.get_customer(customer_id, tenant_id)


@customers_router.patch("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: UUID, data: CustomerUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.update_customer(customer_id, data, tenant_id)


@customers_router.post("/{customer_id}/archive", response_model=CustomerOut)
def archive_customer(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Archivar cliente. No puede usarse en nuevas ventas ni presupuestos."""
    service = CustomerService(db)
    return service.set_active(customer_id, tenant_id, False)


@customers_router.post("/{customer_id}/restore", response_model=CustomerOut)
def restore_customer(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.set_active(customer_id, tenant_id, True)
