from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from app.database.database import get_db
from app.dependencies.organizationDependencies import TenantId
from app.core.config import settings
from app.modules.purchases.service import SupplierService, PurchaseService
from app.modules.purchases.models import PurchaseStatus
from app.modules.purchases.schemas import (
    SupplierCreate, SupplierOut, SupplierList,
    PurchaseCreate, PurchaseUpdate, PurchaseNotesUpdate, PurchaseDetail, PurchaseList
)

suppliers_router = APIRouter(prefix="/suppliers", tags=["Suppliers"])
purchases_router = APIRouter(prefix="/purchases", tags=["Purchases"])


# ===== PROVEEDORES =====

@suppliers_router.post("", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(data: SupplierCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Crear proveedor. El CUIT es opcional y se valida con su dígito verificador."""
    service = SupplierService(db)
    return service.create_supplier(data, tenant_id)


@suppliers_router.get("", response_model=SupplierList)
def list_suppliers(
    tenant_id: TenantId,
    search: Optional[str] = Query(None, description="Buscar por nombre o CUIT"),
    active: Optional[bool] = Query(True),
    db: Session = Depends(get_db)
):
    service = SupplierService(db)
    return service.list_suppliers(tenant_id, search, active)


@suppliers_router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.get_supplier(supplier_id, tenant_id)


@suppliers_router.delete("/{supplier_id}", response_model=SupplierOut)
def deactivate_supplier(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Desactivar proveedor (soft delete). Sus compras se conservan."""
    service = SupplierService(db)
    return service.deactivate_supplier(supplier_id, tenant_id)


# ===== COMPRAS =====

@purchases_router.post("", response_model=PurchaseDetail, status_code=status.HTTP_201_CREATED)
def create_purchase(data: PurchaseCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """
    Registrar una compra desde la factura del proveedor

    - El proveedor debe existir y estar activo
    - El comprobante (tipo + número) no puede repetirse para el mismo proveedor
    - Se asigna un número interno correlativo (CMP)
    """
    service = PurchaseService(db)
    return service.create_purchase(data, tenant_id)


@purchases_router.get("", response_model=PurchaseList)
def list_purchases(
    tenant_id: TenantId,
    status_filter: Optional[PurchaseStatus] = Query(None, alias="status"),
    supplier_id: Optional[UUID] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Buscar por número de comprobante"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = PurchaseService(db)
    return service.list_purchases(tenant_id, status_filter, supplier_id, date_from, date_to, search, limit, offset)


@purchases_router.get("/{purchase_id}", response_model=PurchaseDetail)
def get_purchase(purchase_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PurchaseService(db)
    return service.get_purchase(purchase_id, tenant_id)


@purchases_router.patch("/{purchase_id}", response_model=PurchaseDetail)
def update_purchase(purchase_id: UUID, data: PurchaseUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Actualizar compra. Si se envían ítems, reemplazan a los existentes."""
    service = PurchaseService(db)
    return service.update_purchase(purchase_id, data, tenant_id)


@purchases_router.patch("/{purchase_id}/notes", response_model=PurchaseDetail)
def update_purchase_notes(purchase_id: UUID, data: PurchaseNotesUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PurchaseService(db)
    return service.update_notes(purchase_id, data, tenant_id)


@purchases_router.post("/{purchase_id}/cancel", response_model=PurchaseDetail)
def cancel_purchase(purchase_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PurchaseService(db)
    return service.cancel_purchase(purchase_id, tenant_id)


@purchases_router.delete("/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase(purchase_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Eliminar compra. Solo en borrador o cancelada."""
    service = PurchaseService(db)
    service.delete_purchase(purchase_id, tenant_id)
