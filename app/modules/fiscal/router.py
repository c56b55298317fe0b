from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.database.database import get_db
from app.dependencies.organizationDependencies import TenantId
from app.core.config import settings
from app.modules.fiscal.service import FiscalConfigService, FiscalPointOfSaleService, DocumentNumberingService
from app.modules.fiscal.schemas import (
    FiscalConfigSave, FiscalSettingsUpdate, FiscalConfigOut,
    FiscalPointOfSaleCreate, FiscalPointOfSaleOut, FiscalPointOfSaleList,
    AvailableVoucherTypes, NextDocumentNumber, DocumentType
)

fiscal_router = APIRouter(prefix="/fiscal", tags=["Fiscal"])


# ===== DATOS FISCALES =====

@fiscal_router.get("/config", response_model=FiscalConfigOut)
def get_fiscal_config(tenant_id: TenantId, db: Session = Depends(get_db)):
    """Obtener los datos fiscales de la organización"""
    service = FiscalConfigService(db)
    return service.get_config_or_404(tenant_id)


@fiscal_router.put("/config", response_model=FiscalConfigOut)
def save_fiscal_config(
    data: FiscalConfigSave,
    tenant_id: TenantId,
    db: Session = Depends(get_db)
):
    """
    Crear o actualizar los datos fiscales

    El CUIT se valida con su dígito verificador y se guarda con formato XX-XXXXXXXX-X.
    La condición frente al IVA determina qué facturas puede emitir la organización.
    """
    service = FiscalConfigService(db)
    return service.save_config(data, tenant_id)


@fiscal_router.patch("/config/settings", response_model=FiscalConfigOut)
def update_fiscal_settings(
    data: FiscalSettingsUpdate,
    tenant_id: TenantId,
    db: Session = Depends(get_db)
):
    """Actualizar configuración impositiva: agentes de percepción/retención, CBU FCE, delegación"""
    service = FiscalConfigService(db)
    return service.update_settings(data, tenant_id)


@fiscal_router.post("/config/confirm-delegation", response_model=FiscalConfigOut)
def confirm_delegation(tenant_id: TenantId, db: Session = Depends(get_db)):
    """Confirmar la delegación del web service de facturación en ARCA"""
    service = FiscalConfigService(db)
    return service.confirm_delegation(tenant_id)


@fiscal_router.get("/voucher-types", response_model=AvailableVoucherTypes)
def get_voucher_types(
    tenant_id: TenantId,
    receiver_tax_category: Optional[str] = Query(None, description="Condición IVA del cliente"),
    db: Session = Depends(get_db)
):
    """
    Comprobantes disponibles para un receptor

    - Siempre incluye el Comprobante X (interno)
    - El comprobante fiscal depende de la condición del emisor y del receptor
    """
    service = FiscalConfigService(db)
    return service.get_available_voucher_types(tenant_id, receiver_tax_category)


# ===== PUNTOS DE VENTA =====

@fiscal_router.post("/points-of-sale", response_model=FiscalPointOfSaleOut, status_code=status.HTTP_201_CREATED)
def create_point_of_sale(
    data: FiscalPointOfSaleCreate,
    tenant_id: TenantId,
    db: Session = Depends(get_db)
):
    """Registrar un punto de venta fiscal. El número no puede repetirse en la organización."""
    service = FiscalPointOfSaleService(db)
    return service.create_point_of_sale(data, tenant_id)


@fiscal_router.get("/points-of-sale", response_model=FiscalPointOfSaleList)
def list_points_of_sale(tenant_id: TenantId, db: Session = Depends(get_db)):
    """Listar puntos de venta activos ordenados por número"""
    service = FiscalPointOfSaleService(db)
    return service.list_points_of_sale(tenant_id)


@fiscal_router.delete("/points-of-sale/{pos_id}", response_model=FiscalPointOfSaleOut)
def deactivate_point_of_sale(
    pos_id: UUID,
    tenant_id: TenantId,
    db: Session = Depends(get_db)
):
    """Desactivar un punto de venta (no se elimina para conservar la numeración)"""
    service = FiscalPointOfSaleService(db)
    return service.deactivate_point_of_sale(pos_id, tenant_id)


# ===== NUMERACIÓN =====

@fiscal_router.get("/sequences/next", response_model=NextDocumentNumber)
def get_next_document_number(
    tenant_id: TenantId,
    document_type: DocumentType = Query(DocumentType.SALE),
    point_of_sale: int = Query(settings.DEFAULT_POINT_OF_SALE, ge=1, le=99999),
    db: Session = Depends(get_db)
):
    """Consultar el próximo número de comprobante sin reservarlo"""
    service = DocumentNumberingService(db)
    return service.peek_next_number(tenant_id, point_of_sale, document_type)
