from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_
from decimal import Decimal
from datetime import date
from typing import List, Optional
from uuid import UUID
import logging

from app.core.config import settings
from app.common.currency import round_money
from app.modules.fiscal.models import DocumentType
from app.modules.fiscal.service import DocumentNumberingService
from app.modules.purchases.models import Supplier, Purchase, PurchaseItem, PurchaseStatus
from app.modules.purchases.schemas import (
    SupplierCreate, PurchaseCreate, PurchaseUpdate, PurchaseNotesUpdate,
    PurchaseItemCreate, PurchaseTotals
)

logger = logging.getLogger(__name__)

DUPLICATE_VOUCHER_DETAIL = "Ya existe una compra con ese número de factura para este proveedor"


def calculate_purchase_totals(
    items: List[PurchaseItemCreate],
    discount: Decimal = Decimal("0"),
    tax: Decimal = Decimal("0")
) -> PurchaseTotals:
    """
    Totales de una compra

    subtotal = Σ cantidad × costo unitario
    El descuento se limita al subtotal; el impuesto se suma tal como figura en la factura.
    """
    subtotal = round_money(sum((item.quantity * item.unit_cost for item in items), Decimal("0")))
    applied_discount = round_money(min(max(discount, Decimal("0")), subtotal))
    applied_tax = round_money(tax)

    return PurchaseTotals(
        subtotal=subtotal,
        discount=applied_discount,
        tax=applied_tax,
        total=round_money(subtotal - applied_discount + applied_tax)
    )


def _build_items(items: List[PurchaseItemCreate]) -> List[PurchaseItem]:
    return [
        PurchaseItem(
            product_id=item.product_id,
            name=item.name,
            sku=item.sku,
            type=item.type,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
            subtotal=round_money(item.quantity * item.unit_cost)
        )
        for item in items
    ]


class SupplierService:
    def __init__(self, db: Session):
        self.db = db

    def create_supplier(self, data: SupplierCreate, tenant_id: UUID) -> Supplier:
        try:
            if data.tax_id:
                existing = self.db.query(Supplier).filter(
                    Supplier.tenant_id == tenant_id,
                    Supplier.tax_id == data.tax_id,
                    Supplier.is_active == True
                ).first()
                if existing:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail=f"Ya existe un proveedor con el CUIT {data.tax_id}"
                    )

            supplier = Supplier(**data.model_dump(), tenant_id=tenant_id, is_active=True)
            self.db.add(supplier)
            self.db.commit()
            self.db.refresh(supplier)
            logger.info(f"Supplier {supplier.id} created for tenant {tenant_id}")
            return supplier

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al crear proveedor: {str(e)}"
            )

    def list_suppliers(self, tenant_id: UUID, search: Optional[str] = None, active: Optional[bool] = True) -> dict:
        """Listar proveedores, buscando por nombre o CUIT"""
        query = self.db.query(Supplier).filter(Supplier.tenant_id == tenant_id)

        if search and search.strip():
            term = f"%{search.strip()}%"
            query = query.filter(or_(Supplier.name.ilike(term), Supplier.tax_id.ilike(term)))
        if active is not None:
            query = query.filter(Supplier.is_active == active)

        suppliers = query.order_by(Supplier.name).all()
        return {"suppliers": suppliers, "total": len(suppliers)}

    def get_supplier(self, supplier_id: UUID, tenant_id: UUID) -> Supplier:
        supplier = self.db.query(Supplier).filter(
            Supplier.id == supplier_id,
            Supplier.tenant_id == tenant_id
        ).first()

        if not supplier:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Proveedor no encontrado"
            )
        return supplier

    def deactivate_supplier(self, supplier_id: UUID, tenant_id: UUID) -> Supplier:
        supplier = self.get_supplier(supplier_id, tenant_id)
        supplier.is_active = False
        self.db.commit()
        self.db.refresh(supplier)
        logger.info(f"Supplier {supplier_id} deactivated")
        return supplier


class PurchaseService:
    def __init__(self, db: Session):
        self.db = db
        self.suppliers = SupplierService(db)

    def is_duplicate_voucher(
        self,
        supplier_id: UUID,
        voucher_type: str,
        voucher_number: str,
        tenant_id: UUID,
        exclude_id: Optional[UUID] = None
    ) -> bool:
        """Existe otra compra no anulada con el mismo comprobante del proveedor"""
        query = self.db.query(Purchase.id).filter(
            Purchase.tenant_id == tenant_id,
            Purchase.supplier_id == supplier_id,
            Purchase.voucher_type == voucher_type,
            Purchase.voucher_number == voucher_number,
            Purchase.status != PurchaseStatus.CANCELLED
        )
        if exclude_id is not None:
            query = query.filter(Purchase.id != exclude_id)
        return query.first() is not None

    def create_purchase(self, data: PurchaseCreate, tenant_id: UUID) -> Purchase:
        """Registrar una compra con sus ítems y su número interno (CMP)"""
        try:
            supplier = self.suppliers.get_supplier(data.supplier_id, tenant_id)
            if not supplier.is_active:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="El proveedor está inactivo"
                )

            if self.is_duplicate_voucher(data.supplier_id, data.voucher_type, data.voucher_number, tenant_id):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_VOUCHER_DETAIL)

            totals = calculate_purchase_totals(data.items, data.discount, data.tax)
            number = DocumentNumberingService(self.db).next_document_number(
                tenant_id, settings.DEFAULT_POINT_OF_SALE, DocumentType.PURCHASE
            )

            purchase = Purchase(
                **data.model_dump(exclude={"items", "discount", "tax"}),
                tenant_id=tenant_id,
                purchase_number=number,
                subtotal=totals.subtotal,
                discount=totals.discount,
                tax=totals.tax,
                total=totals.total
            )
            purchase.items = _build_items(data.items)

            self.db.add(purchase)
            self.db.commit()
            self.db.refresh(purchase)
            logger.info(f"Purchase {number} created for tenant {tenant_id}: total {purchase.total}")
            return purchase

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating purchase: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al registrar la compra: {str(e)}"
            )

    def get_purchase(self, purchase_id: UUID, tenant_id: UUID) -> Purchase:
        purchase = self.db.query(Purchase).options(
            selectinload(Purchase.items),
            selectinload(Purchase.supplier)
        ).filter(
            Purchase.id == purchase_id,
            Purchase.tenant_id == tenant_id
        ).first()

        if not purchase:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Compra no encontrada"
            )
        return purchase

    def list_purchases(
        self,
        tenant_id: UUID,
        status_filter: Optional[PurchaseStatus] = None,
        supplier_id: Optional[UUID] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        search: Optional[str] = None,
        limit: int = settings.DEFAULT_PAGE_SIZE,
        offset: int = 0
    ) -> dict:
        try:
            query = self.db.query(Purchase).filter(Purchase.tenant_id == tenant_id)

            if status_filter:
                query = query.filter(Purchase.status == status_filter)
            if supplier_id:
                query = query.filter(Purchase.supplier_id == supplier_id)
            if date_from:
                query = query.filter(Purchase.invoice_date >= date_from)
            if date_to:
                query = query.filter(Purchase.invoice_date <= date_to)
            if search and search.strip():
                query = query.filter(Purchase.voucher_number.ilike(f"%{search.strip()}%"))

            total = query.count()
            purchases = query.order_by(
                Purchase.invoice_date.desc(), Purchase.purchase_number.desc()
            ).offset(offset).limit(limit).all()

            return {"purchases": purchases, "total": total, "limit": limit, "offset": offset}

        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al obtener compras: {str(e)}"
            )

    def update_purchase(self, purchase_id: UUID, data: PurchaseUpdate, tenant_id: UUID) -> Purchase:
        """Actualizar una compra; los ítems se reemplazan si se envían"""
        try:
            purchase = self.get_purchase(purchase_id, tenant_id)

            if purchase.status == PurchaseStatus.CANCELLED:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="No se puede modificar una compra anulada"
                )

            values = data.model_dump(exclude_unset=True, exclude={"items"})
            voucher_type = values.get("voucher_type", purchase.voucher_type)
            voucher_number = values.get("voucher_number", purchase.voucher_number)

            if self.is_duplicate_voucher(purchase.supplier_id, voucher_type, voucher_number, tenant_id, exclude_id=purchase.id):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_VOUCHER_DETAIL)

            discount = values.pop("discount", None)
            tax = values.pop("tax", None)
            for field, value in values.items():
                setattr(purchase, field, value)

            if data.items is not None:
                purchase.items = _build_items(data.items)
                item_rows = data.items
            else:
                item_rows = [
                    PurchaseItemCreate(name=i.name, quantity=i.quantity, unit_cost=i.unit_cost)
                    for i in purchase.items
                ]

            totals = calculate_purchase_totals(
                item_rows,
                discount if discount is not None else purchase.discount,
                tax if tax is not None else purchase.tax
            )
            purchase.subtotal = totals.subtotal
            purchase.discount = totals.discount
            purchase.tax = totals.tax
            purchase.total = totals.total

            if purchase.due_date and purchase.due_date < purchase.invoice_date:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="La fecha de vencimiento no puede ser anterior a la fecha de la factura"
                )

            self.db.commit()
            self.db.refresh(purchase)
            return purchase

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al actualizar la compra: {str(e)}"
            )

    def update_notes(self, purchase_id: UUID, data: PurchaseNotesUpdate, tenant_id: UUID) -> Purchase:
        purchase = self.get_purchase(purchase_id, tenant_id)
        purchase.notes = data.notes
        self.db.commit()
        self.db.refresh(purchase)
        return purchase

    def cancel_purchase(self, purchase_id: UUID, tenant_id: UUID) -> Purchase:
        try:
            purchase = self.get_purchase(purchase_id, tenant_id)

            if purchase.status == PurchaseStatus.CANCELLED:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="La compra ya está cancelada"
                )

            purchase.status = PurchaseStatus.CANCELLED
            self.db.commit()
            self.db.refresh(purchase)
            logger.info(f"Purchase {purchase.purchase_number} cancelled for tenant {tenant_id}")
            return purchase

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al cancelar la compra: {str(e)}"
            )

    def delete_purchase(self, purchase_id: UUID, tenant_id: UUID) -> None:
        """Eliminar una compra en borrador o anulada junto con sus ítems"""
        try:
            purchase = self.get_purchase(purchase_id, tenant_id)

            if purchase.status not in (PurchaseStatus.DRAFT, PurchaseStatus.CANCELLED):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Solo se pueden eliminar compras en borrador o canceladas"
                )

            self.db.delete(purchase)
            self.db.commit()
            logger.info(f"Purchase {purchase.purchase_number} deleted for tenant {tenant_id}")

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al eliminar la compra: {str(e)}"
            )
