from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
import logging

from app.modules.fiscal.models import FiscalConfig, FiscalPointOfSale, DocumentSequence, DocumentType
from app.modules.fiscal.schemas import (
    FiscalConfigSave, FiscalSettingsUpdate, FiscalPointOfSaleCreate,
    AvailableVoucherTypes, VoucherTypeOption, NextDocumentNumber
)
from app.modules.fiscal.vouchers import (
    VoucherType, get_available_voucher_types, get_voucher_display_name, is_fiscal_voucher
)

logger = logging.getLogger(__name__)


DOCUMENT_PREFIXES = {
    DocumentType.SALE: "VTA",
    DocumentType.PURCHASE: "CMP",
    DocumentType.PAYMENT_RECEIPT: "RCB",
    DocumentType.QUOTE: "PRE",
}


def format_document_number(document_type: DocumentType, point_of_sale: int, number: int) -> str:
    """VTA-00001-00000042"""
    return f"{DOCUMENT_PREFIXES[document_type]}-{point_of_sale:05d}-{number:08d}"


class FiscalConfigService:
    def __init__(self, db: Session):
        self.db = db

    def get_config(self, tenant_id: UUID) -> Optional[FiscalConfig]:
        return self.db.query(FiscalConfig).filter(FiscalConfig.tenant_id == tenant_id).first()

    def get_config_or_404(self, tenant_id: UUID) -> FiscalConfig:
        config = self.get_config(tenant_id)
        if not config:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="La organización no tiene datos fiscales configurados"
            )
        return config

    def save_config(self, data: FiscalConfigSave, tenant_id: UUID) -> FiscalConfig:
        """Crear o actualizar los datos fiscales de la organización"""
        try:
            config = self.get_config(tenant_id)
            values = data.model_dump()
            values["vat_condition"] = data.vat_condition.value

            if config:
                for field, value in values.items():
                    setattr(config, field, value)
                logger.info(f"Fiscal config updated for tenant {tenant_id}")
            else:
                config = FiscalConfig(**values, tenant_id=tenant_id)
                self.db.add(config)
                logger.info(f"Fiscal config created for tenant {tenant_id}")

            self.db.commit()
            self.db.refresh(config)
            return config

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error saving fiscal config: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al guardar los datos fiscales: {str(e)}"
            )

    def update_settings(self, data: FiscalSettingsUpdate, tenant_id: UUID) -> FiscalConfig:
        """Actualizar la configuración impositiva (agentes, CBU, delegación)"""
        try:
            config = self.get_config_or_404(tenant_id)

            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(config, field, value)

            self.db.commit()
            self.db.refresh(config)
            return config

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al actualizar la configuración fiscal: {str(e)}"
            )

    def confirm_delegation(self, tenant_id: UUID) -> FiscalConfig:
        """
        Confirmar la delegación del web service de facturación

        Requiere que el usuario haya marcado la delegación y la creación del
        punto de venta en ARCA.
        """
        try:
            config = self.get_config_or_404(tenant_id)

            if not config.web_service_delegation or not config.arca_point_of_sale_created:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Debe delegar el web service y crear el punto de venta en ARCA antes de confirmar"
                )

            config.delegation_confirmed = True
            config.delegation_confirmed_at = datetime.now(timezone.utc)
            self.db.commit()
            self.db.refresh(config)
            logger.info(f"ARCA delegation confirmed for tenant {tenant_id}")
            return config

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al confirmar la delegación: {str(e)}"
            )

    def get_available_voucher_types(
        self,
        tenant_id: UUID,
        receiver_tax_category: Optional[str] = None
    ) -> AvailableVoucherTypes:
        """
        Tipos de comprobante que puede emitir la organización para un receptor

        Sin datos fiscales solo se puede emitir el comprobante interno X.
        Con datos fiscales el tipo sugerido es el comprobante fiscal.
        """
        config = self.get_config(tenant_id)

        if not config:
            codes = [VoucherType.COMPROBANTE_X.value]
        else:
            codes = get_available_voucher_types(config.vat_condition, receiver_tax_category)

        options = [
            VoucherTypeOption(code=code, name=get_voucher_display_name(code), is_fiscal=is_fiscal_voucher(code))
            for code in codes
        ]
        return AvailableVoucherTypes(default=codes[-1], options=options)

    def resolve_voucher_type(
        self,
        tenant_id: UUID,
        requested: Optional[str] = None,
        receiver_tax_category: Optional[str] = None
    ) -> str:
        """Validar el comprobante solicitado o devolver el sugerido"""
        available = self.get_available_voucher_types(tenant_id, receiver_tax_category)
        if requested is None:
            return available.default

        codes = [option.code for option in available.options]
        if requested not in codes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"El comprobante {get_voucher_display_name(requested)} no está disponible. "
                       f"Opciones: {', '.join(codes)}"
            )
        return requested


class FiscalPointOfSaleService:
    def __init__(self, db: Session):
        self.db = db

    def create_point_of_sale(self, data: FiscalPointOfSaleCreate, tenant_id: UUID) -> FiscalPointOfSale:
        """Registrar un punto de venta fiscal (número único por organización)"""
        try:
            existing = self.db.query(FiscalPointOfSale).filter(
                FiscalPointOfSale.tenant_id == tenant_id,
                FiscalPointOfSale.number == data.number
            ).first()

            if existing:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Ya existe un punto de venta con el número {data.number}"
                )

            voucher_types = [v.value for v in data.voucher_types] if data.voucher_types else None
            pos = FiscalPointOfSale(
                number=data.number,
                name=data.name.strip(),
                location_id=data.location_id,
                voucher_types=voucher_types,
                tenant_id=tenant_id,
                is_active=True
            )

            self.db.add(pos)
            self.db.commit()
            self.db.refresh(pos)
            logger.info(f"Fiscal point of sale {pos.number} created for tenant {tenant_id}")
            return pos

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Ya existe un punto de venta con el número {data.number}"
            )
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al crear el punto de venta: {str(e)}"
            )

    def list_points_of_sale(self, tenant_id: UUID) -> dict:
        points = self.db.query(FiscalPointOfSale).filter(
            FiscalPointOfSale.tenant_id == tenant_id,
            FiscalPointOfSale.is_active == True
        ).order_by(FiscalPointOfSale.number).all()

        return {"points_of_sale": points, "total": len(points)}

    def deactivate_point_of_sale(self, pos_id: UUID, tenant_id: UUID) -> FiscalPointOfSale:
        pos = self.db.query(FiscalPointOfSale).filter(
            FiscalPointOfSale.id == pos_id,
            FiscalPointOfSale.tenant_id == tenant_id
        ).first()

        if not pos:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Punto de venta no encontrado"
            )

        pos.is_active = False
        self.db.commit()
        self.db.refresh(pos)
        return pos


class DocumentNumberingService:
    """
    Numeración correlativa de comprobantes

    La secuencia se incrementa dentro de la transacción del llamador: el
    número queda confirmado junto con el documento que lo usa, o se descarta
    si la transacción hace rollback.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_sequence(self, tenant_id: UUID, point_of_sale: int, document_type: DocumentType, lock: bool = False):
        query = self.db.query(DocumentSequence).filter(
            DocumentSequence.tenant_id == tenant_id,
            DocumentSequence.point_of_sale == point_of_sale,
            DocumentSequence.document_type == document_type
        )
        if lock:
            query = query.with_for_update()
        return query.first()

    def next_document_number(self, tenant_id: UUID, point_of_sale: int, document_type: DocumentType) -> str:
        """Reservar el siguiente número (no hace commit)"""
        try:
            sequence = self._get_sequence(tenant_id, point_of_sale, document_type, lock=True)

            if not sequence:
                sequence = DocumentSequence(
                    tenant_id=tenant_id,
                    point_of_sale=point_of_sale,
                    document_type=document_type,
                    current_number=0
                )
                self.db.add(sequence)
                self.db.flush()

            sequence.current_number += 1
            self.db.flush()

            number = format_document_number(document_type, point_of_sale, sequence.current_number)
            logger.info(f"Allocated document number {number} for tenant {tenant_id}")
            return number

        except Exception as e:
            logger.error(f"Error allocating document number: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error generando número de comprobante: {str(e)}"
            )

    def peek_next_number(self, tenant_id: UUID, point_of_sale: int, document_type: DocumentType) -> NextDocumentNumber:
        """Consultar el próximo número sin reservarlo"""
        sequence = self._get_sequence(tenant_id, point_of_sale, document_type)
        next_value = (sequence.current_number if sequence else 0) + 1

        return NextDocumentNumber(
            document_type=document_type.value,
            point_of_sale=point_of_sale,
            next_number=format_document_number(document_type, point_of_sale, next_value),
            current_sequence=next_value
        )
