from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_
from typing import Optional
from uuid import UUID
import logging

from app.modules.customers.models import Customer, PriceList
from app.modules.customers.schemas import PriceListCreate, CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


class PriceListService:
    def __init__(self, db: Session):
        self.db = db

    def create_price_list(self, data: PriceListCreate, tenant_id: UUID) -> PriceList:
        try:
            existing = self.db.query(PriceList).filter(
                PriceList.tenant_id == tenant_id,
                PriceList.name == data.name
            ).first()
            if existing:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Ya existe una lista de precios con el nombre '{data.name}'"
                )

            price_list = PriceList(**data.model_dump(), tenant_id=tenant_id, is_active=True)
            self.db.add(price_list)
            self.db.commit()
            self.db.refresh(price_list)
            logger.info(f"Price list {price_list.id} created for tenant {tenant_id}")
            return price_list

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al crear lista de precios: {str(e)}"
            )

    def list_price_lists(self, tenant_id: UUID, active_only: bool = True) -> dict:
        query = self.db.query(PriceList).filter(PriceList.tenant_id == tenant_id)
        if active_only:
            query = query.filter(PriceList.is_active == True)
        price_lists = query.order_by(PriceList.name).all()
        return {"price_lists": price_lists, "total": len(price_lists)}

    def get_price_list(self, price_list_id: UUID, tenant_id: UUID) -> PriceList:
        price_list = self.db.query(PriceList).filter(
            PriceList.id == price_list_id,
            PriceList.tenant_id == tenant_id
        ).first()

        if not price_list:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Lista de precios no encontrada"
            )
        return price_list

    def get_active_price_list(self, price_list_id: UUID, tenant_id: UUID) -> PriceList:
        price_list = self.get_price_list(price_list_id, tenant_id)
        if not price_list.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"La lista de precios '{price_list.name}' está inactiva"
            )
        return price_list

    def deactivate_price_list(self, price_list_id: UUID, tenant_id: UUID) -> PriceList:
        price_list = self.get_price_list(price_list_id, tenant_id)
        price_list.is_active = False
        self.db.commit()
        self.db.refresh(price_list)
        logger.info(f"Price list {price_list_id} deactivated")
        return price_list


class CustomerService:
    def __init__(self, db: Session):
        self.db = db
        self.price_lists = PriceListService(db)

    def create_customer(self, data: CustomerCreate, tenant_id: UUID) -> Customer:
        try:
            if data.tax_id:
                existing = self.db.query(Customer).filter(
                    Customer.tenant_id == tenant_id,
                    Customer.tax_id == data.tax_id,
                    Customer.is_active == True
                ).first()
                if existing:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail=f"Ya existe un cliente con el documento {data.tax_id}"
                    )

            if data.price_list_id is not None:
                self.price_lists.get_active_price_list(data.price_list_id, tenant_id)

            values = data.model_dump()
            values["tax_category"] = data.tax_category.value
            customer = Customer(**values, tenant_id=tenant_id, is_active=True)
            self.db.add(customer)
            self.db.commit()
            self.db.refresh(customer)
            logger.info(f"Customer {customer.id} created for tenant {tenant_id}")
            return customer

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al crear cliente: {str(e)}"
            )

    def list_customers(
        self,
        tenant_id: UUID,
        search: Optional[str] = None,
        active: Optional[bool] = True,
        limit: int = 20,
        offset: int = 0
    ) -> dict:
        """Listar clientes, buscando por nombre, nombre de fantasía, documento o email"""
        query = self.db.query(Customer).filter(Customer.tenant_id == tenant_id)

        if search and search.strip():
            term = f"%{search.strip()}%"
            query = query.filter(or_(
                Customer.name.ilike(term),
                Customer.trade_name.ilike(term),
                Customer.tax_id.ilike(term),
                Customer.email.ilike(term)
            ))
        if active is not None:
            query = query.filter(Customer.is_active == active)

        total = query.count()
        customers = query.order_by(Customer.name).offset(offset).limit(limit).all()
        return {"customers": customers, "total": total, "limit": limit, "offset": offset}

    def get_customer(self, customer_id: UUID, tenant_id: UUID) -> Customer:
        customer = self.db.query(Customer).options(
            selectinload(Customer.price_list)
        ).filter(
            Customer.id == customer_id,
            Customer.tenant_id == tenant_id
        ).first()

        if not customer:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cliente no encontrado"
            )
        return customer

    def get_active_customer(self, customer_id: UUID, tenant_id: UUID) -> Customer:
        """Cliente habilitado para vender y presupuestar"""
        customer = self.get_customer(customer_id, tenant_id)
        if not customer.is_active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cliente no encontrado o archivado"
            )
        return customer

    def update_customer(self, customer_id: UUID, data: CustomerUpdate, tenant_id: UUID) -> Customer:
        customer = self.get_customer(customer_id, tenant_id)
        values = data.model_dump(exclude_unset=True)

        if values.get("price_list_id") is not None:
            self.price_lists.get_active_price_list(values["price_list_id"], tenant_id)
        if "tax_category" in values:
            values["tax_category"] = values["tax_category"].value

        for field, value in values.items():
            setattr(customer, field, value)

        self.db.commit()
        self.db.refresh(customer)
        logger.info(f"Customer {customer_id} updated")
        return customer

    def set_active(self, customer_id: UUID, tenant_id: UUID, active: bool) -> Customer:
        """Archivar o restaurar un cliente. Sus ventas se conservan."""
        customer = self.get_customer(customer_id, tenant_id)
        customer.is_active = active
        self.db.commit()
        self.db.refresh(customer)
        logger.info(f"Customer {customer_id} {'restored' if active else 'archived'}")
        return customer
