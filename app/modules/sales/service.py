from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from app.core.config import settings
from app.common.currency import round_money
from app.modules.fiscal.models import DocumentType
from app.modules.fiscal.service import FiscalConfigService, DocumentNumberingService
from app.modules.customers.models import Customer
from app.modules.customers.service import CustomerService
from app.modules.sales.models import (
    Sale, SaleItem, SalePayment, Seller, PaymentMethod,
    Quote, SaleStatus, QuoteStatus, PaymentMethodType, PaymentMethodAvailability
)
from app.modules.sales.schemas import (
    CartItem, CartQuoteRequest, CartTotals, CartRepriceRequest, CartRepriceResponse, CustomerPriceList,
    SplitPaymentIn, SplitPaymentValidationRequest, SplitPaymentValidationResult, SplitPaymentStep,
    CheckoutRequest, CheckoutResponse, SaleDetail, SaleNotesUpdate, SaleCancel, SalePaymentCreate,
    QuoteCreate, SellerCreate, PaymentMethodCreate
)
from app.modules.sales.calculator import calculate_cart_totals, calculate_item_discount, calculate_item_total, apply_price_list
from app.modules.sales.payments import (
    SplitPaymentSession, SplitPaymentError, calculate_change, calculate_payment_fee
)

logger = logging.getLogger(__name__)

SALE_METHOD_AVAILABILITY = (PaymentMethodAvailability.VENTAS, PaymentMethodAvailability.VENTAS_Y_COMPRAS)


class SellerService:
    def __init__(self, db: Session):
        self.db = db

    def create_seller(self, data: SellerCreate, tenant_id: UUID) -> Seller:
        """Crear vendedor con su tope de descuento"""
        try:
            seller = Seller(**data.model_dump(), tenant_id=tenant_id, is_active=True)
            self.db.add(seller)
            self.db.commit()
            self.db.refresh(seller)
            logger.info(f"Seller {seller.id} created for tenant {tenant_id}")
            return seller
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al crear vendedor: {str(e)}"
            )

    def list_sellers(self, tenant_id: UUID, active_only: bool = True) -> dict:
        query = self.db.query(Seller).filter(Seller.tenant_id == tenant_id)
        if active_only:
            query = query.filter(Seller.is_active == True)
        sellers = query.order_by(Seller.name).all()
        return {"sellers": sellers, "total": len(sellers)}

    def get_active_seller(self, seller_id: UUID, tenant_id: UUID) -> Seller:
        seller = self.db.query(Seller).filter(
            Seller.id == seller_id,
            Seller.tenant_id == tenant_id,
            Seller.is_active == True
        ).first()

        if not seller:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vendedor no encontrado o inactivo"
            )
        return seller

    def get_max_discount(self, seller_id: Optional[UUID], tenant_id: UUID) -> Decimal:
        """Tope de descuento global: el del vendedor o el de la organización"""
        if seller_id is None:
            return settings.DEFAULT_MAX_DISCOUNT_PERCENTAGE
        return Decimal(self.get_active_seller(seller_id, tenant_id).max_discount_percentage)


class PaymentMethodService:
    def __init__(self, db: Session):
        self.db = db

    def create_payment_method(self, data: PaymentMethodCreate, tenant_id: UUID) -> PaymentMethod:
        try:
            existing = self.db.query(PaymentMethod).filter(
                PaymentMethod.tenant_id == tenant_id,
                PaymentMethod.name == data.name
            ).first()

            if existing:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Ya existe un medio de pago con el nombre '{data.name}'"
                )

            method = PaymentMethod(**data.model_dump(), tenant_id=tenant_id, is_active=True)
            self.db.add(method)
            self.db.commit()
            self.db.refresh(method)
            return method

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Ya existe un medio de pago con el nombre '{data.name}'"
            )
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al crear medio de pago: {str(e)}"
            )

    def list_payment_methods(self, tenant_id: UUID, for_sales: bool = False) -> dict:
        query = self.db.query(PaymentMethod).filter(
            PaymentMethod.tenant_id == tenant_id,
            PaymentMethod.is_active == True
        )
        if for_sales:
            query = query.filter(PaymentMethod.availability.in_(SALE_METHOD_AVAILABILITY))
        methods = query.order_by(PaymentMethod.name).all()
        return {"payment_methods": methods, "total": len(methods)}

    def resolve_for_sale(self, method_id: UUID, reference: Optional[str], tenant_id: UUID) -> PaymentMethod:
        """Validar que el medio de pago se pueda usar en una venta"""
        method = self.db.query(PaymentMethod).filter(
            PaymentMethod.id == method_id,
            PaymentMethod.tenant_id == tenant_id,
            PaymentMethod.is_active == True
        ).first()

        if not method:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Medio de pago no encontrado o inactivo"
            )
        if method.availability not in SALE_METHOD_AVAILABILITY:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"El medio de pago '{method.name}' no está habilitado para ventas"
            )
        if method.requires_reference and not reference:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"El medio de pago '{method.name}' requiere número de referencia"
            )
        return method


class SalesService:
    def __init__(self, db: Session):
        self.db = db
        self.sellers = SellerService(db)
        self.payment_methods = PaymentMethodService(db)
        self.customers = CustomerService(db)

    def _resolve_customer(self, customer_id: Optional[UUID], tenant_id: UUID) -> Optional[Customer]:
        if customer_id is None:
            return None
        return self.customers.get_active_customer(customer_id, tenant_id)

    @staticmethod
    def _customer_price_list(customer: Optional[Customer]) -> Optional[CustomerPriceList]:
        if customer is None or customer.price_list is None or not customer.price_list.is_active:
            return None
        return CustomerPriceList.model_validate(customer.price_list)

    @staticmethod
    def _apply_listed_prices(items: List[CartItem], price_list: Optional[CustomerPriceList]) -> List[CartItem]:
        """Recalcular solo los ítems con precio de lista. Los demás son precio manual."""
        if price_list is None:
            return list(items)
        return [
            apply_price_list([item], price_list)[0] if item.base_price is not None else item
            for item in items
        ]

    # ===== CARRITO =====

    def quote(self, data: CartQuoteRequest, tenant_id: UUID) -> CartTotals:
        """Totales del carrito sin persistir nada"""
        max_discount = self.sellers.get_max_discount(data.seller_id, tenant_id)
        try:
            return calculate_cart_totals(data.items, data.global_discount, max_discount)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    def reprice(self, data: CartRepriceRequest, tenant_id: UUID) -> CartRepriceResponse:
        """
        Aplicar una lista de precios al carrito

        Con customer_id se usa la lista asignada al cliente; si no tiene una
        activa, los precios quedan sin cambios.
        """
        if data.customer_id is not None:
            customer = self._resolve_customer(data.customer_id, tenant_id)
            price_list = self._customer_price_list(customer)
            if price_list is None:
                return CartRepriceResponse(items=data.items)
            return CartRepriceResponse(
                items=apply_price_list(data.items, price_list),
                price_list_id=customer.price_list_id
            )

        return CartRepriceResponse(items=apply_price_list(data.items, data.price_list))

    @staticmethod
    def validate_split_payments(data: SplitPaymentValidationRequest) -> SplitPaymentValidationResult:
        """
        Reproducir una secuencia de pagos parciales contra un total

        Informa el saldo después de cada paso y el primer pago rechazado.
        Los pagos posteriores al rechazo no se evalúan.
        """
        session = SplitPaymentSession(data.total)
        steps: List[SplitPaymentStep] = []
        rejected_index = None

        for index, payment in enumerate(data.payments):
            try:
                session.add_payment(payment.method_id, payment.method_name, payment.amount, payment.reference)
            except SplitPaymentError as e:
                rejected_index = index
                steps.append(SplitPaymentStep(
                    index=index,
                    method_name=payment.method_name,
                    amount=payment.amount,
                    accepted=False,
                    remaining=session.remaining,
                    error=str(e)
                ))
                break

            steps.append(SplitPaymentStep(
                index=index,
                method_name=payment.method_name,
                amount=round_money(payment.amount),
                accepted=True,
                remaining=session.remaining
            ))

        return SplitPaymentValidationResult(
            total=session.total,
            total_paid=session.total_paid,
            remaining=session.remaining,
            is_complete=session.is_complete,
            rejected_index=rejected_index,
            steps=steps
        )

    # ===== CHECKOUT =====

    def _build_payments(
        self,
        payments: List[SplitPaymentIn],
        total: Decimal,
        tenant_id: UUID
    ) -> Tuple[SplitPaymentSession, List[SalePayment], Decimal]:
        """Validar pagos parciales y armar las filas de pago con su comisión"""
        session = SplitPaymentSession(total)
        rows: List[SalePayment] = []
        cash_due = Decimal("0")

        for payment in payments:
            method = None
            if payment.method_id is not None:
                method = self.payment_methods.resolve_for_sale(payment.method_id, payment.reference, tenant_id)

            try:
                accepted = session.add_payment(payment.method_id, payment.method_name, payment.amount, payment.reference)
            except SplitPaymentError as e:
                raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

            is_cash = (
                method.type == PaymentMethodType.EFECTIVO if method
                else payment.method_name.strip().lower() == "efectivo"
            )
            if is_cash:
                cash_due += accepted.amount

            fee = calculate_payment_fee(accepted.amount, method.fee_percentage, method.fee_fixed) if method else Decimal("0.00")
            rows.append(SalePayment(
                tenant_id=tenant_id,
                payment_method_id=payment.method_id,
                method_name=method.name if method else payment.method_name,
                amount=accepted.amount,
                fee_amount=fee,
                reference=payment.reference
            ))

        return session, rows, cash_due

    def checkout(self, data: CheckoutRequest, tenant_id: UUID) -> CheckoutResponse:
        """
        Confirmar una venta

        1. Resuelve el cliente y aplica su lista de precios
        2. Calcula totales con el tope de descuento del vendedor
        3. Resuelve el tipo de comprobante según la condición IVA del cliente
        4. Concilia los pagos (completa: cubren el total; cuenta corriente: pago parcial)
        5. Reserva el número de comprobante
        6. Inserta venta, ítems y pagos en una sola transacción
        """
        try:
            customer = self._resolve_customer(data.customer_id, tenant_id)
            items = self._apply_listed_prices(data.items, self._customer_price_list(customer))

            max_discount = self.sellers.get_max_discount(data.seller_id, tenant_id)
            totals = calculate_cart_totals(items, data.global_discount, max_discount)

            voucher_type = FiscalConfigService(self.db).resolve_voucher_type(
                tenant_id,
                data.voucher_type.value if data.voucher_type else None,
                customer.tax_category if customer else None
            )

            session, payment_rows, cash_due = self._build_payments(data.payments, totals.total, tenant_id)

            sale_status = data.status
            if sale_status == SaleStatus.COMPLETED and not session.is_complete:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Los pagos ({session.total_paid}) no cubren el total de la venta ({totals.total})"
                )
            if sale_status == SaleStatus.PENDING and session.is_complete:
                # Cuenta corriente cobrada en su totalidad
                sale_status = SaleStatus.COMPLETED

            sale_date = data.sale_date or date.today()
            due_date = sale_date + timedelta(days=data.due_days) if sale_status == SaleStatus.PENDING else None

            number = DocumentNumberingService(self.db).next_document_number(
                tenant_id, data.point_of_sale, DocumentType.SALE
            )

            sale = Sale(
                tenant_id=tenant_id,
                customer_id=data.customer_id,
                seller_id=data.seller_id,
                location_id=data.location_id,
                number=number,
                voucher_type=voucher_type,
                point_of_sale=data.point_of_sale,
                status=sale_status,
                sale_date=sale_date,
                due_date=due_date,
                notes=data.notes,
                currency=settings.CURRENCY,
                subtotal=totals.subtotal,
                item_discounts=totals.item_discounts,
                global_discount=totals.global_discount,
                taxes=totals.taxes,
                total=totals.total,
                amount_paid=session.total_paid
            )

            for item in items:
                sale.items.append(SaleItem(
                    product_id=item.product_id,
                    name=item.name,
                    sku=item.sku,
                    quantity=item.quantity,
                    unit_price=item.price,
                    discount_type=item.discount.type.value if item.discount else None,
                    discount_value=item.discount.value if item.discount else None,
                    discount_amount=calculate_item_discount(item.price, item.quantity, item.discount),
                    tax_rate=item.tax_rate,
                    line_total=calculate_item_total(item)
                ))

            for row in payment_rows:
                row.payment_date = sale_date
                sale.payments.append(row)

            self.db.add(sale)
            self.db.commit()
            self.db.refresh(sale)

            change = calculate_change(cash_due, data.cash_tendered) if data.cash_tendered is not None else Decimal("0.00")
            logger.info(f"Sale {sale.number} ({voucher_type}) created for tenant {tenant_id}: total {sale.total}")

            return CheckoutResponse(sale=SaleDetail.model_validate(sale), change=change)

        except HTTPException:
            self.db.rollback()
            raise
        except ValueError as e:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating sale: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al registrar la venta: {str(e)}"
            )

    # ===== PRESUPUESTOS =====

    def create_quote(self, data: QuoteCreate, tenant_id: UUID) -> Quote:
        """Guardar un presupuesto numerado con los totales del carrito"""
        try:
            customer = self._resolve_customer(data.customer_id, tenant_id)
            items = self._apply_listed_prices(data.items, self._customer_price_list(customer))

            max_discount = self.sellers.get_max_discount(data.seller_id, tenant_id)
            totals = calculate_cart_totals(items, data.global_discount, max_discount)

            number = DocumentNumberingService(self.db).next_document_number(
                tenant_id, data.point_of_sale, DocumentType.QUOTE
            )

            quote = Quote(
                tenant_id=tenant_id,
                number=number,
                point_of_sale=data.point_of_sale,
                status=QuoteStatus.ACTIVE,
                quote_date=data.quote_date or date.today(),
                customer_id=data.customer_id,
                customer_name=customer.name if customer else data.customer_name,
                seller_id=data.seller_id,
                location_id=data.location_id,
                items=[item.model_dump(mode="json") for item in items],
                global_discount=data.global_discount.model_dump(mode="json") if data.global_discount else None,
                subtotal=totals.subtotal,
                discount=totals.item_discounts + totals.global_discount,
                taxes=totals.taxes,
                total=totals.total,
                notes=data.notes
            )
            self.db.add(quote)
            self.db.commit()
            self.db.refresh(quote)
            logger.info(f"Quote {quote.number} created for tenant {tenant_id}: total {quote.total}")
            return quote

        except HTTPException:
            self.db.rollback()
            raise
        except ValueError as e:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating quote: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al guardar el presupuesto: {str(e)}"
            )

    def list_quotes(
        self,
        tenant_id: UUID,
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = settings.DEFAULT_PAGE_SIZE,
        offset: int = 0
    ) -> dict:
        """Listar presupuestos vigentes, buscando por número o cliente"""
        query = self.db.query(Quote).filter(
            Quote.tenant_id == tenant_id,
            Quote.status != QuoteStatus.DELETED
        )

        if search and search.strip():
            term = f"%{search.strip()}%"
            query = query.filter(or_(Quote.number.ilike(term), Quote.customer_name.ilike(term)))
        if date_from:
            query = query.filter(Quote.quote_date >= date_from)
        if date_to:
            query = query.filter(Quote.quote_date <= date_to)

        total = query.count()
        quotes = query.order_by(Quote.quote_date.desc(), Quote.number.desc()).offset(offset).limit(limit).all()
        return {"quotes": quotes, "total": total, "limit": limit, "offset": offset}

    def get_quote(self, quote_id: UUID, tenant_id: UUID) -> Quote:
        quote = self.db.query(Quote).filter(
            Quote.id == quote_id,
            Quote.tenant_id == tenant_id,
            Quote.status != QuoteStatus.DELETED
        ).first()

        if not quote:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Presupuesto no encontrado"
            )
        return quote

    def delete_quote(self, quote_id: UUID, tenant_id: UUID) -> None:
        """Baja lógica: el número no se reutiliza"""
        quote = self.get_quote(quote_id, tenant_id)
        quote.status = QuoteStatus.DELETED
        self.db.commit()
        logger.info(f"Quote {quote.number} deleted")

    # ===== CONSULTAS =====

    def list_sales(
        self,
        tenant_id: UUID,
        status_filter: Optional[SaleStatus] = None,
        voucher_type: Optional[str] = None,
        seller_id: Optional[UUID] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = settings.DEFAULT_PAGE_SIZE,
        offset: int = 0
    ) -> dict:
        try:
            query = self.db.query(Sale).filter(Sale.tenant_id == tenant_id)

            if status_filter:
                query = query.filter(Sale.status == status_filter)
            if voucher_type:
                query = query.filter(Sale.voucher_type == voucher_type)
            if seller_id:
                query = query.filter(Sale.seller_id == seller_id)
            if date_from:
                query = query.filter(Sale.sale_date >= date_from)
            if date_to:
                query = query.filter(Sale.sale_date <= date_to)

            total = query.count()
            sales = query.order_by(Sale.sale_date.desc(), Sale.number.desc()).offset(offset).limit(limit).all()

            return {"sales": sales, "total": total, "limit": limit, "offset": offset}

        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al obtener ventas: {str(e)}"
            )

    def get_sale(self, sale_id: UUID, tenant_id: UUID) -> Sale:
        sale = self.db.query(Sale).options(
            selectinload(Sale.items),
            selectinload(Sale.payments)
        ).filter(
            Sale.id == sale_id,
            Sale.tenant_id == tenant_id
        ).first()

        if not sale:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Venta no encontrada"
            )
        return sale

    # ===== ACTUALIZACIONES =====

    def update_notes(self, sale_id: UUID, data: SaleNotesUpdate, tenant_id: UUID) -> Sale:
        sale = self.get_sale(sale_id, tenant_id)
        sale.notes = data.notes
        self.db.commit()
        self.db.refresh(sale)
        return sale

    def cancel_sale(self, sale_id: UUID, data: SaleCancel, tenant_id: UUID) -> Sale:
        """Anular una venta completada o en cuenta corriente"""
        try:
            sale = self.get_sale(sale_id, tenant_id)

            if sale.status not in (SaleStatus.COMPLETED, SaleStatus.PENDING):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="La venta ya está anulada"
                )

            sale.status = SaleStatus.CANCELLED
            sale.cancelled_at = datetime.now(timezone.utc)
            sale.cancellation_reason = data.reason

            self.db.commit()
            self.db.refresh(sale)
            logger.info(f"Sale {sale.number} cancelled for tenant {tenant_id}")
            return sale

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al anular la venta: {str(e)}"
            )

    def add_payment(self, sale_id: UUID, data: SalePaymentCreate, tenant_id: UUID) -> Sale:
        """
        Cobrar saldo de una venta en cuenta corriente

        El pago no puede superar el saldo pendiente. Cada cobro recibe un número
        de recibo (RCB). Cuando el saldo queda dentro de la tolerancia la venta
        pasa a completada.
        """
        try:
            sale = self.get_sale(sale_id, tenant_id)

            if sale.status != SaleStatus.PENDING:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Solo se pueden registrar cobros en ventas en cuenta corriente"
                )

            amount = round_money(data.amount)
            balance = round_money(sale.total - sale.amount_paid)
            if amount > balance:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=f"El monto ({amount}) supera el saldo pendiente ({balance})"
                )

            method = None
            if data.method_id is not None:
                method = self.payment_methods.resolve_for_sale(data.method_id, data.reference, tenant_id)

            receipt_number = DocumentNumberingService(self.db).next_document_number(
                tenant_id, sale.point_of_sale, DocumentType.PAYMENT_RECEIPT
            )

            sale.payments.append(SalePayment(
                tenant_id=tenant_id,
                payment_method_id=data.method_id,
                method_name=method.name if method else data.method_name,
                amount=amount,
                fee_amount=calculate_payment_fee(amount, method.fee_percentage, method.fee_fixed) if method else Decimal("0.00"),
                reference=data.reference,
                receipt_number=receipt_number,
                payment_date=data.payment_date or date.today()
            ))
            sale.amount_paid = round_money(sale.amount_paid + amount)

            if abs(sale.total - sale.amount_paid) <= settings.SPLIT_PAYMENT_TOLERANCE:
                sale.status = SaleStatus.COMPLETED

            self.db.commit()
            self.db.refresh(sale)
            logger.info(f"Payment {receipt_number} registered on sale {sale.number}: {amount}")
            return sale

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error registering payment: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al registrar el cobro: {str(e)}"
            )
