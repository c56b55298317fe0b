"""
Seed script: Populate a demo organization with counter-sale data.

What it creates:
- Fiscal config (Responsable Inscripto) + fiscal point of sale 00001.
- Sellers (3) with different discount limits.
- Payment methods: Efectivo, Tarjeta de débito/crédito, Transferencia, Cheque.
- Price list "Mayorista" and customers (~15), some with CUIT and the price list.
- Suppliers (~10) with valid CUITs.
- Purchases (compras) with random items.
- Sales (ventas): mix of cash, split payments and cuenta corriente.

Run inside the API container to use 'postgres' host and project PYTHONPATH:
    docker compose exec api python scripts/seed_demo_data.py \
        --organization-id 6f1c... --sales 200 --purchases 60

Note: This is intended for development environments only.
"""

# Add project root to sys.path so `app.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import random
from datetime import date, timedelta
from decimal import Decimal, ROUND_CEILING
from uuid import UUID, uuid4

from fastapi import HTTPException

from app.database.database import SessionLocal
from app.common.validators import calculate_cuit_check_digit
from app.modules.fiscal.models import FiscalConfig, FiscalPointOfSale
from app.modules.fiscal.schemas import FiscalConfigSave, FiscalPointOfSaleCreate
from app.modules.fiscal.service import FiscalConfigService, FiscalPointOfSaleService
from app.modules.customers.models import Customer, PriceList, PriceAdjustmentType, PriceRounding, TaxIdType
from app.modules.customers.schemas import CustomerCreate, PriceListCreate, TaxCategory
from app.modules.customers.service import CustomerService, PriceListService
from app.modules.sales.models import Seller, PaymentMethod, PaymentMethodType, SaleStatus
from app.modules.sales.schemas import (
    SellerCreate, PaymentMethodCreate, CartQuoteRequest, CheckoutRequest, CartItem, SplitPaymentIn, Discount, DiscountType
)
from app.modules.sales.service import SellerService, PaymentMethodService, SalesService
from app.modules.purchases.models import Supplier
from app.modules.purchases.schemas import SupplierCreate, PurchaseCreate, PurchaseItemCreate
from app.modules.purchases.service import SupplierService, PurchaseService


CATALOG = [
    ("Yerba 1kg", Decimal("3200"), Decimal("21")),
    ("Azúcar 1kg", Decimal("1100"), Decimal("21")),
    ("Leche 1L", Decimal("950"), Decimal("10.5")),
    ("Pan lactal", Decimal("2100"), Decimal("10.5")),
    ("Aceite girasol 1.5L", Decimal("2800"), Decimal("21")),
    ("Fideos 500g", Decimal("890"), Decimal("21")),
    ("Arroz 1kg", Decimal("1350"), Decimal("21")),
    ("Galletitas", Decimal("780"), Decimal("21")),
    ("Libro escolar", Decimal("9500"), Decimal("0")),
]


def pick(seq):
    return random.choice(seq)


def random_cuit(prefix: str) -> str:
    while True:
        base = f"{prefix}{random.randint(10000000, 99999999)}"
        check = calculate_cuit_check_digit(base)
        if check is not None:
            return f"{base}{check}"


def create_fiscal_data(db, tenant_id):
    config = db.query(FiscalConfig).filter(FiscalConfig.tenant_id == tenant_id).first()
    if not config:
        config = FiscalConfigService(db).save_config(FiscalConfigSave(
            cuit=random_cuit("30"),
            legal_name="Almacén Demo SRL",
            vat_condition="Responsable Inscripto",
            city="Córdoba",
            province="Córdoba"
        ), tenant_id)

    pos = db.query(FiscalPointOfSale).filter(
        FiscalPointOfSale.tenant_id == tenant_id,
        FiscalPointOfSale.number == 1
    ).first()
    if not pos:
        pos = FiscalPointOfSaleService(db).create_point_of_sale(
            FiscalPointOfSaleCreate(number=1, name="Mostrador principal"), tenant_id
        )
    return config, pos


def create_sellers(db, tenant_id):
    seller_data = [("Juan Pérez", Decimal("5")), ("María López", Decimal("10")), ("Carlos Gómez", Decimal("0"))]
    service = SellerService(db)
    sellers = []
    for name, max_discount in seller_data:
        existing = db.query(Seller).filter(Seller.tenant_id == tenant_id, Seller.name == name).first()
        if existing:
            sellers.append(existing)
            continue
        sellers.append(service.create_seller(SellerCreate(name=name, max_discount_percentage=max_discount), tenant_id))
    return sellers


def create_payment_methods(db, tenant_id):
    method_data = [
        ("Efectivo", PaymentMethodType.EFECTIVO, Decimal("0"), False),
        ("Tarjeta de débito", PaymentMethodType.TARJETA, Decimal("1.5"), True),
        ("Tarjeta de crédito", PaymentMethodType.TARJETA, Decimal("3.5"), True),
        ("Transferencia", PaymentMethodType.TRANSFERENCIA, Decimal("0"), False),
        ("Cheque", PaymentMethodType.CHEQUE, Decimal("0"), True),
    ]
    service = PaymentMethodService(db)
    methods = []
    for name, method_type, fee, requires_reference in method_data:
        existing = db.query(PaymentMethod).filter(PaymentMethod.tenant_id == tenant_id, PaymentMethod.name == name).first()
        if existing:
            methods.append(existing)
            continue
        methods.append(service.create_payment_method(PaymentMethodCreate(
            name=name,
            type=method_type,
            fee_percentage=fee,
            requires_reference=requires_reference
        ), tenant_id))
    return methods


def create_suppliers(db, tenant_id, count=10):
    names = ["Distribuidora", "Mayorista", "Lácteos", "Molinos", "Panificadora", "Bebidas", "Almacén"]
    regions = ["Norte", "Sur", "Centro", "del Litoral", "Cuyo"]
    service = SupplierService(db)
    suppliers = db.query(Supplier).filter(Supplier.tenant_id == tenant_id).all()
    while len(suppliers) < count:
        suppliers.append(service.create_supplier(SupplierCreate(
            name=f"{pick(names)} {pick(regions)} {len(suppliers) + 1}",
            tax_id=random_cuit("30"),
            tax_category="Responsable Inscripto"
        ), tenant_id))
    return suppliers


def create_customers(db, tenant_id, count=15):
    price_list = db.query(PriceList).filter(PriceList.tenant_id == tenant_id, PriceList.name == "Mayorista").first()
    if not price_list:
        price_list = PriceListService(db).create_price_list(PriceListCreate(
            name="Mayorista",
            description="Clientes con compras por bulto",
            adjustment_type=PriceAdjustmentType.DESCUENTO,
            adjustment_percentage=Decimal("10"),
            price_rounding=PriceRounding.MULTIPLES_10
        ), tenant_id)

    first_names = ["Juan", "María", "Carlos", "Lucía", "Jorge", "Ana", "Diego", "Sofía"]
    last_names = ["Pérez", "González", "Rodríguez", "Fernández", "López", "Martínez"]
    service = CustomerService(db)
    customers = db.query(Customer).filter(Customer.tenant_id == tenant_id).all()
    while len(customers) < count:
        if random.random() < 0.3:
            data = CustomerCreate(
                name=f"Almacén {pick(last_names)} {len(customers) + 1}",
                tax_id=random_cuit("30"),
                tax_id_type=TaxIdType.CUIT,
                tax_category=pick([TaxCategory.RESPONSABLE_INSCRIPTO, TaxCategory.MONOTRIBUTISTA]),
                price_list_id=price_list.id,
                payment_terms=30
            )
        else:
            data = CustomerCreate(
                name=f"{pick(first_names)} {pick(last_names)}",
                tax_id=str(random.randint(20000000, 45000000)),
                tax_category=TaxCategory.CONSUMIDOR_FINAL
            )
        try:
            customers.append(service.create_customer(data, tenant_id))
        except HTTPException as e:
            print(f"  Customer skipped: {e.detail}")
    return customers


def create_purchases(db, tenant_id, suppliers, purchases_count):
    service = PurchaseService(db)
    created = 0
    for i in range(purchases_count):
        invoice_date = date.today() - timedelta(days=random.randint(0, 90))
        items = [
            PurchaseItemCreate(
                name=name,
                quantity=Decimal(random.randint(5, 50)),
                unit_cost=(price * Decimal("0.6")).quantize(Decimal("0.01"))
            )
            for name, price, _ in random.sample(CATALOG, k=random.randint(1, 4))
        ]
        try:
            service.create_purchase(PurchaseCreate(
                supplier_id=pick(suppliers).id,
                voucher_type=pick(["FACTURA_A", "FACTURA_B"]),
                voucher_number=f"{random.randint(1, 9):04d}-{random.randint(1, 99999999):08d}",
                invoice_date=invoice_date,
                due_date=invoice_date + timedelta(days=30),
                items=items
            ), tenant_id)
            created += 1
        except HTTPException as e:
            print(f"  Purchase {i} skipped: {e.detail}")
    return created


def create_sales(db, tenant_id, sellers, methods, customers, sales_count):
    service = SalesService(db)
    cash = next(m for m in methods if m.type == PaymentMethodType.EFECTIVO)
    others = [m for m in methods if m.type != PaymentMethodType.EFECTIVO]
    created = 0
    for i in range(sales_count):
        items = [
            CartItem(name=name, price=price, quantity=Decimal(random.randint(1, 4)), tax_rate=rate)
            for name, price, rate in random.sample(CATALOG, k=random.randint(1, 5))
        ]
        seller = pick(sellers)
        discount = None
        if seller.max_discount_percentage > 0 and random.random() < 0.2:
            discount = Discount(type=DiscountType.PERCENTAGE, value=seller.max_discount_percentage)

        quote = service.quote(CartQuoteRequest(items=items, global_discount=discount, seller_id=seller.id), tenant_id)
        total = quote.total
        roll = random.random()

        if roll < 0.15:
            request = CheckoutRequest(
                items=items, global_discount=discount, seller_id=seller.id,
                customer_id=pick(customers).id, status=SaleStatus.PENDING
            )
        elif roll < 0.45:
            method = pick(others)
            first = (total / 2).quantize(Decimal("0.01"))
            request = CheckoutRequest(
                items=items, global_discount=discount, seller_id=seller.id,
                payments=[
                    SplitPaymentIn(method_id=cash.id, method_name=cash.name, amount=first),
                    SplitPaymentIn(
                        method_id=method.id, method_name=method.name, amount=total - first,
                        reference=f"OP-{random.randint(1000, 9999)}" if method.requires_reference else None
                    ),
                ]
            )
        else:
            request = CheckoutRequest(
                items=items, global_discount=discount, seller_id=seller.id,
                payments=[SplitPaymentIn(method_id=cash.id, method_name=cash.name, amount=total)],
                cash_tendered=(total / 1000).to_integral_value(rounding=ROUND_CEILING) * 1000
            )

        try:
            service.checkout(request, tenant_id)
            created += 1
        except HTTPException as e:
            print(f"  Sale {i} skipped: {e.detail}")
        if created and created % 50 == 0:
            print(f"  Sales created: {created}")
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed counter-sale demo data")
    parser.add_argument("--organization-id", type=UUID, default=None)
    parser.add_argument("--suppliers", type=int, default=10)
    parser.add_argument("--purchases", type=int, default=60)
    parser.add_argument("--sales", type=int, default=200)
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)
    tenant_id = args.organization_id or uuid4()

    db = SessionLocal()
    try:
        config, pos = create_fiscal_data(db, tenant_id)
        sellers = create_sellers(db, tenant_id)
        methods = create_payment_methods(db, tenant_id)

        print("Creating customers...")
        customers = create_customers(db, tenant_id)
        print(f"Customers: {len(customers)}")

        print("Creating suppliers...")
        suppliers = create_suppliers(db, tenant_id, args.suppliers)
        print(f"Suppliers: {len(suppliers)}")

        print("Creating purchases...")
        purchases_created = create_purchases(db, tenant_id, suppliers, args.purchases)
        print(f"Purchases created: {purchases_created}")

        print("Creating sales...")
        sales_created = create_sales(db, tenant_id, sellers, methods, customers, args.sales)
        print(f"Sales created: {sales_created}")

        print("\nSeed completed.")
        print("Organization:")
        print(f"  Legal name: {config.legal_name}")
        print(f"  CUIT:       {config.cuit}")
        print(f"  Point of sale: {pos.number:05d}")
        print("Headers for API requests:")
        print(f"  X-Organization-ID: {tenant_id}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
