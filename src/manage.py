"""Tianguis database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed       # Admin account, categories and a demo vendor
"""

import argparse
import json
import os
import sys

DEMO_CATEGORIES = [
    ("Artesanías", "Handmade crafts from Mexican artisans."),
    ("Textiles", "Rebozos, huipiles and woven goods."),
    ("Cerámica", "Talavera and barro negro pottery."),
    ("Alimentos", "Coffee, chocolate, mezcal and pantry goods."),
]

DEMO_PRODUCTS = [
    ("Alebrije de copal", "Hand-carved and painted in San Martín Tilcajete.", 850.0, 6, 0),
    ("Rebozo de seda", "Silk rebozo woven on a backstrap loom.", 1450.0, 3, 1),
    ("Plato de Talavera", "Hand-painted Talavera plate from Puebla.", 390.0, 12, 2),
    ("Café de Chiapas 500 g", "Single-origin whole bean coffee.", 220.0, 40, 3),
]


def _domain():
    os.environ.setdefault("PROTEAN_ENV", "development")
    from tianguis.domain import tianguis

    tianguis.init()
    return tianguis


def setup_database():
    from tianguis.utils.db import setup_db

    domain = _domain()
    print("Creating tianguis database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from tianguis.utils.db import drop_db

    domain = _domain()
    print("Dropping tianguis database schema...")
    drop_db(domain)
    print("Done.")


def seed(admin_email: str, admin_password: str):
    """Populate a fresh database with an admin, categories and one approved vendor."""
    domain = _domain()

    with domain.domain_context():
        from protean.utils.globals import current_domain

        from tianguis.catalogue.category.management import CreateCategory
        from tianguis.catalogue.product.management import AddProduct
        from tianguis.catalogue.product.moderation import ApproveProduct
        from tianguis.identity.account import Role, UserAccount, find_account_by_email
        from tianguis.promotions.management import CreateCoupon
        from tianguis.promotions.validation import find_coupon
        from tianguis.vendors.registration import RegisterVendor
        from tianguis.vendors.review import ApproveVendor

        admin = find_account_by_email(admin_email)
        if admin is None:
            admin = UserAccount.register(
                email=admin_email,
                name="Administrador",
                password=admin_password,
                role=Role.SUPER_ADMIN.value,
            )
            current_domain.repository_for(UserAccount).add(admin)
            print(f"Created admin {admin_email}")

        category_ids = [
            current_domain.process(CreateCategory(name=name, description=description), asynchronous=False)
            for name, description in DEMO_CATEGORIES
        ]
        print(f"Created {len(category_ids)} categories")

        vendor_id = current_domain.process(
            RegisterVendor(
                business_name="Manos de Oaxaca",
                contact_name="Rosa Hernández",
                email="rosa@manosdeoaxaca.mx",
                password="demo-vendor-1",
                city="Oaxaca",
                state="Oaxaca",
                country="MX",
            ),
            asynchronous=False,
        )
        current_domain.process(
            ApproveVendor(vendor_id=vendor_id, reviewed_by=admin.id, notify=False), asynchronous=False
        )

        for name, description, price, stock, category_index in DEMO_PRODUCTS:
            product_id = current_domain.process(
                AddProduct(
                    vendor_id=vendor_id,
                    category_id=category_ids[category_index],
                    name=name,
                    description=description,
                    price=price,
                    stock=stock,
                ),
                asynchronous=False,
            )
            current_domain.process(ApproveProduct(product_id=product_id, moderator_id=admin.id), asynchronous=False)

        if find_coupon("BIENVENIDA10") is None:
            current_domain.process(
                CreateCoupon(
                    code="BIENVENIDA10",
                    name="Bienvenida 10%",
                    discount_type="percentage",
                    value=10.0,
                    per_customer_limit=1000,
                    created_by=admin.id,
                ),
                asynchronous=False,
            )
            print("Created coupon BIENVENIDA10")
        print(json.dumps({"vendor_id": vendor_id, "products": len(DEMO_PRODUCTS)}))


def main():
    parser = argparse.ArgumentParser(description="Tianguis database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    seed_parser = subparsers.add_parser("seed", help="Load demo data")
    seed_parser.add_argument("--admin-email", default="admin@tianguis.mx")
    seed_parser.add_argument("--admin-password", default=os.getenv("TIANGUIS_ADMIN_PASSWORD", "change-me-now"))

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed(args.admin_email, args.admin_password)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
