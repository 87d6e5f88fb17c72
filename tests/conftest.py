import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_configure(config):
    os.environ["PROTEAN_ENV"] = config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def tianguis_bed():
    from tianguis.domain import tianguis

    bed = DomainFixture(tianguis)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def run_around_tests(tianguis_bed):
    """Run each test inside the domain context, then reset every store and adapter."""
    from tianguis.notifications import reset_channels
    from tianguis.payments.gateway import reset_gateway

    with tianguis_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_channels()


# ---------------------------------------------------------------------------
# Shared catalog fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def admin():
    from protean.utils.globals import current_domain

    from tianguis.identity.account import Role, UserAccount

    account = UserAccount.register(
        email="admin@tianguis.mx",
        name="Admin",
        password="admin-password",
        role=Role.ADMIN.value,
    )
    current_domain.repository_for(UserAccount).add(account)
    return account


@pytest.fixture()
def category():
    from protean.utils.globals import current_domain

    from tianguis.catalogue.category.management import CreateCategory

    category_id = current_domain.process(CreateCategory(name="Artesanías"), asynchronous=False)
    return category_id


@pytest.fixture()
def make_vendor(admin):
    """Register a vendor and approve it; returns the vendor id."""
    from protean.utils.globals import current_domain

    from tianguis.vendors.registration import RegisterVendor
    from tianguis.vendors.review import ApproveVendor

    def _make(business_name="Manos de Oaxaca", email=None, approve=True):
        vendor_id = current_domain.process(
            RegisterVendor(
                business_name=business_name,
                contact_name="Rosa Hernández",
                email=email or f"{business_name.lower().replace(' ', '.')}@example.mx",
                password="vendor-password",
            ),
            asynchronous=False,
        )
        if approve:
            current_domain.process(
                ApproveVendor(vendor_id=vendor_id, reviewed_by=admin.id, notify=False),
                asynchronous=False,
            )
        return vendor_id

    return _make


@pytest.fixture()
def make_product(admin, category):
    """Add a product for a vendor and approve it; returns the product id."""
    from protean.utils.globals import current_domain

    from tianguis.catalogue.product.management import AddProduct
    from tianguis.catalogue.product.moderation import ApproveProduct

    def _make(vendor_id, name="Alebrije", price=100.0, stock=10, approve=True, description=None, category_id=None):
        product_id = current_domain.process(
            AddProduct(
                vendor_id=vendor_id,
                category_id=category_id or category,
                name=name,
                description=description,
                price=price,
                stock=stock,
            ),
            asynchronous=False,
        )
        if approve:
            current_domain.process(
                ApproveProduct(product_id=product_id, moderator_id=admin.id),
                asynchronous=False,
            )
        return product_id

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "full_name": "Ana López",
        "street": "Av. Juárez 100",
        "city": "Ciudad de México",
        "state": "CDMX",
        "postal_code": "06000",
        "country": "MX",
    }


@pytest.fixture()
def auth_headers():
    """Build a bearer header for an identity without going through login."""
    from tianguis.identity.credentials import AuthenticatedIdentity
    from tianguis.identity.tokens import issue_token

    def _headers(role, user_id="user-1", email="user@example.mx", vendor_id=None):
        identity = AuthenticatedIdentity(
            user_id=str(user_id),
            email=email,
            name="Test User",
            role=role,
            vendor_id=str(vendor_id) if vendor_id else None,
        )
        return {"Authorization": f"Bearer {issue_token(identity)}"}

    return _headers


@pytest.fixture()
def start_checkout(shipping_address):
    """Open a checkout session for raw cart items; returns the handler's result."""
    import json

    from protean.utils.globals import current_domain

    from tianguis.ordering.checkout.start import StartCheckout

    def _start(items, customer_email="ana@example.mx", coupon_codes=None, address=None, customer_id=None):
        return current_domain.process(
            StartCheckout(
                items=json.dumps(items),
                customer_email=customer_email,
                customer_name="Ana López",
                customer_id=customer_id,
                shipping_address=json.dumps(address or shipping_address),
                coupon_codes=json.dumps(coupon_codes or []),
            ),
            asynchronous=False,
        )

    return _start
