"""Application tests for vendor product management and admin moderation."""

from datetime import datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from tianguis.catalogue.category.management import CreateCategory, DeactivateCategory
from tianguis.catalogue.product.management import (
    AddProduct,
    AddProductImage,
    DeactivateProduct,
    SetProductStock,
    UpdateProduct,
    products_for_vendor,
)
from tianguis.catalogue.product.moderation import (
    ApproveProductImage,
    RejectProduct,
    RejectProductImage,
    RequestProductChanges,
    image_queue,
    moderation_queue,
)
from tianguis.catalogue.product.product import ImageStatus, ModerationStatus, Product


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestAddProduct:
    def test_approved_vendor_can_list(self, make_vendor, category):
        vendor_id = make_vendor()
        product_id = current_domain.process(
            AddProduct(vendor_id=vendor_id, category_id=category, name="Rebozo", price=1450.0, stock=3),
            asynchronous=False,
        )
        product = _product(product_id)
        assert product.moderation_status == ModerationStatus.PENDING.value
        assert product.stock == 3

    def test_pending_vendor_cannot_list(self, make_vendor, category):
        vendor_id = make_vendor(approve=False)
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                AddProduct(vendor_id=vendor_id, category_id=category, name="Rebozo", price=1450.0),
                asynchronous=False,
            )
        assert "approved vendors" in str(exc.value)

    def test_inactive_category_rejected(self, make_vendor):
        vendor_id = make_vendor()
        category_id = current_domain.process(CreateCategory(name="Temporada"), asynchronous=False)
        current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(
                AddProduct(vendor_id=vendor_id, category_id=category_id, name="Piñata", price=300.0),
                asynchronous=False,
            )


class TestVendorOwnership:
    def test_other_vendor_cannot_edit(self, make_vendor, make_product):
        owner = make_vendor("Dueño")
        intruder = make_vendor("Intruso")
        product_id = make_product(owner)
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateProduct(product_id=product_id, vendor_id=intruder, price=1.0),
                asynchronous=False,
            )

    def test_owner_sets_stock(self, make_vendor, make_product):
        vendor_id = make_vendor()
        product_id = make_product(vendor_id, stock=2)
        current_domain.process(SetProductStock(product_id=product_id, vendor_id=vendor_id, stock=12), asynchronous=False)
        assert _product(product_id).stock == 12

    def test_owner_deactivates(self, make_vendor, make_product):
        vendor_id = make_vendor()
        product_id = make_product(vendor_id)
        current_domain.process(DeactivateProduct(product_id=product_id, vendor_id=vendor_id), asynchronous=False)
        assert _product(product_id).is_listed is False


class TestModerationCommands:
    def test_reject_then_edit_returns_to_queue(self, admin, make_vendor, make_product):
        vendor_id = make_vendor()
        product_id = make_product(vendor_id, approve=False)

        current_domain.process(
            RejectProduct(product_id=product_id, moderator_id=admin.id, reason="Misleading title"),
            asynchronous=False,
        )
        assert _product(product_id).moderation_status == ModerationStatus.REJECTED.value
        assert moderation_queue() == []

        current_domain.process(
            UpdateProduct(product_id=product_id, vendor_id=vendor_id, name="Accurate title"),
            asynchronous=False,
        )
        assert [p.id for p in moderation_queue()] == [product_id]

    def test_request_changes_needs_notes(self, admin, make_vendor, make_product):
        product_id = make_product(make_vendor(), approve=False)
        with pytest.raises(ValidationError):
            current_domain.process(
                RequestProductChanges(product_id=product_id, moderator_id=admin.id, notes=""),
                asynchronous=False,
            )


class TestImageModeration:
    def _add_image(self, vendor_id, product_id, url="https://cdn.example.mx/a.jpg"):
        return current_domain.process(
            AddProductImage(product_id=product_id, vendor_id=vendor_id, url=url),
            asynchronous=False,
        )

    def test_pending_images_are_queued(self, make_vendor, make_product):
        vendor_id = make_vendor()
        product_id = make_product(vendor_id)
        image_id = self._add_image(vendor_id, product_id)

        queue = image_queue()
        assert len(queue) == 1
        assert queue[0]["image_id"] == image_id
        assert queue[0]["product_id"] == product_id

    def test_approve_and_reject(self, admin, make_vendor, make_product):
        vendor_id = make_vendor()
        product_id = make_product(vendor_id)
        first = self._add_image(vendor_id, product_id, "https://cdn.example.mx/1.jpg")
        second = self._add_image(vendor_id, product_id, "https://cdn.example.mx/2.jpg")

        current_domain.process(
            ApproveProductImage(product_id=product_id, image_id=first, moderator_id=admin.id),
            asynchronous=False,
        )
        current_domain.process(
            RejectProductImage(
                product_id=product_id,
                image_id=second,
                moderator_id=admin.id,
                reason="Contains a watermark",
                category="copyright",
            ),
            asynchronous=False,
        )

        statuses = {image.id: image.status for image in _product(product_id).images}
        assert statuses == {first: ImageStatus.APPROVED.value, second: ImageStatus.REJECTED.value}
        assert image_queue() == []


class TestLongListings:
    @pytest.fixture()
    def backlog(self):
        """130 pending products for one vendor, one minute apart."""
        repo = current_domain.repository_for(Product)
        start = datetime(2026, 3, 1, 9, 0)
        for index in range(130):
            repo.add(
                Product(
                    vendor_id="vendor-a",
                    category_id="cat-1",
                    name=f"Pieza {index:03d}",
                    price=100.0,
                    stock=1,
                    created_at=start + timedelta(minutes=index),
                )
            )

    def test_moderation_queue_holds_every_pending_product(self, backlog):
        queue = moderation_queue()
        assert len(queue) == 130
        assert queue[0].name == "Pieza 000"
        assert queue[-1].name == "Pieza 129"

    def test_vendor_sees_every_product_newest_first(self, backlog):
        products = products_for_vendor("vendor-a")
        assert len(products) == 130
        assert products[0].name == "Pieza 129"
        assert products[-1].name == "Pieza 000"
