"""Tests for the Product aggregate: stock, moderation and images."""

import pytest
from protean.exceptions import ValidationError

from tianguis.catalogue.product.events import ProductAdded, ProductModerated, StockChanged
from tianguis.catalogue.product.product import ImageStatus, ModerationStatus, Product


def _make_product(**overrides):
    defaults = {
        "vendor_id": "vendor-1",
        "category_id": "cat-1",
        "name": "Alebrije de copal",
        "price": 850.0,
        "stock": 5,
    }
    defaults.update(overrides)
    return Product.create(**defaults)


class TestProductCreation:
    def test_new_product_awaits_moderation(self):
        product = _make_product()
        assert product.moderation_status == ModerationStatus.PENDING.value
        assert product.is_active is True
        assert product.is_listed is False

    def test_raises_product_added(self):
        product = _make_product()
        assert isinstance(product._events[-1], ProductAdded)
        assert product._events[-1].stock == 5

    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_product(price=0)

    def test_stock_cannot_start_negative(self):
        with pytest.raises(ValidationError):
            _make_product(stock=-1)


class TestStock:
    def test_decrement_within_stock(self):
        product = _make_product(stock=5)
        product.decrement_stock(5)
        assert product.stock == 0
        assert isinstance(product._events[-1], StockChanged)
        assert product._events[-1].reason == "sale"

    def test_decrement_beyond_stock_rejected(self):
        product = _make_product(stock=5)
        with pytest.raises(ValidationError) as exc:
            product.decrement_stock(6)
        assert "requested 6, available 5" in str(exc.value)
        assert product.stock == 5

    def test_restock_adds_units(self):
        product = _make_product(stock=2)
        product.restock(3)
        assert product.stock == 5
        assert product._events[-1].reason == "cancellation"

    def test_set_stock_rejects_negative(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.set_stock(-3)


class TestModeration:
    def test_approval_lists_product(self):
        product = _make_product()
        product.moderate(ModerationStatus.APPROVED.value, moderator_id="admin-1")
        assert product.is_listed is True
        assert isinstance(product._events[-1], ProductModerated)

    def test_rejection_requires_notes(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.moderate(ModerationStatus.REJECTED.value, moderator_id="admin-1")

    def test_cannot_moderate_back_to_pending(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.moderate(ModerationStatus.PENDING.value, moderator_id="admin-1")

    def test_approved_product_can_be_reviewed_again(self):
        product = _make_product()
        product.moderate(ModerationStatus.APPROVED.value, moderator_id="admin-1")
        product.moderate(ModerationStatus.CHANGES_REQUESTED.value, moderator_id="admin-1", notes="Add dimensions")
        assert product.moderation_status == ModerationStatus.CHANGES_REQUESTED.value
        assert product.is_listed is False

    def test_edit_after_rejection_resubmits(self):
        product = _make_product()
        product.moderate(ModerationStatus.REJECTED.value, moderator_id="admin-1", notes="Blurry photos")
        product.update_details(description="Now with better photos")
        assert product.moderation_status == ModerationStatus.PENDING.value
        assert product._events[-1].resubmitted is True

    def test_edit_of_approved_product_stays_approved(self):
        product = _make_product()
        product.moderate(ModerationStatus.APPROVED.value, moderator_id="admin-1")
        product.update_details(price=900.0)
        assert product.moderation_status == ModerationStatus.APPROVED.value

    def test_deactivated_product_is_not_listed(self):
        product = _make_product()
        product.moderate(ModerationStatus.APPROVED.value, moderator_id="admin-1")
        product.deactivate()
        assert product.is_listed is False


class TestImages:
    def test_new_image_is_pending(self):
        product = _make_product()
        image = product.add_image("https://cdn.example.mx/a.jpg")
        assert image.status == ImageStatus.PENDING.value
        assert image.position == 0

    def test_duplicate_url_rejected(self):
        product = _make_product()
        product.add_image("https://cdn.example.mx/a.jpg")
        with pytest.raises(ValidationError):
            product.add_image("https://cdn.example.mx/a.jpg")

    def test_reject_image_records_category(self):
        product = _make_product()
        image = product.add_image("https://cdn.example.mx/a.jpg")
        product.reject_image(image.id, moderator_id="admin-1", reason="Watermarked", category="copyright")
        assert image.status == ImageStatus.REJECTED.value
        assert image.rejection_category == "copyright"

    def test_reject_image_with_unknown_category(self):
        product = _make_product()
        image = product.add_image("https://cdn.example.mx/a.jpg")
        with pytest.raises(ValidationError):
            product.reject_image(image.id, moderator_id="admin-1", reason="Bad", category="ugly")
