"""Product aggregate root with moderated ProductImage entities."""

from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from tianguis.domain import tianguis

MAX_IMAGES = 10


class ModerationStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CHANGES_REQUESTED = "changes_requested"


class ImageStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RejectionCategory(Enum):
    QUALITY = "quality"
    INAPPROPRIATE = "inappropriate"
    COPYRIGHT = "copyright"
    MISLEADING = "misleading"
    OTHER = "other"


@tianguis.entity(part_of="Product")
class ProductImage:
    url: String(required=True, max_length=500)
    position: Integer(default=0)
    status: String(choices=ImageStatus, default=ImageStatus.PENDING.value)
    rejection_reason: String(max_length=500)
    rejection_category: String(choices=RejectionCategory)
    notes: Text()
    reviewed_by: Identifier()
    reviewed_at: DateTime()


@tianguis.aggregate
class Product:
    vendor_id: Identifier(required=True)
    category_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    description: Text()
    price: Float(required=True, min_value=0.01)
    stock: Integer(default=0, min_value=0)
    is_active: Boolean(default=True)
    moderation_status: String(choices=ModerationStatus, default=ModerationStatus.PENDING.value)
    moderation_notes: Text()
    images: HasMany(ProductImage)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot have more than {MAX_IMAGES} images"]})

    @property
    def is_listed(self) -> bool:
        """Visible on the storefront: switched on by the vendor and approved by moderation."""
        return bool(self.is_active) and self.moderation_status == ModerationStatus.APPROVED.value

    @classmethod
    def create(cls, vendor_id, category_id, name, price, stock=0, description=None):
        from tianguis.catalogue.product.events import ProductAdded

        now = datetime.now()
        product = cls(
            vendor_id=vendor_id,
            category_id=category_id,
            name=name,
            description=description,
            price=price,
            stock=stock,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=product.id,
                vendor_id=vendor_id,
                category_id=category_id,
                name=name,
                price=price,
                stock=stock,
                created_at=now,
            )
        )
        return product

    def update_details(self, name=None, description=None, price=None, category_id=None):
        from tianguis.catalogue.product.events import ProductUpdated

        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if price is not None:
            self.price = price
        if category_id is not None:
            self.category_id = category_id

        resubmitted = self.moderation_status in (
            ModerationStatus.REJECTED.value,
            ModerationStatus.CHANGES_REQUESTED.value,
        )
        if resubmitted:
            self.moderation_status = ModerationStatus.PENDING.value

        self.updated_at = datetime.now()
        self.raise_(
            ProductUpdated(
                product_id=self.id,
                vendor_id=self.vendor_id,
                name=self.name,
                price=self.price,
                resubmitted=resubmitted,
            )
        )

    # --- Inventory ---

    def set_stock(self, quantity):
        from tianguis.catalogue.product.events import StockChanged

        if quantity is None or quantity < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        previous = self.stock
        self.stock = quantity
        self.updated_at = datetime.now()
        self.raise_(
            StockChanged(product_id=self.id, previous_stock=previous, new_stock=quantity, reason="adjustment")
        )

    def decrement_stock(self, quantity):
        """Remove sold units; refuses to take stock below zero."""
        from tianguis.catalogue.product.events import StockChanged

        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.stock < quantity:
            raise ValidationError(
                {"stock": [f"Insufficient stock for '{self.name}': requested {quantity}, available {self.stock}"]}
            )

        previous = self.stock
        self.stock = previous - quantity
        self.updated_at = datetime.now()
        self.raise_(StockChanged(product_id=self.id, previous_stock=previous, new_stock=self.stock, reason="sale"))

    def restock(self, quantity, reason="cancellation"):
        from tianguis.catalogue.product.events import StockChanged

        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        previous = self.stock
        self.stock = previous + quantity
        self.updated_at = datetime.now()
        self.raise_(StockChanged(product_id=self.id, previous_stock=previous, new_stock=self.stock, reason=reason))

    # --- Listing switch ---

    def activate(self):
        if self.is_active:
            raise ValidationError({"is_active": ["Product is already active"]})
        self.is_active = True
        self.updated_at = datetime.now()

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now()

    # --- Moderation ---

    def moderate(self, decision, moderator_id, notes=None):
        """Record an admin review decision.

        Any status except ``pending`` is a review outcome; products can be
        re-reviewed, so there is no ordering between outcomes.
        """
        from tianguis.catalogue.product.events import ProductModerated

        decision = ModerationStatus(decision)
        if decision == ModerationStatus.PENDING:
            raise ValidationError({"moderation_status": ["A review must approve, reject or request changes"]})
        if decision != ModerationStatus.APPROVED and not notes:
            raise ValidationError({"notes": ["A reason is required when rejecting or requesting changes"]})

        previous = self.moderation_status
        self.moderation_status = decision.value
        self.moderation_notes = notes
        self.updated_at = datetime.now()
        self.raise_(
            ProductModerated(
                product_id=self.id,
                vendor_id=self.vendor_id,
                previous_status=previous,
                status=decision.value,
                notes=notes,
                moderator_id=moderator_id,
            )
        )

    # --- Images ---

    def add_image(self, url):
        if any(image.url == url for image in self.images):
            raise ValidationError({"images": ["Image has already been added"]})

        image = ProductImage(url=url, position=len(self.images))
        self.add_images(image)
        self.updated_at = datetime.now()
        return image

    def _image(self, image_id):
        image = next((i for i in self.images if i.id == image_id), None)
        if image is None:
            raise ValidationError({"images": [f"Image {image_id} not found"]})
        return image

    def approve_image(self, image_id, moderator_id, notes=None):
        from tianguis.catalogue.product.events import ProductImageModerated

        image = self._image(image_id)
        image.status = ImageStatus.APPROVED.value
        image.rejection_reason = None
        image.rejection_category = None
        image.notes = notes
        image.reviewed_by = moderator_id
        image.reviewed_at = datetime.now()
        self.raise_(
            ProductImageModerated(
                product_id=self.id,
                vendor_id=self.vendor_id,
                image_id=image_id,
                image_url=image.url,
                status=ImageStatus.APPROVED.value,
                moderator_id=moderator_id,
            )
        )

    def reject_image(self, image_id, moderator_id, reason, category, notes=None):
        from tianguis.catalogue.product.events import ProductImageModerated

        if not reason:
            raise ValidationError({"reason": ["A rejection reason is required"]})
        try:
            category = RejectionCategory(category).value
        except ValueError:
            raise ValidationError({"category": [f"Unknown rejection category '{category}'"]}) from None

        image = self._image(image_id)
        image.status = ImageStatus.REJECTED.value
        image.rejection_reason = reason
        image.rejection_category = category
        image.notes = notes
        image.reviewed_by = moderator_id
        image.reviewed_at = datetime.now()
        self.raise_(
            ProductImageModerated(
                product_id=self.id,
                vendor_id=self.vendor_id,
                image_id=image_id,
                image_url=image.url,
                status=ImageStatus.REJECTED.value,
                reason=reason,
                category=category,
                moderator_id=moderator_id,
            )
        )
