"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from tianguis.catalogue.product.product import Product
from tianguis.domain import tianguis


@tianguis.event(part_of=Product)
class ProductAdded:
    """A vendor listed a new product; it awaits moderation."""

    __version__ = 1

    product_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    category_id: Identifier(required=True)
    name: String(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    created_at: DateTime(required=True)


@tianguis.event(part_of=Product)
class ProductUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    name: String(required=True)
    price: Float(required=True)
    resubmitted: Boolean(default=False)


@tianguis.event(part_of=Product)
class StockChanged:
    """Stock moved because of a sale, a cancellation or a manual adjustment."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    reason: String(required=True)


@tianguis.event(part_of=Product)
class ProductModerated:
    __version__ = 1

    product_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    previous_status: String(required=True)
    status: String(required=True)
    notes: Text()
    moderator_id: Identifier(required=True)


@tianguis.event(part_of=Product)
class ProductImageModerated:
    __version__ = 1

    product_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    image_id: Identifier(required=True)
    image_url: String(required=True)
    status: String(required=True)
    reason: String()
    category: String()
    moderator_id: Identifier(required=True)
