"""Vendor-side product management — commands and handler.

Vendors may only touch their own products; every command carries the acting
vendor's id and the handler checks ownership before mutating.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from tianguis.catalogue.category.category import Category
from tianguis.catalogue.product.product import Product
from tianguis.domain import tianguis
from tianguis.utils.query import all_items
from tianguis.vendors.vendor import Vendor

logger = structlog.get_logger(__name__)


@tianguis.command(part_of=Product)
class AddProduct:
    vendor_id = Identifier(required=True)
    category_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True)
    stock = Integer(default=0)


@tianguis.command(part_of=Product)
class UpdateProduct:
    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    name = String(max_length=255)
    description = Text()
    price = Float()
    category_id = Identifier()


@tianguis.command(part_of=Product)
class SetProductStock:
    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    stock = Integer(required=True)


@tianguis.command(part_of=Product)
class ActivateProduct:
    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)


@tianguis.command(part_of=Product)
class DeactivateProduct:
    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)


@tianguis.command(part_of=Product)
class AddProductImage:
    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    url = String(required=True, max_length=500)


def _active_category(category_id):
    category = current_domain.repository_for(Category).get(category_id)
    if not category.is_active:
        raise ValidationError({"category_id": ["Category is not active"]})
    return category


def _owned_product(repo, product_id, vendor_id):
    product = repo.get(product_id)
    if str(product.vendor_id) != str(vendor_id):
        raise ValidationError({"product_id": ["Product does not belong to this vendor"]})
    return product


@tianguis.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(AddProduct)
    def add_product(self, command):
        vendor = current_domain.repository_for(Vendor).get(command.vendor_id)
        if not vendor.is_approved:
            raise ValidationError({"vendor_id": ["Only approved vendors can list products"]})
        _active_category(command.category_id)

        product = Product.create(
            vendor_id=command.vendor_id,
            category_id=command.category_id,
            name=command.name,
            description=command.description,
            price=command.price,
            stock=command.stock or 0,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product.added", product_id=str(product.id), vendor_id=str(command.vendor_id))
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _owned_product(repo, command.product_id, command.vendor_id)
        if command.category_id is not None:
            _active_category(command.category_id)
        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            category_id=command.category_id,
        )
        repo.add(product)

    @handle(SetProductStock)
    def set_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = _owned_product(repo, command.product_id, command.vendor_id)
        product.set_stock(command.stock)
        repo.add(product)

    @handle(ActivateProduct)
    def activate(self, command):
        repo = current_domain.repository_for(Product)
        product = _owned_product(repo, command.product_id, command.vendor_id)
        product.activate()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = _owned_product(repo, command.product_id, command.vendor_id)
        product.deactivate()
        repo.add(product)

    @handle(AddProductImage)
    def add_image(self, command):
        repo = current_domain.repository_for(Product)
        product = _owned_product(repo, command.product_id, command.vendor_id)
        image = product.add_image(command.url)
        repo.add(product)
        return str(image.id)


def products_for_vendor(vendor_id: str) -> list[Product]:
    dao = current_domain.repository_for(Product)._dao
    return all_items(dao.query.filter(vendor_id=vendor_id).order_by("-created_at"))
