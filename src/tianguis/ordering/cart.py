"""Client-held cart lines and their resolution against live catalog data.

The storefront keeps the cart in browser storage and sends it wholesale with
every pricing request. Only product ids and quantities are trusted; names,
prices, owning vendor and stock always come from the database.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from tianguis.catalogue.product.product import Product

MAX_LINE_QUANTITY = 999


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    vendor_id: str
    category_id: str
    name: str
    unit_price: float
    quantity: int

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "vendor_id": self.vendor_id,
            "category_id": self.category_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
        }


def parse_cart(items) -> list[CartLine]:
    """Normalise raw cart items, merging repeated products."""
    if not items:
        raise ValidationError({"items": ["Cart is empty"]})

    quantities: dict[str, int] = {}
    for raw in items:
        product_id = str(raw.get("product_id") or "").strip()
        quantity = raw.get("quantity")
        if not product_id:
            raise ValidationError({"items": ["Every cart item needs a product_id"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"items": [f"Quantity for product {product_id} must be a positive integer"]})
        quantities[product_id] = quantities.get(product_id, 0) + quantity

    for product_id, quantity in quantities.items():
        if quantity > MAX_LINE_QUANTITY:
            raise ValidationError({"items": [f"Quantity for product {product_id} exceeds {MAX_LINE_QUANTITY}"]})

    return [CartLine(product_id=pid, quantity=qty) for pid, qty in quantities.items()]


def resolve_lines(cart: list[CartLine], check_stock: bool = True) -> list[PricedLine]:
    """Price cart lines from the catalog, collecting every problem before failing."""
    repo = current_domain.repository_for(Product)
    problems: list[str] = []
    lines: list[PricedLine] = []

    for item in cart:
        try:
            product = repo.get(item.product_id)
        except ObjectNotFoundError:
            problems.append(f"Product {item.product_id} is no longer available")
            continue

        if not product.is_listed:
            problems.append(f"'{product.name}' is no longer available")
            continue
        if check_stock and item.quantity > product.stock:
            problems.append(f"Insufficient stock for '{product.name}': requested {item.quantity}, available {product.stock}")
            continue

        lines.append(
            PricedLine(
                product_id=str(product.id),
                vendor_id=str(product.vendor_id),
                category_id=str(product.category_id),
                name=product.name,
                unit_price=product.price,
                quantity=item.quantity,
            )
        )

    if problems:
        raise ValidationError({"items": problems})
    return lines
