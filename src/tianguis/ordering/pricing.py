"""Vendor-group pricing for a checkout.

A cart is split into one group per owning vendor. Each group is priced on its
own: shipping, tax and its share of any coupon discount. For every group,
``total == subtotal - discount + shipping + tax``, and the checkout charges
the sum of the group totals.
"""

from dataclasses import dataclass

from tianguis.ordering.cart import PricedLine
from tianguis.promotions.validation import CouponQuote


@dataclass(frozen=True)
class PricingRules:
    tax_rate: float  # fraction, e.g. 0.16
    flat_shipping: float
    free_shipping_threshold: float | None
    currency: str = "MXN"

    @classmethod
    def from_settings(cls, settings: dict) -> "PricingRules":
        threshold = settings.get("free_shipping_threshold")
        return cls(
            tax_rate=settings["tax_rate"] / 100,
            flat_shipping=settings["default_shipping_cost"],
            free_shipping_threshold=threshold if threshold else None,
            currency=settings["currency"],
        )

    def tax_rate_for(self, country: str | None) -> float:
        """VAT applies to domestic deliveries; exports are zero-rated."""
        if not country or country.upper() == "MX":
            return self.tax_rate
        return 0.0

    def shipping_for(self, subtotal: float) -> float:
        if self.free_shipping_threshold is not None and subtotal > self.free_shipping_threshold:
            return 0.0
        return self.flat_shipping


@dataclass
class VendorGroupQuote:
    vendor_id: str
    lines: list[PricedLine]
    discount: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0

    @property
    def subtotal(self) -> float:
        return round(sum(line.line_total for line in self.lines), 2)

    @property
    def total(self) -> float:
        return round(self.subtotal - self.discount + self.shipping + self.tax, 2)

    def to_dict(self) -> dict:
        return {
            "vendor_id": self.vendor_id,
            "lines": [line.to_dict() for line in self.lines],
            "subtotal": self.subtotal,
            "discount": self.discount,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
        }


@dataclass
class CheckoutBreakdown:
    groups: list[VendorGroupQuote]
    currency: str
    coupon_code: str | None = None
    coupon_id: str | None = None

    @property
    def subtotal(self) -> float:
        return round(sum(g.subtotal for g in self.groups), 2)

    @property
    def discount(self) -> float:
        return round(sum(g.discount for g in self.groups), 2)

    @property
    def shipping(self) -> float:
        return round(sum(g.shipping for g in self.groups), 2)

    @property
    def tax(self) -> float:
        return round(sum(g.tax for g in self.groups), 2)

    @property
    def total(self) -> float:
        return round(sum(g.total for g in self.groups), 2)

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "coupon_code": self.coupon_code,
            "groups": [g.to_dict() for g in self.groups],
            "subtotal": self.subtotal,
            "discount": self.discount,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
        }


def partition_by_vendor(lines: list[PricedLine]) -> list[VendorGroupQuote]:
    """Group lines by owning vendor, keeping first-seen vendor order."""
    groups: dict[str, VendorGroupQuote] = {}
    for line in lines:
        groups.setdefault(line.vendor_id, VendorGroupQuote(vendor_id=line.vendor_id, lines=[])).lines.append(line)
    return list(groups.values())


def allocate_discount(amount: float, weights: dict[str, float]) -> dict[str, float]:
    """Split ``amount`` across vendors in proportion to ``weights``.

    Shares are rounded to cents; the last vendor takes the rounding residue so
    the shares always add back up to ``amount``.
    """
    total_weight = sum(weights.values())
    if amount <= 0 or total_weight <= 0:
        return {vendor_id: 0.0 for vendor_id in weights}

    shares: dict[str, float] = {}
    remaining = round(amount, 2)
    vendor_ids = list(weights)
    for vendor_id in vendor_ids[:-1]:
        share = round(amount * weights[vendor_id] / total_weight, 2)
        shares[vendor_id] = share
        remaining = round(remaining - share, 2)
    shares[vendor_ids[-1]] = remaining
    return shares


def price_checkout(
    lines: list[PricedLine],
    rules: PricingRules,
    destination_country: str | None = None,
    coupon: CouponQuote | None = None,
) -> CheckoutBreakdown:
    groups = partition_by_vendor(lines)

    shares: dict[str, float] = {}
    if coupon is not None and not coupon.free_shipping:
        shares = allocate_discount(coupon.discount_amount, coupon.eligible_subtotals)

    tax_rate = rules.tax_rate_for(destination_country)
    for group in groups:
        group.discount = min(shares.get(group.vendor_id, 0.0), group.subtotal)

        waived = coupon is not None and coupon.free_shipping and group.vendor_id in coupon.eligible_subtotals
        group.shipping = 0.0 if waived else rules.shipping_for(group.subtotal)
        group.tax = round((group.subtotal - group.discount) * tax_rate, 2)

    return CheckoutBreakdown(
        groups=groups,
        currency=rules.currency,
        coupon_code=coupon.code if coupon else None,
        coupon_id=coupon.coupon_id if coupon else None,
    )
