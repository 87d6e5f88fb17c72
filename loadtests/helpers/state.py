"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across
users. State tracks ids returned by earlier steps so follow-up steps can
reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """A guest shopper moving from browsing to a paid checkout."""

    listing: list[dict] = field(default_factory=list)
    items: list[dict] = field(default_factory=list)
    customer_email: str | None = None
    coupon_code: str | None = None
    checkout_id: str | None = None
    expected_total: float = 0.0
    order_numbers: list[str] = field(default_factory=list)


@dataclass
class VendorState:
    """A vendor going from application to a moderated listing."""

    vendor_id: str | None = None
    email: str | None = None
    password: str | None = None
    token: str | None = None
    category_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    order_ids: list[str] = field(default_factory=list)

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


@dataclass
class AdminSession:
    token: str | None = None

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}
