"""Catalog query layer — filtered, sorted and paginated storefront listings.

Only *listed* products are ever returned: switched on by their vendor and
approved by moderation. Query parameters arrive as raw strings from the
storefront; anything that does not parse as a number is ignored rather than
rejected.
"""

import math
from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from tianguis.catalogue.product.product import ImageStatus, ModerationStatus, Product
from tianguis.utils.query import all_items

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100


class SortKey:
    NEWEST = "newest"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NAME = "name"

    ALL = (NEWEST, PRICE_ASC, PRICE_DESC, NAME)


def parse_number(raw) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_positive_int(raw, default: int) -> int:
    value = parse_number(raw)
    if value is None or value < 1:
        return default
    return int(value)


def _split_ids(raw) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [str(item).strip() for item in raw if str(item).strip()]


@dataclass
class ProductQuery:
    text: str | None = None
    category_ids: list[str] = field(default_factory=list)
    vendor_ids: list[str] = field(default_factory=list)
    min_price: float | None = None
    max_price: float | None = None
    sort: str = SortKey.NEWEST
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_params(
        cls,
        text=None,
        category_ids=None,
        vendor_ids=None,
        min_price=None,
        max_price=None,
        sort=None,
        page=None,
        limit=None,
    ) -> "ProductQuery":
        """Build a query from untrusted request parameters."""
        return cls(
            text=text,
            category_ids=_split_ids(category_ids),
            vendor_ids=_split_ids(vendor_ids),
            min_price=parse_number(min_price),
            max_price=parse_number(max_price),
            sort=sort if sort in SortKey.ALL else SortKey.NEWEST,
            page=parse_positive_int(page, 1),
            limit=min(parse_positive_int(limit, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE),
        )


@dataclass
class ProductPage:
    products: list[Product]
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.total_count else 0

    @property
    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total_count": self.total_count,
            "total_pages": self.total_pages,
            "has_next_page": self.page < self.total_pages,
            "has_previous_page": self.page > 1,
        }


def _filters(query: ProductQuery) -> dict:
    filters = {"is_active": True, "moderation_status": ModerationStatus.APPROVED.value}
    if query.category_ids:
        filters["category_id__in"] = query.category_ids
    if query.vendor_ids:
        filters["vendor_id__in"] = query.vendor_ids
    if query.min_price is not None:
        filters["price__gte"] = query.min_price
    if query.max_price is not None:
        filters["price__lte"] = query.max_price
    return filters


def _mentions(product: Product, needle: str) -> bool:
    return needle in f"{product.name}\n{product.description or ''}".casefold()


_SORTERS = {
    SortKey.NEWEST: (lambda p: p.created_at, True),
    SortKey.PRICE_ASC: (lambda p: p.price, False),
    SortKey.PRICE_DESC: (lambda p: p.price, True),
    SortKey.NAME: (lambda p: p.name.casefold(), False),
}

# Name order is case-insensitive and is applied in memory
_ORDERINGS = {
    SortKey.NEWEST: "-created_at",
    SortKey.PRICE_ASC: "price",
    SortKey.PRICE_DESC: "-price",
}


def search_products(query: ProductQuery) -> ProductPage:
    # A present-but-blank search term is the search page's empty state,
    # not "no filter"
    if query.text is not None and not query.text.strip():
        return ProductPage(products=[], page=query.page, limit=query.limit, total_count=0)

    needle = query.text.strip().casefold() if query.text else None

    dao_query = current_domain.repository_for(Product)._dao.query.filter(**_filters(query))
    start = (query.page - 1) * query.limit

    if needle is None and query.sort in _ORDERINGS:
        result = dao_query.order_by(_ORDERINGS[query.sort]).offset(start).limit(query.limit).all()
        return ProductPage(products=result.items, page=query.page, limit=query.limit, total_count=result.total)

    matches = all_items(dao_query.order_by("-created_at"))
    if needle:
        matches = [p for p in matches if _mentions(p, needle)]

    key, reverse = _SORTERS[query.sort]
    matches.sort(key=key, reverse=reverse)
    return ProductPage(
        products=matches[start : start + query.limit],
        page=query.page,
        limit=query.limit,
        total_count=len(matches),
    )


def primary_image_url(product: Product) -> str | None:
    approved = sorted(
        (i for i in product.images if i.status == ImageStatus.APPROVED.value),
        key=lambda i: i.position,
    )
    return approved[0].url if approved else None
