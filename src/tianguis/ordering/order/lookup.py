"""Order read paths: guest lookup and per-audience listings."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from tianguis.identity.account import normalize_email
from tianguis.ordering.order.order import Order


def lookup_guest_order(email: str, order_number: str) -> Order:
    """Return the order only when both the email and the order number match it.

    A wrong email and an unknown number are indistinguishable to the caller.
    """
    number = (order_number or "").strip().upper()
    email = normalize_email(email)
    if number and email:
        order = current_domain.repository_for(Order)._dao.query.filter(order_number=number).all().first
        if order is not None and normalize_email(order.customer_email) == email:
            return order
    raise ObjectNotFoundError("Order not found")


DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _page(query, page: int, limit: int) -> list[Order]:
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    return query.order_by("-placed_at").offset((page - 1) * limit).limit(limit).all().items


def orders_for_customer(
    customer_id: str | None, email: str | None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
) -> list[Order]:
    buyer = Q()
    if customer_id:
        buyer |= Q(customer_id=customer_id)
    if email:
        buyer |= Q(customer_email=normalize_email(email))
    if not buyer:
        return []
    return _page(current_domain.repository_for(Order)._dao.query.filter(buyer), page, limit)


def orders_for_vendor(
    vendor_id: str, status: str | None = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
) -> list[Order]:
    filters = {"vendor_id": vendor_id}
    if status:
        filters["status"] = status
    return _page(current_domain.repository_for(Order)._dao.query.filter(**filters), page, limit)


def all_orders(status: str | None = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> list[Order]:
    dao = current_domain.repository_for(Order)._dao
    query = dao.query.filter(status=status) if status else dao.query
    return _page(query, page, limit)
