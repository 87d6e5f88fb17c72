"""Catalogue reacts to order cancellations by returning units to stock."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from tianguis.catalogue.product.product import Product
from tianguis.domain import tianguis
from tianguis.ordering.order.events import OrderCancelled
from tianguis.ordering.order.order import Order

logger = structlog.get_logger(__name__)


@tianguis.event_handler(part_of=Order)
class RestockOnCancellation:
    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        repo = current_domain.repository_for(Product)
        for item in json.loads(event.items):
            try:
                product = repo.get(item["product_id"])
            except ObjectNotFoundError:
                logger.warning("restock.product_missing", order_id=str(event.order_id), product_id=item["product_id"])
                continue
            product.restock(item["quantity"], reason="cancellation")
            repo.add(product)
