"""Admin moderation of products and product images — commands and handler."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.catalogue.product.product import ImageStatus, ModerationStatus, Product
from tianguis.domain import tianguis
from tianguis.utils.query import all_items


@tianguis.command(part_of=Product)
class ApproveProduct:
    product_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    notes = Text()


@tianguis.command(part_of=Product)
class RejectProduct:
    product_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    reason = Text(required=True)


@tianguis.command(part_of=Product)
class RequestProductChanges:
    product_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    notes = Text(required=True)


@tianguis.command(part_of=Product)
class ApproveProductImage:
    product_id = Identifier(required=True)
    image_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    notes = Text()


@tianguis.command(part_of=Product)
class RejectProductImage:
    product_id = Identifier(required=True)
    image_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    category = String(required=True)
    notes = Text()


@tianguis.command_handler(part_of=Product)
class ProductModerationHandler:
    def _moderate(self, product_id, decision, moderator_id, notes):
        repo = current_domain.repository_for(Product)
        product = repo.get(product_id)
        product.moderate(decision, moderator_id=moderator_id, notes=notes)
        repo.add(product)

    @handle(ApproveProduct)
    def approve_product(self, command):
        self._moderate(command.product_id, ModerationStatus.APPROVED, command.moderator_id, command.notes)

    @handle(RejectProduct)
    def reject_product(self, command):
        self._moderate(command.product_id, ModerationStatus.REJECTED, command.moderator_id, command.reason)

    @handle(RequestProductChanges)
    def request_changes(self, command):
        self._moderate(
            command.product_id, ModerationStatus.CHANGES_REQUESTED, command.moderator_id, command.notes
        )

    @handle(ApproveProductImage)
    def approve_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.approve_image(command.image_id, moderator_id=command.moderator_id, notes=command.notes)
        repo.add(product)

    @handle(RejectProductImage)
    def reject_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.reject_image(
            command.image_id,
            moderator_id=command.moderator_id,
            reason=command.reason,
            category=command.category,
            notes=command.notes,
        )
        repo.add(product)


def moderation_queue(status: str = ModerationStatus.PENDING.value) -> list[Product]:
    dao = current_domain.repository_for(Product)._dao
    return all_items(dao.query.filter(moderation_status=status).order_by("created_at"))


def image_queue(status: str = ImageStatus.PENDING.value) -> list[dict]:
    """Images awaiting review across every product, oldest product first."""
    queue = []
    for product in all_items(current_domain.repository_for(Product)._dao.query.order_by("created_at")):
        for image in product.images:
            if image.status == status:
                queue.append(
                    {
                        "product_id": str(product.id),
                        "product_name": product.name,
                        "vendor_id": str(product.vendor_id),
                        "image_id": str(image.id),
                        "image_url": image.url,
                        "position": image.position,
                        "status": image.status,
                        "rejection_reason": image.rejection_reason,
                        "rejection_category": image.rejection_category,
                        "created_at": product.created_at,
                    }
                )
    return sorted(queue, key=lambda entry: (entry["created_at"], entry["position"]))
