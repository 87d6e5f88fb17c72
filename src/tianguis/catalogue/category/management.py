"""Category management — commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.catalogue.category.category import Category, slugify
from tianguis.domain import tianguis
from tianguis.utils.query import all_items


@tianguis.command(part_of=Category)
class CreateCategory:
    name = String(required=True, max_length=100)
    slug = String(max_length=120)
    description = Text()


@tianguis.command(part_of=Category)
class UpdateCategory:
    category_id = Identifier(required=True)
    name = String(max_length=100)
    description = Text()


@tianguis.command(part_of=Category)
class DeactivateCategory:
    category_id = Identifier(required=True)


@tianguis.command_handler(part_of=Category)
class CategoryManagementHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        slug = command.slug or slugify(command.name)
        if repo._dao.query.filter(slug=slug).all().items:
            raise ValidationError({"slug": [f"Category with slug '{slug}' already exists"]})

        category = Category.create(name=command.name, slug=slug, description=command.description)
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.update(name=command.name, description=command.description)
        repo.add(category)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        repo.add(category)


def list_categories(include_inactive: bool = False) -> list[Category]:
    dao = current_domain.repository_for(Category)._dao
    query = dao.query if include_inactive else dao.query.filter(is_active=True)
    return sorted(all_items(query.order_by("name")), key=lambda c: c.name.lower())
