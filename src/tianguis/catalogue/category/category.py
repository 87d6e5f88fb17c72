"""Category aggregate — a flat list of storefront categories."""

import re
import unicodedata

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text

from tianguis.domain import tianguis

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(name: str) -> str:
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-")


@tianguis.aggregate
class Category:
    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120, unique=True)
    description: Text()
    is_active: Boolean(default=True)

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError({"slug": ["Slug must contain only lowercase letters, digits and single hyphens"]})

    @classmethod
    def create(cls, name, slug=None, description=None):
        category = cls(name=name, slug=slug or slugify(name), description=description)
        category.raise_(CategoryCreated(category_id=category.id, name=category.name, slug=category.slug))
        return category

    def update(self, name=None, description=None):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Category is already inactive"]})
        self.is_active = False


@tianguis.event(part_of=Category)
class CategoryCreated:
    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
