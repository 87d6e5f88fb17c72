"""Pydantic request/response schemas for the Catalogue API."""

from pydantic import BaseModel, Field

from tianguis.catalogue.search import primary_image_url


# --- Category Request Schemas ---


class CreateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Artesanías",
                    "slug": "artesanias",
                    "description": "Handmade crafts from Mexican artisans.",
                }
            ]
        }
    }

    name: str = Field(..., max_length=100)
    slug: str | None = Field(None, max_length=120)
    description: str | None = None


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    description: str | None = None


# --- Product Request Schemas ---


class AddProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "category_id": "cat-artesanias",
                    "name": "Alebrije de copal",
                    "description": "Hand-carved and painted in Oaxaca.",
                    "price": 850.0,
                    "stock": 4,
                }
            ]
        }
    }

    category_id: str
    name: str = Field(..., max_length=255)
    description: str | None = None
    price: float = Field(..., gt=0)
    stock: int = Field(0, ge=0)


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    price: float | None = Field(None, gt=0)
    category_id: str | None = None


class SetStockRequest(BaseModel):
    stock: int = Field(..., ge=0)


class AddImageRequest(BaseModel):
    url: str = Field(..., max_length=500)


# --- Response Schemas ---


class ProductIdResponse(BaseModel):
    product_id: str


class CategoryIdResponse(BaseModel):
    category_id: str


class ImageIdResponse(BaseModel):
    image_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


def category_to_dict(category) -> dict:
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "is_active": category.is_active,
    }


def image_to_dict(image) -> dict:
    return {
        "id": str(image.id),
        "url": image.url,
        "position": image.position,
        "status": image.status,
        "rejection_reason": image.rejection_reason,
        "rejection_category": image.rejection_category,
    }


def product_to_dict(product, include_moderation: bool = False) -> dict:
    data = {
        "id": str(product.id),
        "vendor_id": str(product.vendor_id),
        "category_id": str(product.category_id),
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "image_url": primary_image_url(product),
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }
    if include_moderation:
        data.update(
            is_active=product.is_active,
            moderation_status=product.moderation_status,
            moderation_notes=product.moderation_notes,
            images=[image_to_dict(image) for image in sorted(product.images, key=lambda i: i.position)],
        )
    return data
