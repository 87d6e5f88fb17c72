"""FastAPI endpoints for the storefront catalog and vendor product management."""

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from tianguis.catalogue.api.schemas import (
    AddImageRequest,
    AddProductRequest,
    CategoryIdResponse,
    CreateCategoryRequest,
    ImageIdResponse,
    ProductIdResponse,
    SetStockRequest,
    StatusResponse,
    UpdateCategoryRequest,
    UpdateProductRequest,
    category_to_dict,
    product_to_dict,
)
from tianguis.catalogue.category.management import (
    CreateCategory,
    DeactivateCategory,
    UpdateCategory,
    list_categories,
)
from tianguis.catalogue.product.management import (
    ActivateProduct,
    AddProduct,
    AddProductImage,
    DeactivateProduct,
    SetProductStock,
    UpdateProduct,
    products_for_vendor,
)
from tianguis.catalogue.product.product import Product
from tianguis.catalogue.search import ProductQuery, search_products
from tianguis.identity.access import require_admin, require_vendor
from tianguis.identity.credentials import AuthenticatedIdentity

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])
vendor_product_router = APIRouter(prefix="/vendor/products", tags=["vendor"])


def _page_response(query: ProductQuery) -> dict:
    page = search_products(query)
    return {
        "products": [product_to_dict(p) for p in page.products],
        "pagination": page.pagination,
    }


# --- Storefront endpoints ---


@product_router.get("")
async def list_products(
    category_ids: str | None = None,
    vendor_ids: str | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    sort: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> dict:
    # Numeric filters arrive as raw strings; malformed values are ignored
    query = ProductQuery.from_params(
        category_ids=category_ids,
        vendor_ids=vendor_ids,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        page=page,
        limit=limit,
    )
    return _page_response(query)


@product_router.get("/search")
async def search(
    q: str = Query(""),
    category_ids: str | None = None,
    vendor_ids: str | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    sort: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> dict:
    query = ProductQuery.from_params(
        text=q,
        category_ids=category_ids,
        vendor_ids=vendor_ids,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        page=page,
        limit=limit,
    )
    return _page_response(query)


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    product = current_domain.repository_for(Product).get(product_id)
    if not product.is_listed:
        raise ObjectNotFoundError(f"Product {product_id} not found")
    return product_to_dict(product)


# --- Category endpoints ---


@category_router.get("")
async def get_categories() -> list[dict]:
    return [category_to_dict(c) for c in list_categories()]


@category_router.post("", status_code=201, response_model=CategoryIdResponse)
async def create_category(
    body: CreateCategoryRequest, _: AuthenticatedIdentity = Depends(require_admin)
) -> CategoryIdResponse:
    command = CreateCategory(name=body.name, slug=body.slug, description=body.description)
    result = current_domain.process(command, asynchronous=False)
    return CategoryIdResponse(category_id=result)


@category_router.put("/{category_id}", response_model=StatusResponse)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, _: AuthenticatedIdentity = Depends(require_admin)
) -> StatusResponse:
    command = UpdateCategory(category_id=category_id, name=body.name, description=body.description)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@category_router.post("/{category_id}/deactivate", response_model=StatusResponse)
async def deactivate_category(category_id: str, _: AuthenticatedIdentity = Depends(require_admin)) -> StatusResponse:
    current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()


# --- Vendor product endpoints ---


@vendor_product_router.get("")
async def my_products(identity: AuthenticatedIdentity = Depends(require_vendor)) -> list[dict]:
    return [product_to_dict(p, include_moderation=True) for p in products_for_vendor(identity.vendor_id)]


@vendor_product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(
    body: AddProductRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> ProductIdResponse:
    command = AddProduct(
        vendor_id=identity.vendor_id,
        category_id=body.category_id,
        name=body.name,
        description=body.description,
        price=body.price,
        stock=body.stock,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@vendor_product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(
    product_id: str, body: UpdateProductRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    command = UpdateProduct(
        product_id=product_id,
        vendor_id=identity.vendor_id,
        name=body.name,
        description=body.description,
        price=body.price,
        category_id=body.category_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@vendor_product_router.put("/{product_id}/stock", response_model=StatusResponse)
async def set_stock(
    product_id: str, body: SetStockRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    command = SetProductStock(product_id=product_id, vendor_id=identity.vendor_id, stock=body.stock)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@vendor_product_router.post("/{product_id}/activate", response_model=StatusResponse)
async def activate_product(
    product_id: str, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    current_domain.process(ActivateProduct(product_id=product_id, vendor_id=identity.vendor_id), asynchronous=False)
    return StatusResponse()


@vendor_product_router.post("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(
    product_id: str, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    current_domain.process(
        DeactivateProduct(product_id=product_id, vendor_id=identity.vendor_id), asynchronous=False
    )
    return StatusResponse()


@vendor_product_router.post("/{product_id}/images", status_code=201, response_model=ImageIdResponse)
async def add_image(
    product_id: str, body: AddImageRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> ImageIdResponse:
    command = AddProductImage(product_id=product_id, vendor_id=identity.vendor_id, url=body.url)
    result = current_domain.process(command, asynchronous=False)
    return ImageIdResponse(image_id=result)
