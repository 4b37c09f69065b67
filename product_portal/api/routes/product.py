from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import RedirectResponse

from product_portal.api.dependencies import get_product_service
from product_portal.core.logging import get_logger
from product_portal.domain.schemas.product import (
    EditProductRequest,
    ProductListResponse,
    ProductResponse,
)
from product_portal.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])
logger = get_logger(__name__)


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products"
)
async def list_products(
    product_service: ProductService = Depends(get_product_service)
):
    """Gets the first page of products."""
    products = await product_service.list_products()
    return ProductListResponse.from_records(products)


@router.get(
    "/{product_id}/edit",
    response_model=ProductResponse,
    summary="Get product for editing"
)
async def edit_product(
    product_id: str = Path(..., min_length=1),
    product_service: ProductService = Depends(get_product_service)
):
    """Gets one product for the edit form."""
    product = await product_service.get_product(product_id)
    return ProductResponse.from_record(product)


@router.post(
    "/edit",
    status_code=status.HTTP_303_SEE_OTHER,
    response_class=RedirectResponse,
    summary="Update product price"
)
async def submit_edit(
    form: EditProductRequest,
    request: Request,
    product_service: ProductService = Depends(get_product_service)
):
    """Updates the product price and sends the browser back to the list."""
    # The updated record is not shown; the list page reads fresh data
    await product_service.update_price(form.id, form.price)
    logger.info(f"Price of product {form.id} updated")
    return RedirectResponse(
        url=str(request.url_for("list_products")),
        status_code=status.HTTP_303_SEE_OTHER
    )
