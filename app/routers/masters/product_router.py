# app/routers/masters/product_router.py

from fastapi import APIRouter, Depends, Query

from app.core.db import DatabaseManager, get_db
from app.constants.user_role import STOCK_WRITE_ROLES, PRODUCT_DELETE_ROLES
from app.schemas.masters.product_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductOut,
    ProductListData,
    ProductListFilters,
    ProductDeleteOut,
)
from app.services.masters.product_service import (
    create_product,
    list_products,
    get_product,
    update_product,
    delete_product,
)
from app.utils.check_roles import require_role
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/api/inventory/products", tags=["Products"])
logger = get_logger(__name__)


@router.get("", response_model=APIResponse[ProductListData])
async def list_products_api(
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role()),
    search: str | None = Query(None, description="Search by name, SKU or barcode"),
    category: str | None = Query(None),
    is_active: bool | None = Query(None),
    low_stock: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
):
    filters = ProductListFilters(
        search=search,
        category=category,
        is_active=is_active,
        low_stock=low_stock,
        page=page,
        limit=limit,
    )
    data = await list_products(db, filters)
    return success_response("Products fetched successfully", data)


@router.get("/{product_id}", response_model=APIResponse[ProductOut])
async def get_product_api(
    product_id: int,
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role()),
):
    product = await get_product(db, product_id)
    return success_response("Product fetched successfully", product)


@router.post("", status_code=201, response_model=APIResponse[ProductOut])
async def create_product_api(
    payload: ProductCreate,
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role(STOCK_WRITE_ROLES)),
):
    logger.info("Create product", extra={"sku": payload.sku})
    product = await create_product(db, payload, user["id"])
    return success_response("Product created successfully", product)


@router.put("/{product_id}", response_model=APIResponse[ProductOut])
async def update_product_api(
    product_id: int,
    payload: ProductUpdate,
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role(STOCK_WRITE_ROLES)),
):
    product = await update_product(db, product_id, payload.model_dump(exclude_unset=True))
    return success_response("Product updated successfully", product)


@router.delete("/{product_id}", response_model=APIResponse[ProductDeleteOut])
async def delete_product_api(
    product_id: int,
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role(PRODUCT_DELETE_ROLES)),
):
    result = await delete_product(db, product_id)
    if result["action"] == "deactivated":
        return success_response("Product deactivated successfully (has transaction history)", result)
    return success_response("Product deleted successfully", result)
