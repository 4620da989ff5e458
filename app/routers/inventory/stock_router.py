# app/routers/inventory/stock_router.py

from fastapi import APIRouter, Depends

from app.core.db import DatabaseManager, get_db
from app.constants.user_role import STOCK_WRITE_ROLES
from app.schemas.inventory.stock_adjustment_schemas import (
    StockAdjustmentCreate,
    StockAdjustmentOut,
    LowStockListData,
    CategoryListData,
)
from app.services.inventory.stock_adjustment_service import adjust_stock
from app.services.inventory.inventory_report_service import (
    get_low_stock_products,
    get_categories,
)
from app.utils.check_roles import require_role
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])
logger = get_logger(__name__)


@router.post("/stock-adjustment", response_model=APIResponse[StockAdjustmentOut])
async def adjust_stock_api(
    payload: StockAdjustmentCreate,
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role(STOCK_WRITE_ROLES)),
):
    logger.info(
        "Stock adjustment",
        extra={"product_id": payload.product_id, "type": payload.adjustment_type.value},
    )
    result = await adjust_stock(db, payload, user["id"])
    return success_response("Stock adjusted successfully", result)


@router.get("/low-stock", response_model=APIResponse[LowStockListData])
async def low_stock_api(
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role()),
):
    products = await get_low_stock_products(db)
    return success_response("Low stock products fetched successfully", {"products": products})


@router.get("/categories", response_model=APIResponse[CategoryListData])
async def categories_api(
    db: DatabaseManager = Depends(get_db),
    user=Depends(require_role()),
):
    categories = await get_categories(db)
    return success_response("Categories fetched successfully", {"categories": categories})
