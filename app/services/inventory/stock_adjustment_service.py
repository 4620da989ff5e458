# app/services/inventory/stock_adjustment_service.py

from sqlalchemy import select, update

from app.core.db import DatabaseManager
from app.core.exceptions import NotFoundError
from app.constants.error_codes import ErrorCode
from app.constants.stock_adjustment_type import StockAdjustmentType
from app.models.masters.product_models import Product
from app.schemas.inventory.stock_adjustment_schemas import StockAdjustmentCreate
from app.utils.logger import get_logger

logger = get_logger(__name__)


def compute_new_quantity(current: int, adjustment_type: StockAdjustmentType, quantity: int) -> int:
    if adjustment_type == StockAdjustmentType.INCREASE:
        return current + quantity
    if adjustment_type == StockAdjustmentType.DECREASE:
        return max(0, current - quantity)
    if adjustment_type == StockAdjustmentType.SET:
        return quantity
    raise ValueError(f"Unknown adjustment type: {adjustment_type}")


async def adjust_stock(
    db: DatabaseManager,
    payload: StockAdjustmentCreate,
    user_id: int | None = None,
) -> dict:
    """
    Read, compute and write the new on-hand quantity inside one transaction.

    The product row is locked (``FOR UPDATE`` on PostgreSQL, ``BEGIN
    IMMEDIATE`` on SQLite) before it is read, so concurrent adjustments on
    the same product queue behind each other instead of overwriting each
    other's result.
    """
    async with db.transaction() as tx:
        # ------------------------------------
        # 1. Lock product row
        # ------------------------------------
        product = await tx.query_one(
            select(Product.id, Product.name, Product.quantity_in_stock)
            .where(Product.id == payload.product_id)
            .with_for_update()
        )
        if not product:
            raise NotFoundError(
                "Product not found",
                ErrorCode.PRODUCT_NOT_FOUND,
                details={"product_id": payload.product_id},
            )

        # ------------------------------------
        # 2. Compute (never below zero)
        # ------------------------------------
        previous_quantity = product["quantity_in_stock"]
        new_quantity = compute_new_quantity(
            previous_quantity, payload.adjustment_type, payload.quantity
        )

        # ------------------------------------
        # 3. Write back
        # ------------------------------------
        await tx.execute(
            update(Product)
            .where(Product.id == payload.product_id)
            .values(quantity_in_stock=new_quantity)
        )

    logger.info(
        "Stock adjusted",
        extra={
            "product_id": payload.product_id,
            "adjustment_type": payload.adjustment_type.value,
            "previous_quantity": previous_quantity,
            "new_quantity": new_quantity,
            "reason": payload.reason,
            "user_id": user_id,
        },
    )

    return {
        "id": product["id"],
        "name": product["name"],
        "previous_quantity": previous_quantity,
        "new_quantity": new_quantity,
        "adjustment": payload.quantity,
        "adjustment_type": payload.adjustment_type,
    }
