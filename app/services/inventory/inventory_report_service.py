# app/services/inventory/inventory_report_service.py

from sqlalchemy import select, func

from app.core.db import DatabaseManager
from app.models.masters.product_models import Product
from app.utils.decimal_utils import to_decimal


async def get_low_stock_products(db: DatabaseManager) -> list[dict]:
    shortage = (Product.reorder_level - Product.quantity_in_stock).label("shortage")

    stmt = (
        select(
            Product.id,
            Product.sku,
            Product.name,
            Product.quantity_in_stock,
            Product.reorder_level,
            shortage,
        )
        .where(
            Product.quantity_in_stock <= Product.reorder_level,
            Product.is_active.is_(True),
        )
        .order_by(shortage.desc(), Product.id.asc())
    )
    return await db.query(stmt)


async def get_categories(db: DatabaseManager) -> list[dict]:
    stmt = (
        select(
            Product.category,
            func.count(Product.id).label("product_count"),
            func.coalesce(
                func.sum(Product.quantity_in_stock * Product.selling_price), 0
            ).label("total_value"),
        )
        .where(
            Product.category.is_not(None),
            Product.category != "",
            Product.is_active.is_(True),
        )
        .group_by(Product.category)
        .order_by(Product.category.asc())
    )
    rows = await db.query(stmt)

    return [
        {
            "category": r["category"],
            "product_count": r["product_count"],
            "total_value": to_decimal(r["total_value"]),
        }
        for r in rows
    ]
