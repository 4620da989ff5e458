# app/services/masters/product_service.py

import math

from sqlalchemy import select, insert, update, delete, func, case, or_
from sqlalchemy.exc import IntegrityError

from app.core.db import DatabaseManager
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from app.constants.error_codes import ErrorCode
from app.models.masters.product_models import Product
from app.models.users.user_models import User
from app.models.sales.sale_models import SaleItem
from app.models.purchases.purchase_models import PurchaseItem
from app.schemas.masters.product_schemas import ProductCreate, ProductListFilters
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Columns a caller may change through update_product. Stock quantity is
# deliberately absent: it moves only through adjust_stock.
UPDATABLE_FIELDS = frozenset({
    "sku",
    "barcode",
    "name",
    "description",
    "category",
    "brand",
    "unit",
    "cost_price",
    "selling_price",
    "vat_rate",
    "is_vat_inclusive",
    "reorder_level",
    "max_stock_level",
    "is_active",
    "is_service",
    "image_url",
})

NON_NULLABLE_FIELDS = frozenset(
    c.name for c in Product.__table__.c if not c.nullable
) & UPDATABLE_FIELDS

STOCK_STATUS = case(
    (Product.quantity_in_stock <= Product.reorder_level, "low"),
    (Product.quantity_in_stock >= Product.max_stock_level, "high"),
    else_="normal",
).label("stock_status")


def _product_select():
    return (
        select(
            *Product.__table__.c,
            User.username.label("created_by_username"),
            STOCK_STATUS,
        )
        .select_from(Product)
        .outerjoin(User, Product.created_by == User.id)
    )


def _product_not_found(product_id: int) -> NotFoundError:
    return NotFoundError(
        "Product not found",
        ErrorCode.PRODUCT_NOT_FOUND,
        details={"product_id": product_id},
    )


async def _ensure_unique(executor, *, sku: str | None, barcode: str | None, exclude_id: int | None = None):
    if sku is not None:
        stmt = select(Product.id).where(Product.sku == sku)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        if await executor.query_one(stmt):
            raise ConflictError("SKU already exists", ErrorCode.PRODUCT_SKU_EXISTS)

    if barcode:
        stmt = select(Product.id).where(Product.barcode == barcode)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        if await executor.query_one(stmt):
            raise ConflictError("Barcode already exists", ErrorCode.PRODUCT_BARCODE_EXISTS)


# ---------------- CREATE ----------------
async def create_product(db: DatabaseManager, payload: ProductCreate, user_id: int | None = None) -> dict:
    async with db.transaction() as tx:
        await _ensure_unique(tx, sku=payload.sku, barcode=payload.barcode)

        try:
            result = await tx.execute(
                insert(Product).values(**payload.model_dump(), created_by=user_id)
            )
        except IntegrityError as exc:
            # lost a race with a concurrent create between check and insert
            raise ConflictError("SKU or barcode already exists", ErrorCode.CONFLICT) from exc

        product = await tx.query_one(_product_select().where(Product.id == result.inserted_id))

    logger.info("Product created", extra={"product_id": product["id"], "sku": product["sku"]})
    return product


# ---------------- GET ----------------
async def get_product(db: DatabaseManager, product_id: int) -> dict:
    product = await db.query_one(_product_select().where(Product.id == product_id))
    if not product:
        raise _product_not_found(product_id)
    return product


# ---------------- LIST ----------------
async def list_products(db: DatabaseManager, filters: ProductListFilters) -> dict:
    conditions = []

    if filters.search:
        pattern = f"%{filters.search}%"
        conditions.append(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.barcode.ilike(pattern),
            )
        )

    if filters.category:
        conditions.append(Product.category == filters.category)

    if filters.is_active is not None:
        conditions.append(Product.is_active.is_(filters.is_active))

    if filters.low_stock:
        conditions.append(Product.quantity_in_stock <= Product.reorder_level)

    data_stmt = (
        _product_select()
        .where(*conditions)
        .order_by(Product.name.asc(), Product.id.asc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    products = await db.query(data_stmt)

    count_stmt = select(func.count(Product.id).label("total")).where(*conditions)
    total = (await db.query_one(count_stmt))["total"] or 0

    return {
        "products": products,
        "pagination": {
            "page": filters.page,
            "limit": filters.limit,
            "total": total,
            "pages": math.ceil(total / filters.limit),
        },
    }


# ---------------- UPDATE ----------------
async def update_product(db: DatabaseManager, product_id: int, updates: dict) -> dict:
    if not updates:
        raise ValidationFailedError("No fields to update")

    unknown = sorted(set(updates) - UPDATABLE_FIELDS)
    if unknown:
        raise ValidationFailedError(
            "Fields cannot be updated",
            ErrorCode.PRODUCT_FIELD_NOT_UPDATABLE,
            details={"fields": unknown},
        )

    nulled = sorted(f for f in NON_NULLABLE_FIELDS & set(updates) if updates[f] is None)
    if nulled:
        raise ValidationFailedError("Fields cannot be null", details={"fields": nulled})

    async with db.transaction() as tx:
        exists = await tx.query_one(select(Product.id).where(Product.id == product_id))
        if not exists:
            raise _product_not_found(product_id)

        await _ensure_unique(
            tx,
            sku=updates.get("sku"),
            barcode=updates.get("barcode"),
            exclude_id=product_id,
        )

        try:
            await tx.execute(
                update(Product).where(Product.id == product_id).values(**updates)
            )
        except IntegrityError as exc:
            raise ConflictError("SKU or barcode already exists", ErrorCode.CONFLICT) from exc

        product = await tx.query_one(_product_select().where(Product.id == product_id))

    logger.info("Product updated", extra={"product_id": product_id, "fields": sorted(updates)})
    return product


# ---------------- DELETE ----------------
async def can_hard_delete(executor, product_id: int) -> bool:
    """
    True when no sale or purchase line references the product.

    ``executor`` is either the manager or an open TransactionHandle. The
    answer is only advisory: a sale recorded after this check and before
    the delete is not seen.
    """
    sales_count = (
        select(func.count(SaleItem.id))
        .where(SaleItem.product_id == product_id)
        .scalar_subquery()
    )
    purchase_count = (
        select(func.count(PurchaseItem.id))
        .where(PurchaseItem.product_id == product_id)
        .scalar_subquery()
    )
    usage = await executor.query_one(
        select(
            sales_count.label("sales_count"),
            purchase_count.label("purchase_count"),
        )
    )
    return not usage["sales_count"] and not usage["purchase_count"]


async def delete_product(db: DatabaseManager, product_id: int) -> dict:
    async with db.transaction() as tx:
        exists = await tx.query_one(select(Product.id).where(Product.id == product_id))
        if not exists:
            raise _product_not_found(product_id)

        if await can_hard_delete(tx, product_id):
            await tx.execute(delete(Product).where(Product.id == product_id))
            action = "deleted"
        else:
            await tx.execute(
                update(Product).where(Product.id == product_id).values(is_active=False)
            )
            action = "deactivated"

    logger.info("Product removed", extra={"product_id": product_id, "action": action})
    return {"id": product_id, "action": action}
