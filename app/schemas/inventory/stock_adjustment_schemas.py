# app/schemas/inventory/stock_adjustment_schemas.py

from pydantic import BaseModel, Field
from typing import Optional, List
from decimal import Decimal

from app.constants.stock_adjustment_type import StockAdjustmentType


class StockAdjustmentCreate(BaseModel):
    product_id: int
    adjustment_type: StockAdjustmentType
    quantity: int = Field(ge=0)
    reason: str = Field(min_length=1)
    notes: Optional[str] = None


class StockAdjustmentOut(BaseModel):
    id: int
    name: str
    previous_quantity: int
    new_quantity: int
    adjustment: int
    adjustment_type: StockAdjustmentType


class LowStockProductOut(BaseModel):
    id: int
    sku: str
    name: str
    quantity_in_stock: int
    reorder_level: int
    shortage: int


class LowStockListData(BaseModel):
    products: List[LowStockProductOut]


class CategorySummaryOut(BaseModel):
    category: str
    product_count: int
    total_value: Decimal


class CategoryListData(BaseModel):
    categories: List[CategorySummaryOut]
