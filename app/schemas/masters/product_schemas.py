# app/schemas/masters/product_schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from datetime import datetime


def _blank_to_none(value):
    # blank barcode is stored as NULL
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ProductCreate(BaseModel):
    sku: str = Field(min_length=1, max_length=50)
    barcode: Optional[str] = Field(default=None, max_length=100)
    name: str = Field(min_length=2, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    brand: Optional[str] = Field(default=None, max_length=100)
    unit: str = Field(default="pcs", max_length=20)
    cost_price: Decimal = Field(ge=0)
    selling_price: Decimal = Field(ge=0)
    vat_rate: Decimal = Field(default=Decimal("16.00"), ge=0, le=100)
    is_vat_inclusive: bool = False
    quantity_in_stock: int = Field(default=0, ge=0)
    reorder_level: int = Field(default=0, ge=0)
    max_stock_level: int = Field(default=1000, ge=0)
    is_active: bool = True
    is_service: bool = False
    image_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("barcode", mode="before")
    @classmethod
    def normalize_barcode(cls, value):
        return _blank_to_none(value)


class ProductUpdate(BaseModel):
    """Partial update. Stock quantity is not here: it only moves through adjustments."""

    model_config = ConfigDict(extra="forbid")

    sku: Optional[str] = Field(default=None, min_length=1, max_length=50)
    barcode: Optional[str] = Field(default=None, max_length=100)
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    brand: Optional[str] = Field(default=None, max_length=100)
    unit: Optional[str] = Field(default=None, max_length=20)
    cost_price: Optional[Decimal] = Field(default=None, ge=0)
    selling_price: Optional[Decimal] = Field(default=None, ge=0)
    vat_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    is_vat_inclusive: Optional[bool] = None
    reorder_level: Optional[int] = Field(default=None, ge=0)
    max_stock_level: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    is_service: Optional[bool] = None
    image_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("barcode", mode="before")
    @classmethod
    def normalize_barcode(cls, value):
        return _blank_to_none(value)


class ProductOut(BaseModel):
    id: int
    sku: str
    barcode: Optional[str]
    name: str
    description: Optional[str]
    category: Optional[str]
    brand: Optional[str]
    unit: str
    cost_price: Decimal
    selling_price: Decimal
    vat_rate: Decimal
    is_vat_inclusive: bool
    quantity_in_stock: int
    reorder_level: int
    max_stock_level: int
    is_active: bool
    is_service: bool
    image_url: Optional[str]

    created_by: Optional[int]
    created_by_username: Optional[str] = None
    stock_status: Optional[str] = None

    created_at: datetime
    updated_at: Optional[datetime]


class ProductListFilters(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None
    low_stock: bool = False
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=500)


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ProductListData(BaseModel):
    products: List[ProductOut]
    pagination: PaginationOut


class ProductDeleteOut(BaseModel):
    id: int
    action: str
