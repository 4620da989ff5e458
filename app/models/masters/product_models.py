from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, Boolean, Text, Index, CheckConstraint
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin


class Product(Base, TimestampMixin, AuditMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    sku = Column(String(50), nullable=False, unique=True, index=True)
    barcode = Column(String(100), nullable=True, unique=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    brand = Column(String(100), nullable=True)
    unit = Column(String(20), nullable=False, default="pcs")

    cost_price = Column(Numeric(12, 2), nullable=False)
    selling_price = Column(Numeric(12, 2), nullable=False)
    vat_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("16.00"))
    is_vat_inclusive = Column(Boolean, nullable=False, default=False)

    quantity_in_stock = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=0)
    max_stock_level = Column(Integer, nullable=False, default=1000)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_service = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity_in_stock >= 0", name="ck_product_quantity_non_negative"),
        Index("ix_product_stock_reorder", "quantity_in_stock", "reorder_level"),
    )

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku} name={self.name}>"
