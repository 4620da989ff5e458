from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class PurchaseItem(Base, TimestampMixin):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True)
    purchase_id = Column(Integer, nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_cost = Column(Numeric(12, 2), nullable=False)
    total_cost = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_purchase_item_quantity_positive"),)

    def __repr__(self):
        return f"<PurchaseItem id={self.id} purchase_id={self.purchase_id} product_id={self.product_id} qty={self.quantity}>"
