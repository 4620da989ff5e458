# app/routers/__init__.py

from .masters.product_router import router as product_router

from .inventory.stock_router import router as stock_router


__all__ = [
"product_router",

"stock_router",
]
