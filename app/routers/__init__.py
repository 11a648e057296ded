# app/routers/__init__.py

from .discounts.discount_code_router import router as discount_code_router


__all__ = [
"discount_code_router",
]
