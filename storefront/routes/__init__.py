# API Routes

from .shipping import router as shipping_router

__all__ = ["shipping_router"]
