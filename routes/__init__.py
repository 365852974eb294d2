"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.marketing import router as marketing_router
from routes.wizard import router as wizard_router

__all__ = [
    "products_router",
    "marketing_router",
    "wizard_router",
]
