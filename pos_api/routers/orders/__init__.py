"""
Order routers.
- /api/orders - Create, read and move orders through their lifecycle
"""

from .routes import router

__all__ = ["router"]
