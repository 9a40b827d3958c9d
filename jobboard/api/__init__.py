"""
API module - FastAPI routers and endpoint definitions.

Usage:
    from jobboard.api import api_router
    app.include_router(api_router)
"""

from jobboard.api.routes import api_router

__all__ = ["api_router"]
