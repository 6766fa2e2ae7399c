from .routes import admin_router, router

__all__ = ["admin_router", "router"]
