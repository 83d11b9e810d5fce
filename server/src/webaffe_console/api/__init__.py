"""FastAPI routes for WebAffe Console."""

from webaffe_console.api.admin import router as admin_router
from webaffe_console.api.auth import AdminSession, Approved, Session
from webaffe_console.api.routes import router

__all__ = ["AdminSession", "Approved", "Session", "admin_router", "router"]
