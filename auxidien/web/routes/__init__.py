"""
Web API routers.
"""

from auxidien.web.metrics import router as metrics_router
from auxidien.web.routes.health_routes import router as health_router
from auxidien.web.routes.record_routes import router as record_router

__all__ = ["health_router", "metrics_router", "record_router"]
