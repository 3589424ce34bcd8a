"""
Record web service (FastAPI).
"""

from auxidien.web.app import create_app
from auxidien.web.models import APIResponse
from auxidien.web.routes import health_router, metrics_router, record_router

__all__ = ["APIResponse", "create_app", "health_router", "metrics_router", "record_router"]
