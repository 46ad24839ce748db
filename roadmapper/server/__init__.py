"""
HTTP API server proxying roadmap CRUD to a Notion workspace.
"""

from roadmapper.server.app import create_app, startup_banner
from roadmapper.server.http import ApiRequest, ApiResponse, FlaskAdapter, HandlerContext, ServerlessAdapter

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "FlaskAdapter",
    "HandlerContext",
    "ServerlessAdapter",
    "create_app",
    "startup_banner",
]
