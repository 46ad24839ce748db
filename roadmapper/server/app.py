"""
Flask application factory for the Roadmapper API server.
"""

import time
from typing import Callable, List, Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from roadmapper.config import ServerConfig
from roadmapper.notion.client import NotionClient
from roadmapper.server.handlers import NOTION_TOKEN_HEADER, ROUTES
from roadmapper.server.http import FlaskAdapter, HandlerContext

# Handlers answer 405 themselves, so every route accepts every method
ROUTE_METHODS = ["GET", "POST", "PATCH", "PUT", "DELETE"]

CORS_HEADERS = [
    "Content-Type",
    "x-api-key",
    NOTION_TOKEN_HEADER,
    "x-goals-db-id",
    "x-initiatives-db-id",
    "x-deliverables-db-id",
]


def create_app(
    config: Optional[ServerConfig] = None,
    notion_factory: Optional[Callable[[str], NotionClient]] = None,
) -> Flask:
    """
    Build the Flask app with every API route registered.

    Args:
        config: Server configuration. Read from the environment when omitted.
        notion_factory: Builds a NotionClient from a token (tests inject a
            client with a mock transport).

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    config = config or ServerConfig.from_env()
    app.config["ROADMAP_CONFIG"] = config

    CORS(
        app,
        resources={r"/api/*": {"origins": "*"}},
        methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=CORS_HEADERS,
    )

    context = HandlerContext(
        config=config,
        notion_factory=notion_factory or NotionClient,
        logger=app.logger,
    )
    adapter = FlaskAdapter(context)
    for rule, handler in ROUTES:
        app.add_url_rule(rule, handler.__name__, adapter.view(handler), methods=ROUTE_METHODS)

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        if started is not None:
            elapsed = (time.perf_counter() - started) * 1000
            app.logger.info("%s %s -> %s (%dms)", request.method, request.path, response.status_code, elapsed)
        return response

    @app.errorhandler(404)
    def not_found(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Not found"}), 404
        return error

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return error
        app.logger.exception("Server error in %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    return app


def startup_banner(config: ServerConfig, host: str, port: int) -> List[str]:
    """Lines printed when the server starts."""
    lines = [
        "Roadmapper API server",
        f"Server running on http://{host}:{port}",
        "",
        "Environment:",
    ]
    for name, present in config.status().items():
        lines.append(f"  {name}: {'✓ configured' if present else '✗ missing'}")
    lines.append(f"  API_KEY: {'✓ configured' if config.api_key else '✗ disabled (no auth)'}")
    return lines
