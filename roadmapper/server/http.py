"""
Transport-neutral request/response objects.

Handlers are written once against ApiRequest/ApiResponse and mounted
either as Flask views (long-running server) or behind a serverless
function entry point that takes an event dict.
"""

import json
from dataclasses import dataclass, field
from http.cookies import SimpleCookie
from logging import Logger, getLogger
from typing import Any, Callable, Dict, Optional

from flask import Response, request

from roadmapper.config import ServerConfig
from roadmapper.notion.client import NotionClient


def parse_cookies(header: Optional[str]) -> Dict[str, str]:
    if not header:
        return {}
    cookie = SimpleCookie()
    cookie.load(header)
    return {name: morsel.value for name, morsel in cookie.items()}


class ApiRequest:
    """Incoming request with lower-cased header names."""

    def __init__(
        self,
        method: str,
        path: str = "/",
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        query: Optional[Dict[str, str]] = None,
        cookies: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> None:
        self.method = method.upper()
        self.path = path
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.body = body
        self.query = query or {}
        self.cookies = cookies if cookies is not None else parse_cookies(self.headers.get("cookie"))
        self.params = params or {}

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


class ApiResponse:
    """
    Outgoing response built up by a handler.

    Usage:
        res.status(201).json({"id": "abc"})
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: Dict[str, str] = {}
        self.body: Any = None
        self.sent = False

    def status(self, code: int) -> "ApiResponse":
        self.status_code = code
        return self

    def set_header(self, name: str, value: str) -> "ApiResponse":
        self.headers[name] = value
        return self

    def json(self, data: Any) -> "ApiResponse":
        self.headers["Content-Type"] = "application/json"
        self.body = data
        self.sent = True
        return self


@dataclass
class HandlerContext:
    """What every handler gets besides the request and response."""

    config: ServerConfig
    notion_factory: Callable[[str], NotionClient] = NotionClient
    logger: Logger = field(default_factory=lambda: getLogger("roadmapper.server"))


Handler = Callable[[ApiRequest, ApiResponse, HandlerContext], None]


# =============================================================================
# Adapters
# =============================================================================

class FlaskAdapter:
    """Mounts handlers as Flask view functions."""

    def __init__(self, context: HandlerContext) -> None:
        self.context = context

    def view(self, handler: Handler) -> Callable[..., Response]:
        def flask_view(**params) -> Response:
            req = ApiRequest(
                method=request.method,
                path=request.path,
                headers=dict(request.headers),
                body=request.get_json(silent=True),
                query=request.args.to_dict(),
                cookies=request.cookies.to_dict(),
                params=params,
            )
            res = ApiResponse()
            handler(req, res, self.context)
            return self.to_flask(res)

        flask_view.__name__ = handler.__name__
        return flask_view

    @staticmethod
    def to_flask(res: ApiResponse) -> Response:
        body = json.dumps(res.body) if res.sent else ""
        return Response(body, status=res.status_code, headers=res.headers)


class ServerlessAdapter:
    """
    Runs a handler for a serverless-style event.

    The event carries ``httpMethod``, ``path``, ``headers``, ``body`` (a JSON
    string), ``queryStringParameters`` and ``pathParameters``. The result is
    ``{statusCode, headers, body}`` with a JSON string body.
    """

    def __init__(self, handler: Handler, context: HandlerContext) -> None:
        self.handler = handler
        self.context = context

    def __call__(self, event: Dict[str, Any]) -> Dict[str, Any]:
        raw_body = event.get("body")
        try:
            body = json.loads(raw_body) if raw_body else None
        except ValueError:
            body = None

        req = ApiRequest(
            method=event.get("httpMethod", "GET"),
            path=event.get("path", "/"),
            headers=event.get("headers") or {},
            body=body,
            query=event.get("queryStringParameters") or {},
            params=event.get("pathParameters") or {},
        )
        res = ApiResponse()
        self.handler(req, res, self.context)
        return {
            "statusCode": res.status_code,
            "headers": dict(res.headers),
            "body": json.dumps(res.body) if res.sent else "",
        }
