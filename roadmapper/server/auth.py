"""
Optional shared-secret auth.

When API_KEY is unset every request is allowed. Otherwise the key must
arrive in the x-api-key header or the api_key cookie set by login.
"""

import hmac
from typing import Optional

from roadmapper.config import ServerConfig
from roadmapper.constants import AUTH_COOKIE_MAX_AGE, AUTH_COOKIE_NAME, AUTH_HEADER_NAME
from roadmapper.server.http import ApiRequest, ApiResponse


def provided_key(req: ApiRequest) -> Optional[str]:
    return req.header(AUTH_HEADER_NAME) or req.cookies.get(AUTH_COOKIE_NAME)


def key_matches(candidate: Optional[str], expected: str) -> bool:
    if not candidate:
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())


def is_authorized(req: ApiRequest, config: ServerConfig) -> bool:
    if not config.api_key:
        return True
    return key_matches(provided_key(req), config.api_key)


def require_auth(req: ApiRequest, res: ApiResponse, config: ServerConfig) -> bool:
    """Answer 401 and return False unless the request is authorized."""
    if is_authorized(req, config):
        return True
    res.status(401).json({"error": "Unauthorized"})
    return False


def session_cookie(key: str, max_age: int = AUTH_COOKIE_MAX_AGE) -> str:
    return f"{AUTH_COOKIE_NAME}={key}; HttpOnly; Path=/; SameSite=Strict; Max-Age={max_age}"


def cleared_cookie() -> str:
    return session_cookie("", max_age=0)
