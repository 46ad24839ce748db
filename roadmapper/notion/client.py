"""
Minimal Notion REST client.

Covers the handful of endpoints the server needs: database queries with
cursor pagination, page create/update/archive, database creation and the
token check via users/me.
"""

from typing import Any, Dict, List, Optional

import httpx

from roadmapper.constants import NOTION_API_URL, NOTION_TIMEOUT, NOTION_VERSION


class NotionAPIError(Exception):
    """
    Error answered by the Notion API, or a failed request to it.

    ``code`` is Notion's machine-readable error code (``unauthorized``,
    ``object_not_found``, ``validation_error``, ...) when the response
    carried one.
    """

    def __init__(self, status: int, code: Optional[str], message: str) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message


class NotionClient:
    """
    Synchronous client for the Notion API.

    Usage:
        with NotionClient(token) as notion:
            pages = notion.query_database(database_id)
    """

    def __init__(
        self,
        token: str,
        base_url: str = NOTION_API_URL,
        timeout: float = NOTION_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": NOTION_VERSION,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "NotionClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.RequestError as e:
            raise NotionAPIError(0, None, f"Request to Notion failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            raise NotionAPIError(
                response.status_code,
                data.get("code"),
                data.get("message") or response.reason_phrase,
            )
        return data

    # =========================================================================
    # Databases
    # =========================================================================

    def query_database(self, database_id: str) -> List[Dict[str, Any]]:
        """Return every page of a database, following ``next_cursor``."""
        results: List[Dict[str, Any]] = []
        body: Dict[str, Any] = {}
        while True:
            data = self._request("POST", f"/databases/{database_id}/query", json=body)
            results.extend(data.get("results", []))
            if not data.get("has_more") or not data.get("next_cursor"):
                return results
            body = {"start_cursor": data["next_cursor"]}

    def create_database(self, parent_page_id: str, title: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/databases", json={
            "parent": {"type": "page_id", "page_id": parent_page_id},
            "title": [{"type": "text", "text": {"content": title}}],
            "properties": properties,
        })

    # =========================================================================
    # Pages
    # =========================================================================

    def create_page(self, database_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/pages", json={
            "parent": {"database_id": database_id},
            "properties": properties,
        })

    def update_page(self, page_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/pages/{page_id}", json={"properties": properties})

    def archive_page(self, page_id: str) -> Dict[str, Any]:
        """Notion has no hard delete for pages; archiving hides them from queries."""
        return self._request("PATCH", f"/pages/{page_id}", json={"archived": True})

    # =========================================================================
    # Users
    # =========================================================================

    def users_me(self) -> Dict[str, Any]:
        """The bot user behind the token. Fails with 401 for a bad token."""
        return self._request("GET", "/users/me")
