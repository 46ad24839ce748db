"""
HTTP backend for the sync layer.

Talks to the Roadmapper server's ``/api/notion/...`` endpoints with an
httpx AsyncClient.
"""

from typing import Any, Dict, List, Optional

import httpx

from roadmapper.constants import AUTH_HEADER_NAME
from roadmapper.exceptions import ApiError
from roadmapper.managers.backend import EntityKind, RoadmapBackend
from roadmapper.models.base import RoadmapModel


class HttpBackend(RoadmapBackend):
    """
    RoadmapBackend over the REST API.

    Usage:
        backend = HttpBackend("http://localhost:3000", api_key="secret")
        goals = await backend.list(GOAL)
        await backend.aclose()
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the backend.

        Args:
            base_url: Server root, e.g. http://localhost:3000.
            api_key: Shared secret sent as the x-api-key header.
            timeout: Request timeout in seconds.
            transport: Optional transport override (used by tests).
        """
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers[AUTH_HEADER_NAME] = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _path(kind: EntityKind, entity_id: Optional[str] = None) -> str:
        path = f"/api/notion/{kind.collection}"
        return f"{path}/{entity_id}" if entity_id else path

    @staticmethod
    def _check(response: httpx.Response) -> Any:
        """Return the JSON body or raise ApiError for error statuses."""
        if response.is_success:
            return response.json()
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise ApiError(
            response.status_code,
            body.get("error") or "Request failed",
            body.get("details"),
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise ApiError(0, f"Network error: {e}") from e
        return self._check(response)

    async def list(self, kind: EntityKind) -> List[Any]:
        data = await self._request("GET", self._path(kind))
        return [kind.model.model_validate(item) for item in data]

    async def create(self, kind: EntityKind, payload: RoadmapModel) -> Any:
        data = await self._request("POST", self._path(kind), json=payload.to_json())
        return kind.model.model_validate(data)

    async def update(self, kind: EntityKind, entity_id: str, payload: RoadmapModel) -> Dict[str, Any]:
        return await self._request(
            "PATCH",
            self._path(kind, entity_id),
            json=payload.to_json(exclude_unset=True),
        )

    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        await self._request("DELETE", self._path(kind, entity_id))

    async def aclose(self) -> None:
        await self._client.aclose()
