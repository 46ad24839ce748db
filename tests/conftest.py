"""
Test fixtures for the Roadmapper test suite.

Provides:
- Temporary directory management
- Mock data builders for goals, initiatives and deliverables
- A sample roadmap with overlapping and unscheduled deliverables
- An in-memory RoadmapBackend with switchable failures
- A fake Notion API served through httpx.MockTransport
"""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import httpx
import pytest

from roadmapper.config import ServerConfig
from roadmapper.exceptions import ApiError, NotFoundError
from roadmapper.managers.backend import EntityKind, RoadmapBackend
from roadmapper.models.base import Deliverable, Goal, Initiative, RoadmapModel
from roadmapper.models.roadmap import Roadmap
from roadmapper.notion.client import NotionClient


# =============================================================================
# Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    temp_path = Path(tempfile.mkdtemp(prefix="roadmap_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def data_dir(temp_dir: Path) -> Path:
    """Create a .roadmap/ directory inside the temp directory."""
    path = temp_dir / ".roadmap"
    path.mkdir(parents=True, exist_ok=True)
    return path


# =============================================================================
# Mock Data Builders
# =============================================================================


class MockDataBuilder:
    """Builder for creating mock roadmap entities in tests."""

    @staticmethod
    def create_goal(
        id: str = "goal-1",
        name: str = "Test Goal",
        desired_outcome: str = "Test outcome",
        description: Optional[str] = None,
        priority: int = 1,
        order: int = 0,
    ) -> Goal:
        """Create a mock Goal for testing."""
        return Goal(
            id=id,
            name=name,
            desired_outcome=desired_outcome,
            description=description,
            priority=priority,
            order=order,
        )

    @staticmethod
    def create_initiative(
        id: str = "init-1",
        goal_id: str = "goal-1",
        name: str = "Test Initiative",
        ideal_outcome: str = "Test ideal outcome",
        order: int = 0,
    ) -> Initiative:
        """Create a mock Initiative for testing."""
        return Initiative(
            id=id,
            goal_id=goal_id,
            name=name,
            ideal_outcome=ideal_outcome,
            order=order,
        )

    @staticmethod
    def create_deliverable(
        id: str = "deliv-1",
        initiative_id: str = "init-1",
        name: str = "Test Deliverable",
        status: str = "planned",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        description: Optional[str] = None,
        order: int = 0,
    ) -> Deliverable:
        """Create a mock Deliverable for testing.

        Dates are ISO strings; leave either one out for an unscheduled item.
        """
        return Deliverable(
            id=id,
            initiative_id=initiative_id,
            name=name,
            status=status,
            start_date=start_date,
            end_date=end_date,
            description=description,
            order=order,
        )


@pytest.fixture
def mock_data() -> MockDataBuilder:
    """Provide mock data builder for test item creation."""
    return MockDataBuilder()


# =============================================================================
# Roadmap Fixtures
# =============================================================================


@pytest.fixture
def sample_roadmap(mock_data: MockDataBuilder) -> Roadmap:
    """Create a sample roadmap for testing.

    Structure:
        [P1] Grow revenue (goal-1)
        ├── Self-serve checkout (init-1)
        │   ├── D1 2024-01-01 → 2024-01-31  shipped
        │   ├── D2 2024-01-15 → 2024-02-15  in-progress
        │   ├── D3 2024-02-01 → 2024-02-28  planned
        │   └── D4 (no dates)               planned
        └── Pricing page (init-2)
        [P2] Retain users (goal-2)
        └── Onboarding (init-3)
            └── D5 2024-03-01 → 2024-04-30  planned
        [P3] Hire (goal-3)
    """
    return Roadmap(
        title="Test Roadmap",
        goals=[
            mock_data.create_goal("goal-1", "Grow revenue", "Double ARR", "Top line", priority=1, order=0),
            mock_data.create_goal("goal-2", "Retain users", "Churn under 3%", priority=2, order=1),
            mock_data.create_goal("goal-3", "Hire", "Team of ten", priority=3, order=2),
        ],
        initiatives=[
            mock_data.create_initiative("init-1", "goal-1", "Self-serve checkout", "No sales call", 0),
            mock_data.create_initiative("init-2", "goal-1", "Pricing page", "Clear tiers", 1),
            mock_data.create_initiative("init-3", "goal-2", "Onboarding", "Activated in a day", 0),
        ],
        deliverables=[
            mock_data.create_deliverable("D1", "init-1", "D1", "shipped", "2024-01-01", "2024-01-31", order=0),
            mock_data.create_deliverable("D2", "init-1", "D2", "in-progress", "2024-01-15", "2024-02-15", order=1),
            mock_data.create_deliverable("D3", "init-1", "D3", "planned", "2024-02-01", "2024-02-28", order=2),
            mock_data.create_deliverable("D4", "init-1", "D4", "planned", order=3),
            mock_data.create_deliverable("D5", "init-3", "D5", "planned", "2024-03-01", "2024-04-30", order=0),
        ],
    )


@pytest.fixture
def empty_roadmap() -> Roadmap:
    """Create an empty roadmap with no entities."""
    return Roadmap()


# =============================================================================
# Backend Fixtures
# =============================================================================


class FakeBackend(RoadmapBackend):
    """
    In-memory RoadmapBackend.

    Add an operation name ("list", "create", "update", "delete") or an
    ``(operation, kind)`` pair to ``fail`` to make those calls raise ApiError.
    Every call is recorded in ``calls``.
    """

    def __init__(self, roadmap: Optional[Roadmap] = None) -> None:
        roadmap = roadmap or Roadmap()
        self.data: Dict[str, List[Any]] = {
            "goal": list(roadmap.goals),
            "initiative": list(roadmap.initiatives),
            "deliverable": list(roadmap.deliverables),
        }
        self.fail = set()
        self.calls: List[tuple] = []
        self._next_id = 0

    def _record(self, operation: str, kind: EntityKind, *args) -> None:
        self.calls.append((operation, kind.name, *args))
        if operation in self.fail or (operation, kind.name) in self.fail:
            raise ApiError(500, f"{operation} {kind.name} failed")

    def get(self, kind_name: str, entity_id: str) -> Optional[Any]:
        return next((e for e in self.data[kind_name] if e.id == entity_id), None)

    def ids(self, kind_name: str) -> List[str]:
        return [e.id for e in self.data[kind_name]]

    async def list(self, kind: EntityKind) -> List[Any]:
        self._record("list", kind)
        return list(self.data[kind.name])

    async def create(self, kind: EntityKind, payload: RoadmapModel) -> Any:
        self._record("create", kind)
        self._next_id += 1
        entity = kind.model.model_validate(
            {**payload.model_dump(), "id": f"server-{kind.name}-{self._next_id}"}
        )
        self.data[kind.name].append(entity)
        return entity

    async def update(self, kind: EntityKind, entity_id: str, payload: RoadmapModel) -> Dict[str, Any]:
        self._record("update", kind, entity_id)
        items = self.data[kind.name]
        for index, item in enumerate(items):
            if item.id == entity_id:
                items[index] = kind.model.model_validate(
                    {**item.model_dump(), **payload.model_dump(exclude_unset=True)}
                )
                return {"id": entity_id, **payload.to_json(exclude_unset=True)}
        raise NotFoundError(f"{kind.name} '{entity_id}' not found")

    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        self._record("delete", kind, entity_id)
        self.data[kind.name] = [e for e in self.data[kind.name] if e.id != entity_id]


@pytest.fixture
def fake_backend(sample_roadmap: Roadmap) -> FakeBackend:
    """Provide an in-memory backend seeded with the sample roadmap."""
    return FakeBackend(sample_roadmap)


# =============================================================================
# Fake Notion API
# =============================================================================


class FakeNotion:
    """
    Minimal stand-in for the Notion REST API.

    Serve it with ``transport`` and seed ``pages`` per database id. Every
    request is recorded as ``(method, path, json_body)`` in ``requests``.
    Set ``error`` to ``(status, code, message)`` to fail every call.
    """

    VALID_TOKEN = "secret_valid"

    def __init__(self) -> None:
        self.pages: Dict[str, List[Dict[str, Any]]] = {}
        self.requests: List[tuple] = []
        self.error: Optional[tuple] = None
        self._next_id = 0

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path.replace("/v1", "", 1)
        self.requests.append((request.method, path, body))

        if self.error:
            status, code, message = self.error
            return httpx.Response(status, json={"object": "error", "code": code, "message": message})

        if path == "/users/me":
            if request.headers["Authorization"] != f"Bearer {self.VALID_TOKEN}":
                return httpx.Response(401, json={"code": "unauthorized", "message": "API token is invalid."})
            return httpx.Response(200, json={"id": "bot-1", "name": "Roadmap Bot", "type": "bot"})

        if path.startswith("/databases/") and path.endswith("/query"):
            database_id = path.split("/")[2]
            return httpx.Response(200, json={
                "results": self.pages.get(database_id, []),
                "has_more": False,
                "next_cursor": None,
            })

        if path == "/databases" and request.method == "POST":
            return httpx.Response(200, json={"id": self._new_id("db")})

        if path == "/pages" and request.method == "POST":
            return httpx.Response(200, json={"id": self._new_id("page"), "properties": body["properties"]})

        if path.startswith("/pages/") and request.method == "PATCH":
            return httpx.Response(200, json={"id": path.split("/")[2]})

        return httpx.Response(404, json={"code": "object_not_found", "message": "Could not find object."})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def factory(self, token: str) -> NotionClient:
        """Drop-in for the NotionClient constructor used by the server."""
        return NotionClient(token, transport=self.transport)


def notion_page(page_id: str, **properties) -> Dict[str, Any]:
    """Build a Notion page object from property values."""
    return {"object": "page", "id": page_id, "properties": properties}


def title(text: str) -> Dict[str, Any]:
    return {"type": "title", "title": [{"plain_text": text}]}


def rich_text(text: str) -> Dict[str, Any]:
    return {"type": "rich_text", "rich_text": [{"plain_text": text}]}


@pytest.fixture
def fake_notion() -> FakeNotion:
    """Provide a fake Notion API."""
    return FakeNotion()


@pytest.fixture
def server_config() -> ServerConfig:
    """Fully configured server settings without auth."""
    return ServerConfig(
        notion_token=FakeNotion.VALID_TOKEN,
        goals_db_id="goals-db",
        initiatives_db_id="initiatives-db",
        deliverables_db_id="deliverables-db",
    )
