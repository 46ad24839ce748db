"""
Local backend for the sync layer.

Stores the roadmap blob on disk through StorageManager. Used when no
remote server is configured.
"""

from typing import Any, Dict, List, Optional, Tuple

from roadmapper.exceptions import NotFoundError
from roadmapper.managers.backend import EntityKind, RoadmapBackend
from roadmapper.managers.storage_manager import StorageManager
from roadmapper.models.base import RoadmapModel
from roadmapper.models.roadmap import Roadmap, RoadmapSettings
from roadmapper.utils import generate_id, now_iso


class LocalBackend(RoadmapBackend):
    """
    RoadmapBackend persisted to a single JSON blob.

    Mirrors the remote API: deletes remove only the named entity and
    updates echo the applied patch.
    """

    def __init__(self, storage: StorageManager, default_settings: Optional[RoadmapSettings] = None) -> None:
        self.storage = storage
        self.default_settings = default_settings or RoadmapSettings()

    def _load(self) -> Roadmap:
        return self.storage.load_roadmap() or Roadmap(settings=self.default_settings.model_copy())

    def _save(self, roadmap: Roadmap) -> None:
        roadmap.updated_at = now_iso()
        self.storage.save_roadmap(roadmap)

    @staticmethod
    def _items(roadmap: Roadmap, kind: EntityKind) -> List[Any]:
        return getattr(roadmap, kind.collection)

    async def list(self, kind: EntityKind) -> List[Any]:
        return list(self._items(self._load(), kind))

    async def create(self, kind: EntityKind, payload: RoadmapModel) -> Any:
        roadmap = self._load()
        entity = kind.model.model_validate({**payload.model_dump(), "id": generate_id()})
        self._items(roadmap, kind).append(entity)
        self._save(roadmap)
        return entity

    async def update(self, kind: EntityKind, entity_id: str, payload: RoadmapModel) -> Dict[str, Any]:
        roadmap = self._load()
        items = self._items(roadmap, kind)
        changes = payload.model_dump(exclude_unset=True)
        for index, item in enumerate(items):
            if item.id == entity_id:
                items[index] = kind.model.model_validate({**item.model_dump(), **changes})
                self._save(roadmap)
                return {"id": entity_id, **payload.to_json(exclude_unset=True)}
        raise NotFoundError(f"{kind.name.capitalize()} '{entity_id}' not found.")

    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        roadmap = self._load()
        items = self._items(roadmap, kind)
        remaining = [item for item in items if item.id != entity_id]
        if len(remaining) == len(items):
            raise NotFoundError(f"{kind.name.capitalize()} '{entity_id}' not found.")
        setattr(roadmap, kind.collection, remaining)
        self._save(roadmap)

    async def load_meta(self) -> Optional[Tuple[str, RoadmapSettings]]:
        roadmap = self.storage.load_roadmap()
        if roadmap is None:
            return None
        return roadmap.title, roadmap.settings

    async def save_meta(self, title: str, settings: RoadmapSettings) -> None:
        roadmap = self._load()
        roadmap.title = title
        roadmap.settings = settings
        self._save(roadmap)
