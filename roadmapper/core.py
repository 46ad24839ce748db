"""
RoadmapCore - wiring for the Roadmapper CLI.

Builds the storage, config, backend and sync layer for one invocation and
runs async sync operations to completion.
"""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from roadmapper.constants import ConfigManager
from roadmapper.managers import (
    EventBus,
    HttpBackend,
    LocalBackend,
    RoadmapBackend,
    RoadmapStore,
    RoadmapSync,
    StorageManager,
    SyncWarningListener,
)
from roadmapper.models.roadmap import Roadmap, RoadmapSettings

T = TypeVar("T")


class RoadmapCore:
    """
    Core class orchestrating the managers for CLI commands.

    Orchestrates:
    - StorageManager: Persistence to the .roadmap/ folder, including the
      validated config.json that supplies failure policies and view months
    - ConfigManager: Layout metrics and gantt width from config.json
    - RoadmapBackend: Remote API when a URL is given, local storage otherwise
    - RoadmapSync: Optimistic mutations over a RoadmapStore
    - EventBus: Sync warnings echoed to stderr

    Usage:
        core = RoadmapCore(data_dir=Path(".roadmap"))
        goal = core.run(lambda sync: sync.add_goal("Grow", "More users"))
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        remote_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the core.

        Args:
            data_dir: Path to the .roadmap/ directory.
            remote_url: Roadmapper server URL. Local storage is used when None.
            api_key: Shared secret for the remote server.
            transport: httpx transport override for the remote backend (tests).
        """
        self.storage = StorageManager(data_dir)
        self.config = ConfigManager(data_dir=self.storage.data_dir)
        self.remote_url = remote_url
        self.api_key = api_key
        self.transport = transport

        self.event_bus = EventBus()
        self.event_bus.subscribe(SyncWarningListener())

    @property
    def is_remote(self) -> bool:
        return bool(self.remote_url)

    def _backend(self, defaults: RoadmapSettings) -> RoadmapBackend:
        if self.remote_url:
            return HttpBackend(self.remote_url, api_key=self.api_key, transport=self.transport)
        return LocalBackend(self.storage, default_settings=defaults)

    def run(self, operation: Callable[[RoadmapSync], Awaitable[T]]) -> T:
        """
        Load the roadmap, run one operation against it and close the backend.

        Args:
            operation: Async callable receiving the loaded RoadmapSync.

        Returns:
            Whatever the operation returned.
        """

        async def main() -> T:
            project = self.storage.load_config()
            defaults = RoadmapSettings(view_months=project.view_months)
            backend = self._backend(defaults)
            sync = RoadmapSync(
                RoadmapStore(Roadmap(settings=defaults)),
                backend,
                event_bus=self.event_bus,
                policies=project.failure_policies,
            )
            try:
                await sync.load()
                return await operation(sync)
            finally:
                await backend.aclose()

        return asyncio.run(main())

    def load(self) -> Roadmap:
        """Fetch the current roadmap from the backend."""

        async def current(sync: RoadmapSync) -> Roadmap:
            return sync.roadmap

        return self.run(current)
