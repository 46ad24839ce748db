"""
Storage manager for Roadmapper.

Handles loading and saving of the roadmap blob and config file in the
.roadmap/ directory. This is the local fallback used when no remote
workspace database is configured.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from roadmapper.constants import DEFAULT_DATA_DIR, STORAGE_KEY
from roadmapper.exceptions import StorageError
from roadmapper.models.files import ConfigFile
from roadmapper.models.roadmap import Roadmap


class StorageManager:
    """
    Manages persistence of roadmap data to JSON files in the .roadmap/ directory.

    The whole roadmap lives in one blob named after a fixed storage key.
    Handles atomic writes to prevent data corruption.
    """

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        """
        Initialize the StorageManager with a .roadmap/ directory path.

        Args:
            data_dir: Path to the data directory. Defaults to .roadmap/ in current directory.
                It is created on the first write.
        """
        self.data_dir = data_dir if data_dir else Path(DEFAULT_DATA_DIR)

    @property
    def roadmap_path(self) -> Path:
        return self.data_dir / f"{STORAGE_KEY}.json"

    @property
    def config_path(self) -> Path:
        return self.data_dir / "config.json"

    def _ensure_data_dir(self) -> None:
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _atomic_write(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Write data to a JSON file atomically to prevent corruption.

        Args:
            file_path: Path to the file to write.
            data: Dictionary data to write as JSON.

        Raises:
            StorageError: If writing to file fails.
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=file_path.parent, prefix=".tmp_roadmap_", suffix=".json"
        )

        try:
            with os.fdopen(temp_fd, "w") as temp_file:
                json.dump(data, temp_file, indent=2)
            os.replace(temp_path, file_path)
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to write to {file_path}: {e}")

    def _read_roadmap(self, file_path: Path) -> Roadmap:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Roadmap.model_validate(data)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError, ValidationError) as e:
            raise StorageError(f"Failed to load {file_path.name}: {e}")

    # =========================================================================
    # Roadmap blob
    # =========================================================================

    def load_roadmap(self) -> Optional[Roadmap]:
        """Load the stored roadmap, or None when nothing has been saved yet."""
        if not self.roadmap_path.exists():
            return None
        return self._read_roadmap(self.roadmap_path)

    def save_roadmap(self, roadmap: Roadmap) -> None:
        """Save the roadmap blob."""
        self._ensure_data_dir()
        self._atomic_write(self.roadmap_path, roadmap.to_json())

    def clear_roadmap(self) -> None:
        """Remove the stored roadmap."""
        if self.roadmap_path.exists():
            self.roadmap_path.unlink()

    # =========================================================================
    # Import / Export
    # =========================================================================

    def export_roadmap(self, destination: Path, roadmap: Optional[Roadmap] = None) -> Path:
        """Write a roadmap to an arbitrary path in the blob format.

        Args:
            destination: File to write.
            roadmap: Roadmap to export. Defaults to the stored one.

        Raises:
            StorageError: If no roadmap was given and none has been saved.
        """
        if roadmap is None:
            roadmap = self.load_roadmap()
        if roadmap is None:
            raise StorageError("No roadmap data to export.")
        self._atomic_write(destination, roadmap.to_json())
        return destination

    def import_roadmap(self, source: Path) -> Roadmap:
        """Validate a roadmap file and make it the stored roadmap.

        Raises:
            StorageError: If the file is missing or not a valid roadmap.
        """
        if not source.exists():
            raise StorageError(f"Import file not found: {source}")
        roadmap = self._read_roadmap(source)
        self.save_roadmap(roadmap)
        return roadmap

    # =========================================================================
    # Config File
    # =========================================================================

    def load_config(self) -> ConfigFile:
        """Load config.json and return as ConfigFile model."""
        if not self.config_path.exists():
            return ConfigFile()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ConfigFile.model_validate(data)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError, ValidationError) as e:
            raise StorageError(f"Failed to load config.json: {e}")

    def save_config(self, data: ConfigFile) -> None:
        """Save ConfigFile model to config.json."""
        self._ensure_data_dir()
        self._atomic_write(self.config_path, data.model_dump(mode="json"))
