"""
Constants for the Roadmapper application.

Note: These constants serve as default fallback values.
Actual values are loaded from .roadmap/config.json at runtime via ConfigManager.
"""
from pathlib import Path
from typing import Any, Optional
import json

# =============================================================================
# Default Fallback Values
# These are used if config.json doesn't exist or doesn't specify a value.
# =============================================================================

# Gantt layout defaults (pixels)
DEFAULT_BAR_HEIGHT = 24
DEFAULT_BAR_GAP = 4
DEFAULT_ROW_PADDING = 8
DEFAULT_MIN_ROW_HEIGHT = 40
DEFAULT_UNSCHEDULED_ROW_HEIGHT = 32

# Timeline window defaults
DEFAULT_VIEW_MONTHS = 12

# Text gantt width (characters of timeline)
DEFAULT_GANTT_WIDTH = 72

# Failure policy per entity kind for the sync layer
DEFAULT_FAILURE_POLICIES = {
    "goal": "refetch",
    "initiative": "rollback",
    "deliverable": "rollback",
}

# Local storage
STORAGE_KEY = "product-toolkit-data"
DEFAULT_DATA_DIR = ".roadmap"

# Roadmap defaults
DEFAULT_ROADMAP_ID = "notion-roadmap"
DEFAULT_ROADMAP_TITLE = "Product Roadmap"
DEFAULT_COLOR_THEME = "blue"
DEFAULT_FONT_FAMILY = "system-ui"

# Placeholder rows for goals with no initiatives
EMPTY_INITIATIVE_PREFIX = "empty-"
EMPTY_INITIATIVE_NAME = "No initiatives"

# Temporary ids for optimistic creates
TEMP_ID_PREFIX = "temp-"

# Status constants (not configurable)
DEFAULT_STATUS = "planned"
VALID_STATUSES = ["planned", "in-progress", "shipped"]

# Server defaults
DEFAULT_PORT = 3000
NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
NOTION_TIMEOUT = 30.0
AUTH_COOKIE_NAME = "api_key"
AUTH_HEADER_NAME = "x-api-key"
AUTH_COOKIE_MAX_AGE = 86400

# Validation error messages (not configurable)
VALIDATION_END_BEFORE_START = "End date must not be before start date"
VALIDATION_FAILED = "Validation failed"

# Date format defaults
DATE_FORMATS = [
    "%Y-%m-%d",      # YYYY-MM-DD (ISO 8601)
    "%Y/%m/%d",      # YYYY/MM/DD
    "%d-%m-%Y",      # DD-MM-YYYY
    "%d/%m/%Y",      # DD/MM/YYYY
    "%Y%m%d",        # YYYYMMDD
    "%d %B %Y",      # DD Month YYYY (e.g., 31 December 2024)
    "%d %b %Y",      # DD Mon YYYY (e.g., 31 Dec 2024)
    "%B %d, %Y",     # Month DD, YYYY (e.g., December 31, 2024)
    "%b %d, %Y",     # Mon DD, YYYY (e.g., Dec 31, 2024)
]

DATE_FORMAT_ERROR = (
    "Invalid date format. Supported formats: YYYY-MM-DD, YYYY/MM/DD, DD-MM-YYYY, DD/MM/YYYY, "
    "YYYYMMDD, 'DD Month YYYY', 'Month DD, YYYY'. "
    "Examples: 2024-12-31, 31/12/2024, '31 December 2024', 'December 31, 2024'."
)


# =============================================================================
# Config Loader
# Load values from .roadmap/config.json at runtime.
# =============================================================================

_config_manager_instance: Optional['ConfigManager'] = None


class ConfigManager:
    """
    Manages loading configuration from a config.json file with fallback to defaults.

    This class is independent of StorageManager to avoid cyclic dependencies.
    StorageManager handles persistence; ConfigManager handles runtime access.

    Usage:
        # With default path (.roadmap/config.json)
        config = ConfigManager()
        bar_height = config.get_int('bar_height', DEFAULT_BAR_HEIGHT)

        # With custom path
        config = ConfigManager(config_path=Path("/custom/path/config.json"))
    """

    def __init__(self, config_path: Optional[Path] = None, data_dir: Optional[Path] = None) -> None:
        """
        Initialize ConfigManager.

        Args:
            config_path: Direct path to config.json file. Takes precedence over data_dir.
            data_dir: Path to .roadmap/ directory. Config path will be data_dir/config.json.
        """
        self._config: Optional[dict] = None

        if config_path is not None:
            self._config_path = config_path
        elif data_dir is not None:
            self._config_path = data_dir / "config.json"
        else:
            self._config_path = Path(DEFAULT_DATA_DIR) / "config.json"

    def _load_config(self) -> dict:
        """Load config from config.json file."""
        if self._config is not None:
            return self._config

        if self._config_path.exists():
            try:
                with open(self._config_path, "r") as f:
                    self._config = json.load(f)
            except (json.JSONDecodeError, IOError):
                self._config = {}
        else:
            self._config = {}

        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value with fallback to default.

        Args:
            key: Configuration key name.
            default: Default value if key not found.

        Returns:
            Config value or default.
        """
        config = self._load_config()
        return config.get(key, default)

    def get_int(self, key: str, default: int) -> int:
        """Get an integer config value with fallback."""
        value = self.get(key, default)
        return int(value) if value is not None else default

    def get_dict(self, key: str, default: dict) -> dict:
        """Get a dict config value with fallback."""
        value = self.get(key, default)
        return dict(value) if isinstance(value, dict) else dict(default)

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        return self._config_path


def get_config_manager(reset: bool = False) -> ConfigManager:
    """
    Get the singleton ConfigManager instance with default path.

    Args:
        reset: If True, reset the singleton and create a new instance.

    Returns:
        ConfigManager singleton instance.
    """
    global _config_manager_instance
    if _config_manager_instance is None or reset:
        _config_manager_instance = ConfigManager()
    return _config_manager_instance


# Convenience functions for common config access
def get_gantt_width(config: Optional[ConfigManager] = None) -> int:
    """Get text gantt width from config or default."""
    return (config or get_config_manager()).get_int('gantt_width', DEFAULT_GANTT_WIDTH)
