"""
Environment configuration for the Roadmapper server and CLI.

Values come from the process environment, optionally seeded from a .env
file in the working directory.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv

from roadmapper.constants import DEFAULT_PORT
from roadmapper.exceptions import ConfigurationError


@dataclass(frozen=True)
class ServerConfig:
    """Settings read from the environment."""

    notion_token: Optional[str] = None
    goals_db_id: Optional[str] = None
    initiatives_db_id: Optional[str] = None
    deliverables_db_id: Optional[str] = None
    api_key: Optional[str] = None
    port: int = DEFAULT_PORT
    api_url: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> "ServerConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (used by tests).
            dotenv: Load a .env file into os.environ first.

        Raises:
            ConfigurationError: If PORT is not an integer.
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        port = environ.get("PORT") or DEFAULT_PORT
        try:
            port = int(port)
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got '{port}'")

        return cls(
            notion_token=environ.get("NOTION_TOKEN") or None,
            goals_db_id=environ.get("GOALS_DB_ID") or None,
            initiatives_db_id=environ.get("INITIATIVES_DB_ID") or None,
            deliverables_db_id=environ.get("DELIVERABLES_DB_ID") or None,
            api_key=environ.get("API_KEY") or None,
            port=port,
            api_url=environ.get("ROADMAP_API_URL") or None,
        )

    @property
    def is_configured(self) -> bool:
        """True when the workspace token and all three database ids are set."""
        return all(self.status().values())

    def status(self) -> Dict[str, bool]:
        """Which of the workspace identifiers are present."""
        return {
            "NOTION_TOKEN": bool(self.notion_token),
            "GOALS_DB_ID": bool(self.goals_db_id),
            "INITIATIVES_DB_ID": bool(self.initiatives_db_id),
            "DELIVERABLES_DB_ID": bool(self.deliverables_db_id),
        }

    def missing(self) -> List[str]:
        return [name for name, present in self.status().items() if not present]

    @property
    def database_ids(self) -> Dict[str, Optional[str]]:
        return {
            "goal": self.goals_db_id,
            "initiative": self.initiatives_db_id,
            "deliverable": self.deliverables_db_id,
        }
