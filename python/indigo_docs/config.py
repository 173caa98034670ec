"""
Application configuration.

Persists the connected HQ folder, the recently used folders, and the enabled
scope ids in a JSON file (default: ~/.indigo-docs/config.json).

Environment Variables:
- INDIGO_CONFIG: Path of the config file
- INDIGO_HQ: HQ folder to use regardless of the stored one
- INDIGO_DATA_DIR: Directory for config and logs (default: ~/.indigo-docs)
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from .workspace.scopes import default_enabled_scopes

logger = logging.getLogger("indigo_docs.config")

MAX_RECENT_FOLDERS = 3


def default_data_dir() -> Path:
    """Directory holding config and logs."""
    override = os.environ.get("INDIGO_DATA_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".indigo-docs"


def default_config_path() -> Path:
    override = os.environ.get("INDIGO_CONFIG")
    if override:
        return Path(override).expanduser()
    return default_data_dir() / "config.json"


@dataclass
class AppConfig:
    """Persisted application settings."""

    hq_folder_path: Optional[str] = None
    recent_folders: list[str] = field(default_factory=list)
    # None means "use the scopes enabled by default"
    enabled_scopes: Optional[list[str]] = None


class ConfigStore:
    """
    Loads and saves AppConfig as JSON.

    A missing file yields defaults. A corrupt file is logged and treated as
    missing, so a bad config never prevents startup.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_config_path()
        self.config = self.load()

    def load(self) -> AppConfig:
        """Read the config file (defaults if missing or unreadable)."""
        if not self.path.exists():
            return AppConfig()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read config {self.path}: {e}")
            return AppConfig()

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed config {self.path}")
            return AppConfig()

        recent = data.get("recent_folders") or []
        scopes = data.get("enabled_scopes")
        return AppConfig(
            hq_folder_path=data.get("hq_folder_path"),
            recent_folders=[str(p) for p in recent][:MAX_RECENT_FOLDERS],
            enabled_scopes=[str(s) for s in scopes] if isinstance(scopes, list) else None,
        )

    def save(self) -> None:
        """Write the current config to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(self.config), indent=2), encoding="utf-8")

    def connect_folder(self, folder: str) -> AppConfig:
        """
        Make folder the active HQ folder and remember it as most recent.

        Args:
            folder: HQ folder path

        Returns:
            Updated config (already saved)
        """
        recent = [folder] + [f for f in self.config.recent_folders if f != folder]
        self.config.hq_folder_path = folder
        self.config.recent_folders = recent[:MAX_RECENT_FOLDERS]
        self.save()
        logger.info(f"Connected HQ folder: {folder}")
        return self.config

    def disconnect(self) -> AppConfig:
        self.config.hq_folder_path = None
        self.save()
        return self.config

    def set_enabled_scopes(self, scope_ids: list[str]) -> AppConfig:
        self.config.enabled_scopes = list(scope_ids)
        self.save()
        return self.config

    def hq_folder(self) -> Optional[str]:
        """Active HQ folder, with INDIGO_HQ taking precedence."""
        return os.environ.get("INDIGO_HQ") or self.config.hq_folder_path

    def effective_scopes(self) -> list[str]:
        """Enabled scope ids, falling back to the default-enabled scopes."""
        if self.config.enabled_scopes is None:
            return default_enabled_scopes()
        return list(self.config.enabled_scopes)
