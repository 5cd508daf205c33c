"""Configuration management for LazyTables.

Settings are expressed as YAML (or TOML) so users can adjust layout
proportions, notification timing and key bindings declaratively. The file is
validated with Pydantic models to guarantee type safety throughout the
codebase; every section has defaults so an absent file is a valid setup.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from lazytables.utils.errors import ConfigurationError
from lazytables.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".lazytables" / "config.yml"


class AppSettings(BaseModel):
    """Application-wide behaviour."""

    connections_path: Path = Field(default=Path.home() / ".lazytables" / "connections.json")
    query_history_limit: int = Field(default=100, ge=1)
    connection_timeout: float = Field(default=10, gt=0, description="Seconds allowed for listing databases")
    query_timeout: float = Field(default=30, gt=0, description="Seconds allowed for listing tables and queries")
    log_level: str = "info"


class UISettings(BaseModel):
    """Layout proportions and timing for the terminal UI."""

    left_sidebar_width: int = Field(default=20, ge=5, le=80, description="Percent of width")
    top_panel_height: int = Field(default=20, ge=5, le=95, description="Percent of main height")
    notification_duration: float = Field(default=3.0, gt=0, description="Seconds")
    cell_width: int = Field(default=15, ge=4, le=80)


class KeybindingSettings(BaseModel):
    """Global key bindings handled by the application shell."""

    quit: str = "ctrl+c"
    help: str = "?"
    next_panel: str = "tab"
    previous_panel: str = "shift+tab"
    focus_connections: str = "c"
    focus_databases: str = "d"
    focus_tables: str = "t"
    focus_query: str = "q"
    focus_output: str = "o"
    toggle_connections: str = "C"
    toggle_databases: str = "D"
    toggle_tables: str = "T"
    toggle_query: str = "Q"
    toggle_output: str = "O"

    @model_validator(mode="after")
    def validate_unique(self) -> "KeybindingSettings":
        seen: Dict[str, str] = {}
        for name, key in self.model_dump().items():
            if not key:
                raise ValueError(f"Key binding '{name}' must not be empty")
            if key in seen:
                raise ValueError(f"Key '{key}' bound to both '{seen[key]}' and '{name}'")
            seen[key] = name
        return self


class LazyTablesSettings(BaseModel):
    """Root configuration schema."""

    app: AppSettings = Field(default_factory=AppSettings)
    ui: UISettings = Field(default_factory=UISettings)
    keybindings: KeybindingSettings = Field(default_factory=KeybindingSettings)


class ConfigManager:
    """Load and cache the configuration file.

    The path comes from the explicit argument, then ``$LAZYTABLES_CONFIG``,
    then ``~/.lazytables/config.yml``. Only the implicit default may be
    missing; a path the user asked for has to exist.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        env_path = os.environ.get("LAZYTABLES_CONFIG")
        self.explicit = config_path is not None or bool(env_path)
        self.config_path = config_path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
        self._settings: Optional[LazyTablesSettings] = None
        self._lock = asyncio.Lock()

    async def load(self) -> LazyTablesSettings:
        """Load configuration from disk and validate it."""

        async with self._lock:
            logger.debug("loading configuration", extra={"path": str(self.config_path)})
            if not self.config_path.exists():
                if self.explicit:
                    raise ConfigurationError(f"Configuration file {self.config_path} does not exist")
                self._settings = LazyTablesSettings()
                return self._settings
            data = self._read_file(self.config_path)
            try:
                self._settings = LazyTablesSettings(**data)
            except ValidationError as exc:
                raise ConfigurationError(str(exc)) from exc
            return self._settings

    async def get_settings(self) -> LazyTablesSettings:
        """Return the last loaded settings, loading them if necessary."""

        if self._settings is None:
            return await self.load()
        return self._settings

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if path.suffix in {".yml", ".yaml"}:
            try:
                with path.open("r", encoding="utf-8") as handle:
                    payload = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
        elif path.suffix == ".toml":
            import tomllib

            try:
                with path.open("rb") as handle:
                    payload = tomllib.load(handle)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
        else:
            raise ConfigurationError(f"Unsupported configuration format: {path.suffix}")
        if not isinstance(payload, dict):
            raise ConfigurationError(f"Configuration root in {path} must be a mapping")
        return payload


__all__ = [
    "ConfigManager",
    "LazyTablesSettings",
    "AppSettings",
    "UISettings",
    "KeybindingSettings",
    "DEFAULT_CONFIG_PATH",
]
