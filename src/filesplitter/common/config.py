"""Configuration loader with multi-source support."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Generic, Optional, Type, TypeVar

import platformdirs
import toml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class ConfigLoader(Generic[T]):
    """Loads configuration from multiple sources with priority.

    Later sources win:
    1. defaults TOML (explicit path, ./config/defaults.toml)
    2. system config (/etc/<app>/config.toml or %PROGRAMDATA%)
    3. user config (platformdirs user config dir)
    4. environment variables (<APP>_<SECTION>_<KEY>)
    """

    def __init__(self, app_name: str = "filesplitter", config_class: Optional[Type[T]] = None) -> None:
        self.app_name = app_name
        self.config_class = config_class
        self._config: Optional[T] = None

    def load(self, defaults_path: Optional[Path] = None) -> T:
        """Load configuration from all sources.

        Args:
            defaults_path: Optional path to a defaults.toml file

        Returns:
            Validated configuration object (or a plain dict without config_class)

        Raises:
            pydantic.ValidationError: If the merged configuration is invalid
            toml.TomlDecodeError: If a config file is not valid TOML
        """
        config_dict = self._load_defaults(defaults_path)

        for source in (self._system_config_path(), self._user_config_path()):
            overrides = self._load_file(source)
            if overrides:
                config_dict = self._deep_merge(config_dict, overrides)

        config_dict = self._apply_env_overrides(config_dict)

        if self.config_class:
            self._config = self.config_class(**config_dict)
        else:
            self._config = config_dict

        return self._config

    def _load_defaults(self, defaults_path: Optional[Path] = None) -> Dict[str, Any]:
        """Load the defaults file, if any."""
        if defaults_path:
            defaults_path = Path(defaults_path)
            if defaults_path.exists():
                logger.debug(f"Loading defaults: {{'path': {str(defaults_path)!r}}}")
                return toml.load(defaults_path)
            logger.warning(f"Config file not found, using built-in defaults: {{'path': {str(defaults_path)!r}}}")
            return {}

        local_defaults = Path.cwd() / "config" / "defaults.toml"
        return self._load_file(local_defaults) or {}

    def _system_config_path(self) -> Path:
        if os.name == "nt":
            return (
                Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData"))
                / self.app_name
                / "config.toml"
            )
        return Path(f"/etc/{self.app_name}/config.toml")

    def _user_config_path(self) -> Path:
        user_config_dir = platformdirs.user_config_dir(appname=self.app_name, appauthor=False)
        return Path(user_config_dir) / "config.toml"

    def _load_file(self, path: Path) -> Optional[Dict[str, Any]]:
        if path.exists():
            logger.debug(f"Loading config: {{'path': {str(path)!r}}}")
            return toml.load(path)
        return None

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Override config with environment variables.

        FILESPLITTER_SPLITTER_BLOCK_SIZE=1048576 -> config["splitter"]["block_size"]
        The first segment after the prefix names the section; the rest is the key.
        Variables naming a section the config model does not declare are ignored.
        """
        prefix = f"{self.app_name.upper().replace('-', '_')}_"
        sections = set(self.config_class.model_fields) if self.config_class else None

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            section, _, key = env_key[len(prefix):].lower().partition("_")
            if not section or not key:
                continue
            if sections is not None and section not in sections:
                logger.debug(f"Ignoring environment variable for unknown section: {{'variable': {env_key!r}}}")
                continue

            current = config.setdefault(section, {})
            if not isinstance(current, dict):
                continue
            current[key] = self._convert_env_value(env_value)
            logger.debug(f"Config override from environment: {{'variable': {env_key!r}}}")

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Convert string environment variable to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    @property
    def config(self) -> T:
        """Get loaded configuration."""
        if self._config is None:
            self._config = self.load()
        return self._config
