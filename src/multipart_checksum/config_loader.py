"""Configuration loader with multi-source support."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import platformdirs
import toml
from pydantic import ValidationError

from .config import MultipartChecksumConfig
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

APP_NAME = "multipart-checksum"


class ConfigLoader:
    """Loads configuration from multiple sources with priority.

    Later sources override earlier ones:
        1. defaults file (explicit path, or ./config/defaults.toml)
        2. system config (/etc/<app>/config.toml, %PROGRAMDATA% on Windows)
        3. user config (platformdirs user config dir)
        4. environment variables, e.g. MULTIPART_CHECKSUM_CHECKSUM__ALGORITHM=crc32c
    """

    def __init__(
        self,
        app_name: str = APP_NAME,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.app_name = app_name
        self.environ = os.environ if environ is None else environ
        self.env_prefix = f"{app_name.upper().replace('-', '_')}_"

    def load(self, defaults_path: Optional[Path] = None) -> MultipartChecksumConfig:
        """Load and validate configuration from all sources.

        Raises:
            ConfigurationError: If a file cannot be parsed or values are invalid
        """
        config_dict: Dict[str, Any] = {}
        for source in (
            self._load_defaults(defaults_path),
            self._load_file(self.system_config_path()),
            self._load_file(self.user_config_path()),
        ):
            if source:
                config_dict = self._deep_merge(config_dict, source)

        config_dict = self._apply_env_overrides(config_dict)

        try:
            return MultipartChecksumConfig(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", errors=e.errors()) from e

    def system_config_path(self) -> Path:
        if os.name == "nt":
            return Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData")) / self.app_name / "config.toml"
        return Path(f"/etc/{self.app_name}/config.toml")

    def user_config_path(self) -> Path:
        return Path(platformdirs.user_config_dir(appname=self.app_name, appauthor=False)) / "config.toml"

    def _load_defaults(self, defaults_path: Optional[Path]) -> Optional[Dict[str, Any]]:
        if defaults_path is not None:
            if not defaults_path.exists():
                raise ConfigurationError(
                    f"Config file does not exist: {defaults_path}", path=str(defaults_path)
                )
            return self._load_file(defaults_path)
        return self._load_file(Path.cwd() / "config" / "defaults.toml")

    def _load_file(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            logger.debug(f"Config file not found: {path}")
            return None
        logger.debug(f"Loading config from {path}")
        try:
            return toml.load(path)
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigurationError(f"Failed to load config {path}: {e}", path=str(path)) from e

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Override config with environment variables.

        Nesting is separated by a double underscore so keys may contain
        single underscores: MULTIPART_CHECKSUM_CHECKSUM__MULTIPART_THRESHOLD
        -> checksum.multipart_threshold.
        """
        for env_key, env_value in self.environ.items():
            if not env_key.startswith(self.env_prefix):
                continue

            key_path = env_key[len(self.env_prefix):].lower().split("__")
            current = config
            for part in key_path[:-1]:
                current = current.setdefault(part, {})
            current[key_path[-1]] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False
        try:
            return int(value)
        except ValueError:
            return value
