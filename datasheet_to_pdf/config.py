"""Configuration for datasheet rendering.

Values are looked up in this order: command line overrides, environment
variables, the config file and finally built-in defaults.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = "config.json"
ENV_PREFIX = "DATASHEET_"

DEFAULTS: Dict[str, Any] = {
    "defaultSourcePath": ".",
    "relativeBuildPath": "build",
    "stylesheetsPath": "styles",
    "assetsPath": None,
    "datasheetFile": "*.md",
    "excludePatterns": ["node_modules", "README.md"],
    "subtitle": "",
    "identifierPrefix": "SKU",
    "datasheetSuffix": "-datasheet.pdf",
    "datasheetsFolder": "datasheets",
    "previousDocumentationFolder": None,
    "serverPort": 8123,
    "useWebFonts": False,
}

# CLI overrides use snake_case names
CLI_KEYS = {
    "source_dir": "defaultSourcePath",
    "build_path": "relativeBuildPath",
    "stylesheets_path": "stylesheetsPath",
    "assets_path": "assetsPath",
    "server_port": "serverPort",
}


def _env_name(key: str) -> str:
    """Turn a camelCase config key into its environment variable name."""
    snake = "".join(f"_{c}" if c.isupper() else c for c in key).upper()
    return ENV_PREFIX + snake


class Config:
    """Layered configuration (CLI > environment > config file > defaults)."""

    def __init__(self, cli_config: Optional[Dict[str, Any]] = None, config_file: Optional[str] = None):
        self.cli_config = {}
        for name, value in (cli_config or {}).items():
            if value is not None:
                self.cli_config[CLI_KEYS.get(name, name)] = value

        self.config_file = Path(config_file or os.environ.get(f"{ENV_PREFIX}CONFIG", DEFAULT_CONFIG_FILE))
        self.file_config = self._load_file(self.config_file, required=config_file is not None)

    @staticmethod
    def _load_file(path: Path, required: bool) -> Dict[str, Any]:
        """Load the YAML/JSON config file. A missing default file is not an error."""
        if not path.exists():
            if required:
                raise ConfigurationError(f"Config file not found: {path}")
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid config file {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        if key in self.cli_config:
            return self.cli_config[key]
        env_value = os.environ.get(_env_name(key))
        if env_value is not None:
            return env_value
        if key in self.file_config:
            return self.file_config[key]
        return DEFAULTS.get(key, default)

    def get_source_dir(self) -> str:
        return str(self.get("defaultSourcePath"))

    def get_build_path(self) -> str:
        return str(self.get("relativeBuildPath"))

    def get_stylesheets_path(self) -> str:
        return str(self.get("stylesheetsPath"))

    def get_assets_path(self) -> str:
        """Directory holding the <type>-logo.svg files; defaults to the stylesheets directory."""
        assets = self.get("assetsPath")
        return str(assets) if assets else self.get_stylesheets_path()

    def get_datasheet_file_pattern(self) -> str:
        return str(self.get("datasheetFile"))

    def get_exclude_patterns(self) -> List[str]:
        patterns = self.get("excludePatterns") or []
        if isinstance(patterns, str):
            patterns = [p.strip() for p in patterns.split(",") if p.strip()]
        return list(patterns)

    def get_subtitle(self) -> str:
        return str(self.get("subtitle") or "")

    def get_identifier_prefix(self) -> str:
        return str(self.get("identifierPrefix") or "")

    def get_datasheet_suffix(self) -> str:
        return str(self.get("datasheetSuffix") or "")

    def get_datasheets_folder(self) -> str:
        return str(self.get("datasheetsFolder"))

    def get_previous_documentation_folder(self) -> Optional[str]:
        folder = self.get("previousDocumentationFolder")
        return str(folder) if folder else None

    def get_server_port(self) -> int:
        try:
            return int(self.get("serverPort"))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid server port: {self.get('serverPort')!r}") from e

    def use_web_fonts(self) -> bool:
        value = self.get("useWebFonts")
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
