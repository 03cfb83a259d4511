"""
Heatmap options persistence (platformdirs + JSON).

Persisted items (schema v1):
- options: HeatmapOptions dict representation (panel camelCase keys)

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Unknown keys in loaded JSON are ignored with warnings
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from heatgrid.heatmap.errors import ConfigError
from heatgrid.heatmap.options import HeatmapOptions
from heatgrid.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

DEFAULT_FILENAME = "heatmap_options.json"


@dataclass
class HeatmapOptionsConfigData:
    """JSON-serializable config payload."""

    schema_version: int = SCHEMA_VERSION
    options: Dict[str, Any] = field(default_factory=lambda: HeatmapOptions().to_dict())

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "options": self.options,
        }

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "HeatmapOptionsConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates a missing or malformed options dict
        """
        schema_version = int(d.get("schema_version", -1))

        options = d.get("options", {})
        if not isinstance(options, dict):
            logger.warning("options is not a dict, using defaults")
            options = HeatmapOptions().to_dict()

        known_keys = {"schema_version", "options"}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in heatmap options config, ignoring")

        return cls(schema_version=schema_version, options=options)


class HeatmapOptionsConfig:
    """Manager for loading/saving HeatmapOptionsConfigData to disk."""

    def __init__(self, *, path: Path, data: Optional[HeatmapOptionsConfigData] = None):
        self.path = path
        self.data = data if data is not None else HeatmapOptionsConfigData()

    @staticmethod
    def default_config_path(
        app_name: str = "heatgrid",
        filename: str = DEFAULT_FILENAME,
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/heatgrid/heatmap_options.json
        Linux:   ~/.config/heatgrid/heatmap_options.json
        Windows: %APPDATA%\\heatgrid\\heatmap_options.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = "heatgrid",
        filename: str = DEFAULT_FILENAME,
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "HeatmapOptionsConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version

        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = HeatmapOptionsConfigData(schema_version=schema_version)

        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug(f"Heatmap options file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except json.JSONDecodeError as e:
            logger.warning(f"Heatmap options file at {path} is not valid JSON: {e}, using defaults")
            return cls(path=path, data=default_data)
        except OSError as e:
            logger.warning(f"Error reading heatmap options from {path}: {e}, using defaults")
            return cls(path=path, data=default_data)

        if not isinstance(parsed, dict):
            logger.warning(f"Heatmap options file at {path} does not contain a dict, using defaults")
            return cls(path=path, data=default_data)

        try:
            loaded = HeatmapOptionsConfigData.from_json_dict(parsed)
        except (TypeError, ValueError) as e:
            logger.warning(f"Heatmap options file at {path} is malformed: {e}, using defaults")
            return cls(path=path, data=default_data)

        if loaded.schema_version != schema_version:
            if reset_on_version_mismatch:
                logger.warning(
                    f"Heatmap options schema version mismatch: loaded={loaded.schema_version}, "
                    f"expected={schema_version}, resetting to defaults"
                )
                return cls(path=path, data=default_data)
            loaded.schema_version = schema_version

        return cls(path=path, data=loaded)

    def save(self) -> None:
        """Write config to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            json_str = json.dumps(self.data.to_json_dict(), indent=2)
            self.path.write_text(json_str, encoding="utf-8")
            logger.info(f"Saved heatmap options to {self.path}")
        except Exception as e:
            logger.error(f"Error saving heatmap options to {self.path}: {e}")
            raise

    def get_options(self) -> HeatmapOptions:
        """Options from config; invalid stored options fall back to defaults."""
        try:
            return HeatmapOptions.from_dict(self.data.options)
        except ConfigError as e:
            logger.warning(f"Invalid heatmap options in {self.path}: {e}, using defaults")
            return HeatmapOptions()

    def set_options(self, options: HeatmapOptions) -> None:
        self.data.options = options.to_dict()
