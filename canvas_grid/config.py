"""Configuration for canvas-grid.

Two layers:
- ``build_grid_config`` merges partial grid parameters onto the documented
  ``GridConfig`` defaults and validates them at construction.
- ``GridSettings`` holds tool-level settings (state directory, monitor
  cache TTL, default grid) loaded from ``~/.config/canvas-grid/config.json``
  and ``CANVAS_GRID_*`` environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .models.grid import GridConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "canvas-grid" / "config.json"
DEFAULT_STATE_DIR = Path.home() / ".local" / "share" / "canvas-grid"

GRID_CONFIG_FIELDS = frozenset(GridConfig.model_fields)


def build_grid_config(overrides: Optional[Mapping[str, Any]] = None, **fields: Any) -> GridConfig:
    """Merge caller-supplied fields onto the GridConfig defaults.

    Defaults: rows=3, columns=3, monitor_index=0, cell_gap_horizontal=4,
    cell_gap_vertical=4, margin_top/bottom/left/right=0. Keyword fields win
    over ``overrides``; fields set to None keep their default.

    Raises:
        ValueError: Unknown field name
        pydantic.ValidationError: Field value out of range
    """
    merged: Dict[str, Any] = {}
    for source in (overrides or {}, fields):
        for key, value in source.items():
            if key not in GRID_CONFIG_FIELDS:
                valid = ", ".join(sorted(GRID_CONFIG_FIELDS))
                raise ValueError(f"Unknown grid config field '{key}': must be one of {valid}")
            if value is not None:
                merged[key] = value

    return GridConfig(**merged)


class GridSettings(BaseModel):
    """Tool-level settings."""

    state_dir: Path = Field(default=DEFAULT_STATE_DIR, description="Directory for stored grid states")
    monitor_cache_ttl_seconds: float = Field(default=5.0, ge=0.0, description="Monitor info cache TTL")
    grid: Dict[str, int] = Field(default_factory=dict, description="Default GridConfig overrides")

    @field_validator("state_dir")
    @classmethod
    def expand_state_dir(cls, v: Path) -> Path:
        return Path(v).expanduser()

    @field_validator("grid")
    @classmethod
    def validate_grid_overrides(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Reject overrides that would not build a valid GridConfig."""
        build_grid_config(v)
        return v

    def grid_config(self, **overrides: Any) -> GridConfig:
        """Default grid config with per-call overrides applied."""
        return build_grid_config(self.grid, **overrides)


_ENV_GRID_FIELDS = {
    "CANVAS_GRID_ROWS": ("rows",),
    "CANVAS_GRID_COLUMNS": ("columns",),
    "CANVAS_GRID_MONITOR": ("monitor_index",),
    "CANVAS_GRID_GAP": ("cell_gap_horizontal", "cell_gap_vertical"),
}


def load_settings(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GridSettings:
    """Load settings from the JSON config file, then environment overrides.

    Args:
        path: Config file (default: ~/.config/canvas-grid/config.json)
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated GridSettings

    Raises:
        ValueError: Config file is not valid JSON or has invalid values
    """
    path = path or DEFAULT_CONFIG_PATH
    environ = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
        logger.debug(f"Loaded settings from {path}")
    else:
        logger.debug(f"No config file at {path}, using defaults")

    grid = dict(data.get("grid", {}))
    for env_name, field_names in _ENV_GRID_FIELDS.items():
        raw = environ.get(env_name)
        if raw is None:
            continue
        try:
            value = int(raw)
        except ValueError as e:
            raise ValueError(f"{env_name} must be an integer, got '{raw}'") from e
        for field_name in field_names:
            grid[field_name] = value
    data["grid"] = grid

    if environ.get("CANVAS_GRID_STATE_DIR"):
        data["state_dir"] = environ["CANVAS_GRID_STATE_DIR"]
    if environ.get("CANVAS_GRID_CACHE_TTL"):
        data["monitor_cache_ttl_seconds"] = float(environ["CANVAS_GRID_CACHE_TTL"])

    return GridSettings.model_validate(data)
