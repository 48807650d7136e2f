# HueCue Utils Configuration

"""
Centralized configuration for the HueCue playback core.
All parameters are exposed here for easy tuning and documentation.

Defaults live in CONFIG. A YAML file can override any known key:

    from hue_cue.utils import config
    config.load_config("huecue.yaml")
    interval = config.get("playback_interval_ms")
"""

from pathlib import Path
from typing import Dict, Any, Optional, Sequence, Tuple, Union

import yaml

from .logging import get_logger, setup_logging

logger = get_logger(__name__)


CONFIG: Dict[str, Any] = {
    # ===========================================================================
    # Playback
    # ===========================================================================
    "playback_interval_ms": 33,     # Fast timer, ~30 ticks per second
    "histogram_interval_ms": 1000,  # Slow timer, histogram recompute
    "fallback_fps": 30.0,           # Used when the container reports no rate

    # ===========================================================================
    # Histogram Rendering
    # ===========================================================================
    "histogram_width": 512,
    "histogram_height": 400,
    "histogram_bins": 256,
    "histogram_line_thickness": 2,
    "histogram_colors": {
        "red": "#FF0000",
        "green": "#00FF00",
        "blue": "#0000FF",
    },

    # ===========================================================================
    # File Picker
    # ===========================================================================
    "video_extensions": [".mp4", ".avi", ".mov", ".mkv", ".wmv", ".flv", ".webm"],

    # ===========================================================================
    # Logging
    # ===========================================================================
    "log_level": "INFO",
}

_DEFAULTS: Dict[str, Any] = {
    key: (dict(value) if isinstance(value, dict) else list(value) if isinstance(value, list) else value)
    for key, value in CONFIG.items()
}


def get_config() -> Dict[str, Any]:
    """Return a copy of the configuration dictionary."""
    return CONFIG.copy()


def get(key: str, default: Any = None) -> Any:
    """Get a configuration value by key."""
    return CONFIG.get(key, default)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Overlay values from a YAML file onto the defaults.

    Unknown keys are ignored with a warning. Nested dicts (histogram_colors)
    are merged rather than replaced.

    Args:
        path: Path to a YAML mapping.

    Returns:
        A copy of the resulting configuration.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not contain a mapping.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    for key, value in data.items():
        if key not in CONFIG:
            logger.warning(f"Ignoring unknown config key '{key}' in {path.name}")
            continue
        if isinstance(CONFIG[key], dict) and isinstance(value, dict):
            merged = dict(CONFIG[key])
            merged.update(value)
            CONFIG[key] = merged
        else:
            CONFIG[key] = value

    if "log_level" in data:
        setup_logging(level=CONFIG["log_level"])

    logger.info(f"Loaded config from {path}")
    return get_config()


def reset_config() -> None:
    """Restore every key to its built-in default."""
    CONFIG.clear()
    for key, value in _DEFAULTS.items():
        if isinstance(value, dict):
            CONFIG[key] = dict(value)
        elif isinstance(value, list):
            CONFIG[key] = list(value)
        else:
            CONFIG[key] = value


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    """
    Convert "#RRGGBB" to an OpenCV BGR tuple.

    Raises:
        ValueError: If the string is not a 6-digit hex color.
    """
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #RRGGBB color, got {color!r}")
    r = int(value[0:2], 16)
    g = int(value[2:4], 16)
    b = int(value[4:6], 16)
    return (b, g, r)


def video_extensions() -> Tuple[str, ...]:
    """Currently advertised video extensions (lower case, with dot)."""
    return tuple(ext.lower() for ext in CONFIG.get("video_extensions", []))


def video_file_filter(extensions: Optional[Sequence[str]] = None) -> str:
    """Build a Qt file-dialog filter string for the advertised video types."""
    extensions = extensions if extensions is not None else video_extensions()
    patterns = " ".join(f"*{ext}" for ext in extensions)
    return f"Video Files ({patterns});;All Files (*)"


# Built-in defaults for the file picker. After load_config, use
# video_extensions() and video_file_filter() for the live values.
VIDEO_EXTENSIONS: Tuple[str, ...] = tuple(CONFIG["video_extensions"])
VIDEO_FILE_FILTER: str = video_file_filter(VIDEO_EXTENSIONS)
