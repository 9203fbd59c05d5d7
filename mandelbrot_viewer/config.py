"""Settings for the viewer, loaded from settings.json."""

import json
import logging
import os
from dataclasses import dataclass, fields, replace

from .persistence import DEFAULT_STORE_PATH


logger = logging.getLogger(__name__)

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')


@dataclass(frozen=True)
class Settings:
    width: int = 800
    height: int = 600
    quality: int = 100
    color_policy: str = 'hsv'
    base_threshold: int = 50
    debounce_ms: int = 750
    yield_ms: int = 1
    fps: int = 60
    store_path: str = DEFAULT_STORE_PATH

    def override(self, **values):
        """Copy with the given values replaced, ignoring None."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})


def load_settings(path=None):
    """
    Load settings from a JSON file.

    Known keys override the built-in defaults, unknown keys are ignored.
    A missing or unreadable file falls back to the defaults.

    Args:
        path: Settings file (defaults to the packaged settings.json)
    """
    path = path or SETTINGS_PATH
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", path, e)
        return Settings()

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: not a JSON object", path)
        return Settings()

    known = {f.name for f in fields(Settings)}
    return Settings().override(**{k: v for k, v in data.items() if k in known})
