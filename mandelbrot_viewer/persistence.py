"""
Saving and restoring the view between sessions.

The store is a small JSON file holding a key-value mapping. The view
lives under a fixed key as ``{"scale", "xOffset", "yOffset"}``. Anything
unreadable is treated as if nothing had been saved.
"""

import json
import logging
import math
import os


logger = logging.getLogger(__name__)

SAVE_KEY = 'save'
DEFAULT_STORE_PATH = os.path.join('~', '.mandelbrot_viewer', 'store.json')


def _valid_saved_view(saved):
    if not isinstance(saved, dict):
        return False
    for key in ('scale', 'xOffset', 'yOffset'):
        value = saved.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return saved['scale'] > 0


class ViewStore:
    """
    JSON-file key-value store for the saved view.

    Args:
        path: Store file location (``~`` is expanded)
        key: Key the view is stored under
    """

    def __init__(self, path=DEFAULT_STORE_PATH, key=SAVE_KEY):
        self.path = os.path.expanduser(path)
        self.key = key

    def _read_all(self):
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read view store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring view store %s: not a JSON object", self.path)
            return {}
        return data

    def load(self):
        """
        Get the saved view.

        Returns:
            Dict with scale, xOffset and yOffset, or None if nothing
            usable was saved
        """
        saved = self._read_all().get(self.key)
        if saved is None:
            return None
        if not _valid_saved_view(saved):
            logger.warning("Ignoring malformed saved view: %r", saved)
            return None
        return {key: float(saved[key]) for key in ('scale', 'xOffset', 'yOffset')}

    def save(self, saved):
        """Write the view mapping. Failures are logged, never raised."""
        data = self._read_all()
        data[self.key] = saved
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(data, f)
        except OSError as e:
            logger.warning("Could not save view to %s: %s", self.path, e)
