"""
File-backed entity store.

Each named slice (teams, players, matches, bracket) lives in its own YAML
file inside the data directory. Writes go through a FileLock and then
notify subscribers synchronously.
"""
import copy
import logging
import os
from typing import Callable, Dict

import yaml
from filelock import FileLock

logger = logging.getLogger(__name__)

SLICE_DEFAULTS = {
    'teams': [],
    'players': {},
    'matches': [],
    'bracket': {'rounds': []},
}
SLICE_KEYS = tuple(SLICE_DEFAULTS.keys())


class EntityStore:
    def __init__(self, data_dir: str, lock_timeout: int = 10):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)
        self._lock = FileLock(os.path.join(data_dir, '.lock'), timeout=lock_timeout)
        self._subscribers = []

    def _path(self, key: str) -> str:
        return os.path.join(self.data_dir, f'{key}.yaml')

    def _read(self, key):
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning('Failed to parse %s: %s', path, e)
            return None

    def _write(self, key, value):
        with open(self._path(key), 'w', encoding='utf-8') as f:
            yaml.dump(value, f, default_flow_style=False)

    def get(self, key: str, default=None):
        """Load a slice, falling back to its built-in default and then to ``default``."""
        value = self._read(key)
        if value is not None:
            return value
        if key in SLICE_DEFAULTS:
            return copy.deepcopy(SLICE_DEFAULTS[key])
        return default

    def set(self, key: str, value) -> None:
        with self._lock:
            self._write(key, value)
        logger.debug('Stored %s', key)
        self._notify(key, value)

    def subscribe(self, callback: Callable) -> Callable:
        """Register ``callback(key, value)`` for change notifications. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def _notify(self, key, value):
        for callback in list(self._subscribers):
            try:
                callback(key, value)
            except Exception:
                logger.exception('Subscriber failed for %s change', key)

    def snapshot(self) -> Dict:
        return {key: self.get(key) for key in SLICE_KEYS}

    def replace_all(self, snapshot: Dict) -> None:
        """Write every slice at once. Missing slices are reset to their defaults."""
        values = {}
        for key in SLICE_KEYS:
            value = snapshot.get(key)
            values[key] = copy.deepcopy(SLICE_DEFAULTS[key]) if value is None else value
        with self._lock:
            for key, value in values.items():
                self._write(key, value)
        logger.info('Replaced all slices in %s', self.data_dir)
        for key, value in values.items():
            self._notify(key, value)

    def reset(self) -> None:
        self.replace_all({})
