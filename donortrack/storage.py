"""
Key-value persistence for the donor list and settings.

Values are JSON documents. Reads never fail: a missing key or a malformed
document yields the caller's default.
"""

import json
import logging
import os

logger = logging.getLogger(__name__)


class JsonFileStore:
    """One JSON file per key inside a data directory"""

    def __init__(self, data_dir):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)

    def path_for(self, key):
        return os.path.join(self.data_dir, f'{key}.json')

    def get(self, key, default=None):
        """Load data from JSON file"""
        file_path = self.path_for(key)
        if not os.path.exists(file_path):
            return default
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Error loading %s: %s", file_path, e)
            return default

    def set(self, key, value):
        """Save data to JSON file"""
        file_path = self.path_for(key)
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            return True
        except OSError as e:
            logger.error("Error saving %s: %s", file_path, e)
            return False


class MemoryStore:
    """In-process store holding serialized JSON text"""

    def __init__(self, initial=None):
        self._blobs = dict(initial or {})

    def get(self, key, default=None):
        raw = self._blobs.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("Error loading %s: %s", key, e)
            return default

    def set(self, key, value):
        self._blobs[key] = json.dumps(value, ensure_ascii=False)
        return True

    def raw(self, key):
        return self._blobs.get(key)
