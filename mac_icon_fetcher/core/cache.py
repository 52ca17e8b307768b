"""Process-lifetime lookup cache.

Two independent mappings, filled lazily and never invalidated:
application name -> bundle path, and bundle path -> display name.
Entries are only ever inserted for immutable keys, so concurrent tasks
racing on the same key simply overwrite with an equal value.
"""

from pathlib import Path
from typing import Dict, Optional


class LookupCache:
    """Memoizes expensive OS lookups for the duration of one run."""

    def __init__(self):
        self.app_paths: Dict[str, Path] = {}
        self.display_names: Dict[Path, str] = {}
        self.hits = 0
        self.misses = 0

    def get_path(self, app_name: str) -> Optional[Path]:
        return self._lookup(self.app_paths, app_name)

    def set_path(self, app_name: str, path: Path) -> None:
        self.app_paths[app_name] = path

    def get_display_name(self, path: Path) -> Optional[str]:
        return self._lookup(self.display_names, path)

    def set_display_name(self, path: Path, name: str) -> None:
        self.display_names[path] = name

    def _lookup(self, mapping, key):
        value = mapping.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value
