"""Application resolution: human-readable name -> installed bundle.

Path lookup goes through the Spotlight metadata index (``mdfind``): an exact
``kMDItemDisplayName`` match first, then a wildcard match. The true display
name is taken from, in order:

1. Finder's "displayed name" for the bundle (``osascript``)
2. Bundle metadata (localized InfoPlist.strings, then Info.plist)
3. The bundle filename without its ``.app`` suffix

Results are memoized in a LookupCache passed in by the caller.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Dict, Optional

from ..errors import NotFoundError
from ..models.records import ResolvedApplication, remove_app_suffix
from .bundle import bundle_name_from_metadata
from .cache import LookupCache
from .executor import CommandExecutor

logger = logging.getLogger(__name__)

BUNDLE_CONTENT_TYPE = "com.apple.application-bundle"
DEFAULT_MAX_NAME_LENGTH = 50

_NUMERIC_NAME = re.compile(r"^[0-9.]+$")


def spotlight_query(app_name: str, wildcard: bool = False) -> str:
    """Build an mdfind query matching application bundles by display name."""
    # Single quotes delimit the value inside the query language
    value = app_name.replace("\\", "\\\\").replace("'", "\\'")
    if wildcard:
        value = f"*{value}*"
    return f"kMDItemContentType == '{BUNDLE_CONTENT_TYPE}' && kMDItemDisplayName == '{value}'"


def should_adopt_name(candidate: str, max_length: int = DEFAULT_MAX_NAME_LENGTH) -> bool:
    """Name-adoption policy for a discovered true name.

    Adopt only non-empty names shorter than ``max_length`` that are not
    purely numeric (version strings such as "12.0.3" are rejected).
    """
    candidate = candidate.strip()
    return (
        len(candidate) > 0
        and len(candidate) < max_length
        and not _NUMERIC_NAME.match(candidate)
    )


class ApplicationResolver:
    """Resolve application names to bundle paths and true display names."""

    def __init__(self, executor: CommandExecutor, cache: Optional[LookupCache] = None):
        self.executor = executor
        self.cache = cache if cache is not None else LookupCache()
        self._pending_paths: Dict[str, asyncio.Future] = {}

    async def resolve(self, name: str) -> ResolvedApplication:
        """Resolve ``name`` to its bundle path and true name.

        Raises:
            NotFoundError: No installed bundle matches the name
        """
        path = await self.resolve_path(name)
        true_name = await self.resolve_display_name(path)
        return ResolvedApplication(display_text=name, path=path, true_name=true_name)

    async def resolve_path(self, name: str) -> Path:
        """Bundle path for ``name``; concurrent lookups of one name share a query."""
        cached = self.cache.get_path(name)
        if cached is not None:
            return cached

        pending = self._pending_paths.get(name)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._pending_paths[name] = future
        try:
            path = await self._query_path(name)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Consume so a future nobody awaited does not log a warning
            future.exception()
            raise
        else:
            self.cache.set_path(name, path)
            future.set_result(path)
            return path
        finally:
            del self._pending_paths[name]

    async def _query_path(self, name: str) -> Path:
        for wildcard in (False, True):
            output = await self.executor.run(["mdfind", spotlight_query(name, wildcard)])
            first = next((line.strip() for line in output.splitlines() if line.strip()), "")
            if first:
                logger.debug(f"Resolved {name!r} -> {first} (wildcard={wildcard})")
                return Path(first)
        raise NotFoundError(name)

    async def resolve_display_name(self, path: Path) -> str:
        """True display name for a bundle; first non-empty source wins."""
        cached = self.cache.get_display_name(path)
        if cached is not None:
            return cached

        name = await self._finder_display_name(path)
        if not name:
            name = bundle_name_from_metadata(path) or ""
        if not name:
            name = path.name
        name = remove_app_suffix(name.strip())

        self.cache.set_display_name(path, name)
        return name

    async def _finder_display_name(self, path: Path) -> str:
        script_path = str(path).replace("\\", "\\\\").replace('"', '\\"')
        script = f'tell application "Finder" to get displayed name of (POSIX file "{script_path}" as alias)'
        return await self.executor.run(["osascript", "-e", script])
