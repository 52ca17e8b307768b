"""Icon locator: pick the best icon resource inside an application bundle.

Fallback chain, first hit wins:

1. ``CFBundleIconFile`` from Info.plist (``.icns`` appended if missing)
2. Conventional names: AppIcon.icns, Icon.icns, <app name>.icns
3. Any ``.icns`` file in Contents/Resources
4. The largest raster image in Contents/Resources
5. The bundle itself (extraction can still yield its generic icon)

Never fails; the extractor rejects unusable results.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .bundle import ICON_EXTENSION, declared_icon_file, resources_dir

logger = logging.getLogger(__name__)

RASTER_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tiff", ".tif")


def conventional_icon_names(app_name: str) -> List[str]:
    return ["AppIcon.icns", "Icon.icns", f"{app_name}.icns"]


class IconLocator:
    """Find an icon resource for a resolved bundle."""

    def locate(self, bundle_path: Path, app_name: str) -> Path:
        resources = resources_dir(bundle_path)

        declared = declared_icon_file(bundle_path)
        if declared:
            candidate = resources / declared
            if candidate.is_file():
                return candidate
            logger.debug(f"Declared icon {declared} missing in {bundle_path}")

        if not resources.is_dir():
            logger.debug(f"No Resources directory in {bundle_path}, using bundle")
            return bundle_path

        for name in conventional_icon_names(app_name):
            candidate = resources / name
            if candidate.is_file():
                return candidate

        files = self._list_files(resources)

        icns = next((f for f in files if f.suffix == ICON_EXTENSION), None)
        if icns is not None:
            return icns

        largest = self._largest_raster(files)
        if largest is not None:
            return largest

        logger.debug(f"No icon resource found for {app_name}, using bundle")
        return bundle_path

    def _list_files(self, directory: Path) -> List[Path]:
        try:
            return sorted(p for p in directory.iterdir() if p.is_file())
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")
            return []

    def _largest_raster(self, files: List[Path]) -> Optional[Path]:
        best: Optional[Path] = None
        best_size = -1
        for path in files:
            if path.suffix.lower() not in RASTER_EXTENSIONS:
                continue
            try:
                size = path.stat().st_size
            except OSError:
                continue
            if size > best_size:
                best, best_size = path, size
        return best
