"""Readers for application bundle metadata.

An ``.app`` bundle keeps its metadata in ``Contents/Info.plist`` (XML or
binary plist) and per-language overrides in
``Contents/Resources/<lang>.lproj/InfoPlist.strings``. Strings files are
either plists or the old-style ``"key" = "value";`` text format, usually
UTF-16.
"""

import logging
import plistlib
import re
from pathlib import Path
from typing import Dict, Optional
from xml.parsers.expat import ExpatError

logger = logging.getLogger(__name__)

ICON_EXTENSION = ".icns"
LOCALIZATIONS = ("zh-Hans", "en", "Base")

_STRINGS_ENTRY = re.compile(r'"((?:[^"\\]|\\.)*)"\s*=\s*"((?:[^"\\]|\\.)*)"\s*;')


def contents_dir(bundle_path: Path) -> Path:
    return bundle_path / "Contents"


def resources_dir(bundle_path: Path) -> Path:
    return bundle_path / "Contents" / "Resources"


def read_info_plist(bundle_path: Path) -> Dict[str, object]:
    """Load Info.plist of a bundle; empty dict when missing or unreadable."""
    plist_path = contents_dir(bundle_path) / "Info.plist"
    try:
        with plist_path.open("rb") as f:
            data = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError) as e:
        logger.debug(f"Cannot read {plist_path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def _decode_strings(raw: bytes) -> str:
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        return raw.decode("utf-16")
    if b"\x00" in raw:
        return raw.decode("utf-16-le", errors="replace")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("utf-16", errors="replace")


def read_strings_file(path: Path) -> Dict[str, str]:
    """Parse an InfoPlist.strings file in plist or old-style text format."""
    try:
        raw = path.read_bytes()
    except OSError:
        return {}

    try:
        data = plistlib.loads(raw)
        if isinstance(data, dict):
            return {str(k): str(v) for k, v in data.items()}
    except (plistlib.InvalidFileException, ValueError, ExpatError):
        pass

    text = _decode_strings(raw)
    return {
        key.replace('\\"', '"'): value.replace('\\"', '"')
        for key, value in _STRINGS_ENTRY.findall(text)
    }


def bundle_name_from_metadata(bundle_path: Path) -> Optional[str]:
    """Display name from localized strings, then Info.plist.

    Checks CFBundleDisplayName before CFBundleName in each source.
    """
    for lang in LOCALIZATIONS:
        strings = read_strings_file(resources_dir(bundle_path) / f"{lang}.lproj" / "InfoPlist.strings")
        name = strings.get("CFBundleDisplayName") or strings.get("CFBundleName")
        if name and name.strip():
            return name.strip()

    info = read_info_plist(bundle_path)
    for key in ("CFBundleDisplayName", "CFBundleName"):
        value = info.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def declared_icon_file(bundle_path: Path) -> Optional[str]:
    """CFBundleIconFile with the .icns extension appended if missing."""
    value = read_info_plist(bundle_path).get("CFBundleIconFile")
    if not isinstance(value, str) or not value.strip():
        return None
    name = value.strip()
    if not name.endswith(ICON_EXTENSION):
        name += ICON_EXTENSION
    return name
