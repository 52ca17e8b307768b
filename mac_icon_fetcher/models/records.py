"""
Record models for the icon fetcher.

ApplicationRecord and Category mirror the entries of the site's data file.
Only ``text`` and ``icon`` are interpreted; every other key (type, desc,
link, github, tags, ...) is carried through untouched.
"""

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import FailureCategory


APP_SUFFIX = ".app"


def remove_app_suffix(name: str) -> str:
    """Strip a trailing ``.app`` (any case) from an application name."""
    if name.lower().endswith(APP_SUFFIX):
        return name[: -len(APP_SUFFIX)]
    return name


def icon_file_name(display_text: str) -> str:
    """Deterministic icon file name for a display name.

    Path separators are not allowed in the stem; the result is always a
    plain file name inside the output directory.
    """
    stem = remove_app_suffix(display_text.strip())
    stem = stem.replace("/", "-").replace(":", "-").replace("\x00", "")
    return f"{stem}.png"


class ApplicationRecord(BaseModel):
    """One entry in a category's item list."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    display_text: str = Field(default="", alias="text", description="User-facing name and lookup key")
    icon: Optional[str] = Field(default=None, description="Icon file name relative to the output directory")

    def has_valid_icon(self, output_dir: Path, min_bytes: int) -> bool:
        """True when ``icon`` names an existing file larger than ``min_bytes``."""
        if not self.icon:
            return False
        return is_valid_icon_file(output_dir / self.icon, min_bytes)


class Category(BaseModel):
    """A named, ordered grouping of application records."""

    model_config = ConfigDict(extra="allow")

    text: str = ""
    items: List[ApplicationRecord] = Field(default_factory=list)


def is_valid_icon_file(path: Path, min_bytes: int) -> bool:
    """An icon file is valid when it exists and exceeds the size threshold."""
    try:
        return path.is_file() and path.stat().st_size > min_bytes
    except OSError:
        return False


def snapshot_categories(categories: List[Category]) -> List[Category]:
    """Deep copy taken before any mutation; used as the diff base."""
    return copy.deepcopy(categories)


@dataclass(frozen=True)
class ResolvedApplication:
    """A display name paired with its bundle path and discovered true name."""

    display_text: str
    path: Path
    true_name: str


@dataclass
class FailedItem:
    """A record whose workflow exhausted its retries."""

    record: ApplicationRecord
    name: str
    error: str
    category: FailureCategory = FailureCategory.OTHER


@dataclass
class ItemOutcome:
    """Result of a single successful item workflow."""

    name_updated: bool = False
    icon_updated: bool = False

    @property
    def updated(self) -> bool:
        return self.name_updated or self.icon_updated


@dataclass
class BatchResult:
    """
    Disjoint buckets of processed records.

    ``unchanged`` holds records whose workflow succeeded without changing
    the name or icon (typical on a repeated run in all-apps mode).
    """

    updated: List[ApplicationRecord] = field(default_factory=list)
    skipped: List[ApplicationRecord] = field(default_factory=list)
    failed: List[FailedItem] = field(default_factory=list)
    unchanged: List[ApplicationRecord] = field(default_factory=list)
    changed_field_count: int = 0
    elapsed: float = 0.0

    @property
    def processed_count(self) -> int:
        return len(self.updated) + len(self.failed) + len(self.unchanged)

    def failures_by_category(self) -> Dict[FailureCategory, List[FailedItem]]:
        """Group failures by category, in FailureCategory declaration order."""
        groups: Dict[FailureCategory, List[FailedItem]] = {}
        for category in FailureCategory:
            members = [item for item in self.failed if item.category is category]
            if members:
                groups[category] = members
        return groups

    def to_dict(self) -> Dict[str, Any]:
        """Summary for --json output."""
        return {
            "updated": [r.display_text for r in self.updated],
            "skipped": [r.display_text for r in self.skipped],
            "unchanged": [r.display_text for r in self.unchanged],
            "failed": [
                {"name": f.name, "error": f.error, "category": f.category.value}
                for f in self.failed
            ],
            "changed_field_count": self.changed_field_count,
            "elapsed": round(self.elapsed, 3),
        }
