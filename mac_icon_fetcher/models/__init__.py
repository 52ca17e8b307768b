"""Data models for the icon fetcher."""

from .records import (
    ApplicationRecord,
    BatchResult,
    Category,
    FailedItem,
    ItemOutcome,
    ResolvedApplication,
    icon_file_name,
    is_valid_icon_file,
    remove_app_suffix,
    snapshot_categories,
)

__all__ = [
    "ApplicationRecord",
    "BatchResult",
    "Category",
    "FailedItem",
    "ItemOutcome",
    "ResolvedApplication",
    "icon_file_name",
    "is_valid_icon_file",
    "remove_app_suffix",
    "snapshot_categories",
]
