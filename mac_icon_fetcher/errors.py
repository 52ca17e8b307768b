"""
Error kinds for the macOS application icon fetcher.

Per-item errors (NotFoundError, ExtractionError, ExecutionError) are caught
at the single-item workflow boundary and end up in the failure bucket.
EnvironmentCheckError and DataFileError are fatal and abort the run.
"""

from enum import Enum
from typing import Any, Dict, Optional


class FailureCategory(Enum):
    """
    Categories used to group failures in the final summary.

    Values double as the labels shown to the user.
    """

    PATH_NOT_FOUND = "path-not-found"
    ICON_EXTRACTION = "icon-extraction"
    NAME_RETRIEVAL = "name-retrieval"
    OTHER = "other"

    @property
    def title(self) -> str:
        return {
            FailureCategory.PATH_NOT_FOUND: "Application path errors",
            FailureCategory.ICON_EXTRACTION: "Icon extraction errors",
            FailureCategory.NAME_RETRIEVAL: "Name retrieval errors",
            FailureCategory.OTHER: "Other errors",
        }[self]


class IconFetcherError(Exception):
    """Base exception for icon fetcher errors."""

    category = FailureCategory.OTHER

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize icon fetcher error.

        Args:
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to a dictionary for JSON output.

        Returns:
            Error dictionary with category, message, suggestion, and context
        """
        result = {
            "category": self.category.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class ExecutionError(IconFetcherError):
    """An external OS command failed unexpectedly."""

    def __init__(self, label: str, underlying: str, context: Optional[Dict[str, Any]] = None):
        self.label = label
        self.underlying = underlying
        super().__init__(f"{label}: {underlying}", context=context)


class NotFoundError(IconFetcherError):
    """Application name did not resolve to any installed bundle."""

    category = FailureCategory.PATH_NOT_FOUND

    def __init__(self, app_name: str):
        self.app_name = app_name
        super().__init__(
            f'Application "{app_name}" not found',
            suggestion="Check the name against the Finder display name or Spotlight index",
            context={"app_name": app_name}
        )


class ExtractionError(IconFetcherError):
    """No icon candidate could be converted into a valid raster file."""

    category = FailureCategory.ICON_EXTRACTION


class EnvironmentCheckError(IconFetcherError):
    """Fatal precondition failure: wrong platform, missing tool or data file."""


class DataFileError(IconFetcherError):
    """Data file could not be read, parsed, or written."""


# Keyword fallbacks for messages that did not originate from a fetcher error
_MESSAGE_KEYWORDS = (
    (FailureCategory.ICON_EXTRACTION, ("icon", "sips", "extract")),
    (FailureCategory.PATH_NOT_FOUND, ("not found", "mdfind", "path")),
    (FailureCategory.NAME_RETRIEVAL, ("display name", "displayed name")),
)


def categorize_message(message: str) -> FailureCategory:
    """Infer a failure category from a free-form error message."""
    lowered = message.lower()
    for category, keywords in _MESSAGE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return FailureCategory.OTHER


def categorize_error(error: BaseException) -> FailureCategory:
    """Return the failure category for an exception raised by an item workflow."""
    if isinstance(error, IconFetcherError) and error.category is not FailureCategory.OTHER:
        return error.category
    return categorize_message(str(error))
