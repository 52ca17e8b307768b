"""Unit tests for errors, configuration and record models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mac_icon_fetcher.config import FetcherConfig
from mac_icon_fetcher.errors import (
    ExecutionError,
    ExtractionError,
    FailureCategory,
    IconFetcherError,
    NotFoundError,
    categorize_error,
    categorize_message,
)
from mac_icon_fetcher.models import (
    ApplicationRecord,
    BatchResult,
    FailedItem,
    icon_file_name,
    remove_app_suffix,
)


class TestErrors:

    def test_not_found_message(self):
        error = NotFoundError("Ghost")
        assert str(error) == 'Application "Ghost" not found'
        assert error.to_dict()["category"] == "path-not-found"
        assert error.to_dict()["context"] == {"app_name": "Ghost"}
        assert "suggestion" in error.to_dict()
        assert IconFetcherError("boom").to_dict() == {"category": "other", "message": "boom"}

    def test_execution_error_message(self):
        error = ExecutionError("Icon conversion failed for a.icns", "sips failed: exit code 1")
        assert str(error) == "Icon conversion failed for a.icns: sips failed: exit code 1"

    def test_categorize_typed_errors(self):
        assert categorize_error(NotFoundError("x")) is FailureCategory.PATH_NOT_FOUND
        assert categorize_error(ExtractionError("x")) is FailureCategory.ICON_EXTRACTION

    @pytest.mark.parametrize("message, expected", [
        ("Icon conversion failed for a.icns: boom", FailureCategory.ICON_EXTRACTION),
        ("sips crashed", FailureCategory.ICON_EXTRACTION),
        ("mdfind: index unavailable", FailureCategory.PATH_NOT_FOUND),
        ("could not read display name", FailureCategory.NAME_RETRIEVAL),
        ("something odd", FailureCategory.OTHER),
    ])
    def test_categorize_by_message(self, message, expected):
        assert categorize_message(message) is expected
        assert categorize_error(RuntimeError(message)) is expected
        assert categorize_error(IconFetcherError(message)) is expected

    def test_category_titles(self):
        assert FailureCategory.PATH_NOT_FOUND.title == "Application path errors"
        assert FailureCategory.OTHER.title == "Other errors"


class TestFetcherConfig:

    def test_defaults(self):
        config = FetcherConfig()
        assert config.data_path == Path("toolSoftware/data.js")
        assert config.output_dir == Path("toolSoftware/icons")
        assert config.icon_size == 64
        assert config.concurrency == 10
        assert config.retry_attempts == 2
        assert config.min_icon_bytes == 1000

    def test_debug_implies_verbose(self):
        assert FetcherConfig(debug=True).verbose

    def test_expands_home(self):
        assert "~" not in str(FetcherConfig(output_dir=Path("~/icons")).output_dir)

    @pytest.mark.parametrize("field, value", [("concurrency", 0), ("icon_size", 4), ("retry_attempts", -1)])
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            FetcherConfig(**{field: value})


class TestRecords:

    def test_text_alias(self):
        record = ApplicationRecord.model_validate({"text": "IINA", "desc": "player"})
        assert record.display_text == "IINA"
        assert record.icon is None
        assert record.model_dump(by_alias=True, exclude_none=True) == {"text": "IINA", "desc": "player"}

    def test_icon_file_name(self):
        assert icon_file_name("Visual Studio Code") == "Visual Studio Code.png"
        assert icon_file_name("Foo.app") == "Foo.png"
        assert icon_file_name("AC/DC: Live") == "AC-DC- Live.png"

    def test_remove_app_suffix(self):
        assert remove_app_suffix("Safari.APP") == "Safari"
        assert remove_app_suffix("Approach") == "Approach"

    def test_has_valid_icon(self, temp_dir, icon_writer):
        icon_writer(temp_dir / "big.png", 1001)
        icon_writer(temp_dir / "small.png", 1000)

        assert ApplicationRecord(text="A", icon="big.png").has_valid_icon(temp_dir, 1000)
        assert not ApplicationRecord(text="A", icon="small.png").has_valid_icon(temp_dir, 1000)
        assert not ApplicationRecord(text="A", icon="missing.png").has_valid_icon(temp_dir, 1000)
        assert not ApplicationRecord(text="A").has_valid_icon(temp_dir, 1000)

    def test_failures_grouped_in_category_order(self):
        record = ApplicationRecord(text="A")
        result = BatchResult(failed=[
            FailedItem(record, "A", "x", FailureCategory.OTHER),
            FailedItem(record, "B", "y", FailureCategory.PATH_NOT_FOUND),
            FailedItem(record, "C", "z", FailureCategory.PATH_NOT_FOUND),
        ])

        groups = result.failures_by_category()

        assert list(groups) == [FailureCategory.PATH_NOT_FOUND, FailureCategory.OTHER]
        assert [f.name for f in groups[FailureCategory.PATH_NOT_FOUND]] == ["B", "C"]
        assert result.to_dict()["failed"][1]["category"] == "path-not-found"
