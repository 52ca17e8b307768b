"""Run configuration for the icon fetcher.

Defaults mirror the site layout: the data file lives at
``toolSoftware/data.js`` and extracted icons go to ``toolSoftware/icons``,
both relative to the working directory.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_DATA_PATH = Path("toolSoftware") / "data.js"
DEFAULT_OUTPUT_DIR = Path("toolSoftware") / "icons"


class FetcherConfig(BaseModel):
    """Settings for one icon-fetching run."""

    data_path: Path = Field(default=DEFAULT_DATA_PATH, description="Data file to reconcile")
    output_dir: Path = Field(default=DEFAULT_OUTPUT_DIR, description="Directory for extracted icons")
    icon_size: int = Field(default=64, ge=16, le=1024, description="Icon edge length in pixels")
    only_missing_icons: bool = Field(default=False, description="Only process records without a valid icon")

    concurrency: int = Field(default=10, ge=1, description="Maximum in-flight item workflows")
    retry_attempts: int = Field(default=2, ge=0, description="Retries after the first failed attempt")
    retry_delay: float = Field(default=0.5, ge=0, description="First backoff delay in seconds")
    backoff_multiplier: float = Field(default=1.5, ge=1.0, description="Backoff growth factor")
    command_timeout: float = Field(default=30.0, gt=0, description="Per-command timeout in seconds")

    min_icon_bytes: int = Field(default=1000, ge=0, description="Icons must be larger than this")
    max_name_length: int = Field(default=50, ge=1, description="Adopted names must be shorter than this")

    failure_examples: int = Field(default=10, ge=1, description="Failures listed per category")
    progress_step: int = Field(default=10, ge=1, le=100, description="Progress milestone in percent")
    backup: bool = Field(default=True, description="Copy data file to .bak before rewriting")

    verbose: bool = False
    debug: bool = False

    @field_validator("data_path", "output_dir")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()

    @model_validator(mode="after")
    def debug_implies_verbose(self):
        if self.debug:
            self.verbose = True
        return self

    def icon_path(self, icon_file: str) -> Path:
        """Absolute location of an icon file name inside the output directory."""
        return self.output_dir / icon_file
