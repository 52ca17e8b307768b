"""Environment preconditions, checked before any item work starts."""

import logging
import shutil
import sys
from typing import Callable, Optional, Sequence

from ..config import FetcherConfig
from ..errors import EnvironmentCheckError

logger = logging.getLogger(__name__)

# mdfind: Spotlight lookup, sips: image conversion, qlmanage: bundle icon rendering
REQUIRED_TOOLS = ("mdfind", "sips", "qlmanage")
# osascript: Finder display names; absence only degrades name resolution
OPTIONAL_TOOLS = ("osascript",)


def check_environment(
    config: FetcherConfig,
    platform: str = sys.platform,
    which: Callable[[str], Optional[str]] = shutil.which,
    required_tools: Sequence[str] = REQUIRED_TOOLS,
) -> None:
    """Fail fast when the run cannot succeed.

    Creates the output directory when it does not exist yet.

    Raises:
        EnvironmentCheckError: Not macOS, a required tool is missing, or
            the data file does not exist
    """
    if platform != "darwin":
        raise EnvironmentCheckError(
            f"This tool only supports macOS (detected platform: {platform})",
            suggestion="Run it on a Mac with Spotlight and sips available",
        )

    missing = [tool for tool in required_tools if which(tool) is None]
    if missing:
        raise EnvironmentCheckError(
            f"Required command-line tools not found: {', '.join(missing)}",
            context={"missing": missing},
        )

    for tool in OPTIONAL_TOOLS:
        if which(tool) is None:
            logger.warning(f"{tool} not found; Finder display names will be skipped")

    if not config.data_path.is_file():
        raise EnvironmentCheckError(
            f"Data file does not exist: {config.data_path}",
            suggestion="Pass --data or run from the site root",
        )

    if not config.output_dir.exists():
        config.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created output directory: {config.output_dir}")
