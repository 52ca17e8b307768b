"""Icon extraction: rasterize an icon resource to a fixed-size PNG.

Resource files (.icns, .png, ...) are converted with ``sips``. A bundle
directory has no single image file, so its icon is rendered through Quick
Look (``qlmanage -t``) first and then normalized with ``sips``.

Conversion writes to a task-unique temporary file next to the target and
moves it into place with an atomic rename once the result is valid.
"""

import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import List, Optional

from ..errors import ExecutionError, ExtractionError
from ..models.records import is_valid_icon_file
from .executor import CommandExecutor

logger = logging.getLogger(__name__)

DEFAULT_MIN_ICON_BYTES = 1000


class IconExtractor:
    """Convert located icon resources into validated PNG files."""

    def __init__(self, executor: CommandExecutor, min_bytes: int = DEFAULT_MIN_ICON_BYTES):
        self.executor = executor
        self.min_bytes = min_bytes

    async def extract(
        self,
        resource_path: Path,
        output_path: Path,
        size: int,
        bundle_path: Optional[Path] = None,
    ) -> bool:
        """Write a ``size`` x ``size`` PNG for ``resource_path`` to ``output_path``.

        Falls back to the bundle itself when the resource yields no valid
        image.

        Raises:
            ExtractionError: No source produced a valid icon file
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        sources = [resource_path]
        if bundle_path is not None and resource_path != bundle_path:
            sources.append(bundle_path)

        problems: List[str] = []
        for source in sources:
            try:
                if await self._convert(source, output_path, size):
                    logger.debug(f"Extracted {output_path.name} from {source}")
                    return True
                problems.append(f"{source.name}: output missing or not larger than {self.min_bytes} bytes")
            except ExecutionError as e:
                problems.append(str(e))

        raise ExtractionError(
            f"Icon extraction failed for {output_path.name}: {'; '.join(problems)}",
            context={"resource": str(resource_path), "output": str(output_path)},
        )

    async def _convert(self, source: Path, output_path: Path, size: int) -> bool:
        temp_path = output_path.with_name(f".{output_path.stem}.{uuid.uuid4().hex}.tmp.png")
        try:
            if source.is_dir():
                await self._render_bundle(source, temp_path, size)
            else:
                await self._sips(source, temp_path, size)

            if not is_valid_icon_file(temp_path, self.min_bytes):
                return False
            os.replace(temp_path, output_path)
            return True
        finally:
            if temp_path.exists():
                temp_path.unlink()

    async def _sips(self, source: Path, target: Path, size: int) -> None:
        await self.executor.run(
            [
                "sips", "-s", "format", "png", str(source),
                "--out", str(target),
                "--resampleHeightWidth", str(size), str(size),
            ],
            error_context=f"Icon conversion failed for {source.name}",
        )

    async def _render_bundle(self, bundle: Path, target: Path, size: int) -> None:
        with tempfile.TemporaryDirectory(prefix="mac-icon-fetcher-") as tmpdir:
            await self.executor.run(
                ["qlmanage", "-t", "-s", str(size), "-o", tmpdir, str(bundle)],
                error_context=f"Icon rendering failed for {bundle.name}",
            )
            rendered = Path(tmpdir) / f"{bundle.name}.png"
            if not rendered.exists():
                raise ExecutionError(
                    f"Icon rendering failed for {bundle.name}",
                    "qlmanage produced no thumbnail",
                )
            await self._sips(rendered, target, size)
