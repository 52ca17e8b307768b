"""Shared fixtures for mac_icon_fetcher tests.

External commands never run here: ``FakeExecutor`` stands in for the
subprocess layer and answers mdfind/osascript/sips/qlmanage calls from a
handler function.
"""

import asyncio
import plistlib
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional, Sequence

import pytest

from mac_icon_fetcher.config import FetcherConfig
from mac_icon_fetcher.core.executor import CommandExecutor


VALID_ICON_BYTES = 2000

SAMPLE_DATA = """// Application catalogue for the site
export default [
  {
    text: "Tools",
    items: [
      // video player
      {
        text: "IINA",
        desc: "Modern media player",
        link: "https://iina.io",
      },
      { text: 'Visual Studio Code', desc: "Editor" },
    ],
  },
];
"""


class FakeExecutor(CommandExecutor):
    """Executor double that records calls instead of spawning processes.

    ``handler`` receives the argument list and returns stdout, or None to
    simulate a failing command.
    """

    def __init__(self, handler: Optional[Callable[[List[str]], Optional[str]]] = None):
        super().__init__(timeout=1.0)
        self.handler = handler or (lambda args: "")
        self.history: List[List[str]] = []

    async def run(self, args: Sequence[str], error_context: Optional[str] = None) -> str:
        self.calls += 1
        await asyncio.sleep(0)
        args = list(args)
        self.history.append(args)
        output = self.handler(args)
        if output is None:
            return self._fail(args, error_context, f"{args[0]} failed: simulated")
        return output

    def commands(self, program: str) -> List[List[str]]:
        return [args for args in self.history if args[0] == program]


def write_icon(path: Path, size: int = VALID_ICON_BYTES) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG" + b"\x00" * (size - 4))
    return path


def sips_handler(icon_bytes: int = VALID_ICON_BYTES) -> Callable[[List[str]], Optional[str]]:
    """Handler writing ``icon_bytes`` to the ``--out`` target of sips calls."""

    def handle(args: List[str]) -> Optional[str]:
        if args[0] == "sips":
            write_icon(Path(args[args.index("--out") + 1]), icon_bytes)
        elif args[0] == "qlmanage":
            outdir = Path(args[args.index("-o") + 1])
            write_icon(outdir / f"{Path(args[-1]).name}.png")
        return ""

    return handle


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Temporary working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_executor() -> Callable[..., FakeExecutor]:
    """Factory for FakeExecutor instances."""
    return FakeExecutor


@pytest.fixture
def icon_writer() -> Callable[..., Path]:
    return write_icon


@pytest.fixture
def sips() -> Callable[..., Callable[[List[str]], Optional[str]]]:
    return sips_handler


@pytest.fixture
def make_bundle(temp_dir: Path) -> Callable[..., Path]:
    """Factory creating fake ``.app`` bundles.

    Args (of the returned function):
        name: Bundle directory name without ``.app``
        info: Info.plist contents; None to omit the file
        resources: Mapping of Resources-relative path to file bytes;
            None to omit the Resources directory
    """

    def make(
        name: str,
        info: Optional[Dict[str, object]] = None,
        resources: Optional[Dict[str, bytes]] = None,
    ) -> Path:
        bundle = temp_dir / "Applications" / f"{name}.app"
        contents = bundle / "Contents"
        contents.mkdir(parents=True)
        if info is not None:
            with (contents / "Info.plist").open("wb") as f:
                plistlib.dump(info, f)
        if resources is not None:
            res_dir = contents / "Resources"
            res_dir.mkdir()
            for rel_path, data in resources.items():
                target = res_dir / rel_path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
        return bundle

    return make


@pytest.fixture
def data_file(temp_dir: Path) -> Path:
    """Sample data file with one category and two records."""
    path = temp_dir / "toolSoftware" / "data.js"
    path.parent.mkdir(parents=True)
    path.write_text(SAMPLE_DATA, encoding="utf-8")
    return path


@pytest.fixture
def config(temp_dir: Path, data_file: Path) -> FetcherConfig:
    """Fast configuration pointing at the temporary data file."""
    return FetcherConfig(
        data_path=data_file,
        output_dir=temp_dir / "toolSoftware" / "icons",
        retry_delay=0.0,
        concurrency=4,
    )
