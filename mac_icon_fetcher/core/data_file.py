"""Reading and writing the site's application data file.

The data file is a JavaScript (or TypeScript) module exporting an array of
categories, e.g.::

    export default [
      { text: "Tools", items: [ { text: "IINA", icon: "IINA.png" } ] },
    ];

The array literal is located in the source and parsed with json5, which
accepts the unquoted keys, single quotes, trailing commas and comments
found in hand-written JS object literals. Bare ``undefined`` values are
read as ``null``.
"""

import logging
import os
import re
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List

import json5
from pydantic import ValidationError

from ..errors import DataFileError
from ..models.records import Category, snapshot_categories

logger = logging.getLogger(__name__)

_EXPORT_DEFAULT = re.compile(r"\bexport\s+default\s+")
_EXPORT_CONST = re.compile(r"\bexport\s+const\s+data\s*(?::[^=]+)?=\s*")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
_UNDEFINED = re.compile(r"(?<![\w$.])undefined(?![\w$])")


@dataclass
class DataSource:
    """A loaded data file.

    ``text`` is the source exactly as read; ``original`` is an immutable
    snapshot of the parsed categories taken before any mutation;
    ``categories`` is the working copy the batch mutates.
    """

    path: Path
    text: str
    original: List[Category]
    categories: List[Category]

    @property
    def record_count(self) -> int:
        return sum(len(c.items) for c in self.categories)


def find_array_literal(text: str) -> str:
    """Return the exported array literal from module source text."""
    start = _array_start(text)
    end = _matching_bracket(text, start)
    return text[start:end + 1]


def _array_start(text: str) -> int:
    match = _EXPORT_CONST.search(text)
    if match is None:
        match = _EXPORT_DEFAULT.search(text)
    if match is None:
        raise DataFileError("No exported data array found (expected 'export default [...]')")

    pos = match.end()
    if text.startswith("[", pos):
        return pos

    # export default <identifier>; look up the declaration
    ident = _IDENTIFIER.match(text, pos)
    if ident is None:
        raise DataFileError("Exported value is not an array literal")
    decl = re.search(
        rf"\b(?:const|let|var)\s+{re.escape(ident.group(0))}\s*(?::[^=]+)?=\s*\[",
        text,
    )
    if decl is None:
        raise DataFileError(f"Declaration of exported '{ident.group(0)}' not found")
    return decl.end() - 1


def _code_positions(text: str, start: int = 0) -> Iterator[int]:
    """Yield indices of characters outside string literals and comments."""
    i = start
    quote = None
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'`":
            quote = ch
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = len(text) if newline == -1 else newline
            continue
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = len(text) if close == -1 else close + 2
            continue
        else:
            yield i
        i += 1


def _matching_bracket(text: str, start: int) -> int:
    depth = 0
    for i in _code_positions(text, start):
        if text[i] in "[{":
            depth += 1
        elif text[i] in "]}":
            depth -= 1
            if depth == 0:
                return i
    raise DataFileError("Unterminated data array")


def _replace_undefined(literal: str) -> str:
    """Rewrite bare ``undefined`` values to ``null`` so json5 accepts them."""
    if not _UNDEFINED.search(literal):
        return literal
    code = set(_code_positions(literal))
    return _UNDEFINED.sub(lambda m: "null" if m.start() in code else m.group(0), literal)


def parse_categories(text: str) -> List[Category]:
    """Parse module source text into Category models."""
    literal = find_array_literal(text)
    try:
        raw = json5.loads(_replace_undefined(literal))
    except ValueError as e:
        raise DataFileError(f"Cannot parse data array: {e}")

    if not isinstance(raw, list):
        raise DataFileError(f"Data format error: expected an array, got {type(raw).__name__}")

    categories = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise DataFileError(f"Category #{index} is not an object")
        if not isinstance(entry.get("items"), list):
            entry = {**entry, "items": []}
        try:
            categories.append(Category.model_validate(entry))
        except ValidationError as e:
            raise DataFileError(f"Invalid category #{index}: {e}")
    return categories


def load_data_file(path: Path) -> DataSource:
    """Read and parse the data file, keeping a pre-mutation snapshot."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DataFileError(f"Cannot read data file {path}: {e}")

    categories = parse_categories(text)
    logger.info(f"Loaded {sum(len(c.items) for c in categories)} records in {len(categories)} categories from {path}")
    return DataSource(
        path=path,
        text=text,
        original=snapshot_categories(categories),
        categories=categories,
    )


def write_data_file(path: Path, content: str, backup: bool = True) -> None:
    """Atomically replace the data file, optionally keeping a .bak copy."""
    if backup and path.exists():
        backup_path = path.with_name(path.name + ".bak")
        shutil.copy2(path, backup_path)
        logger.debug(f"Backed up {path} to {backup_path}")

    temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        temp_path.write_text(content, encoding="utf-8")
        os.replace(temp_path, path)
    except OSError as e:
        raise DataFileError(f"Cannot write data file {path}: {e}")
    finally:
        if temp_path.exists():
            temp_path.unlink()
