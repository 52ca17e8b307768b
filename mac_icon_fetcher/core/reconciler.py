"""Record reconciler: surgical text edits to the data file.

Original and updated records are paired by position (category index, item
index). For each pair, changed ``text``/``icon`` values are patched into the
source text: an existing icon value (including an empty ``""``, ``null`` or
``undefined`` placeholder) is replaced in place, otherwise a new field is
inserted. All edits are exact-literal substitutions, so comments, formatting and
unrelated fields stay byte-for-byte identical.

Known limitation: a substitution applies to every ``text: "<value>"``
occurrence in the file. Two records with the same name, or a category
named like a record, are all rewritten together. Icon insertion skips
assignments that are already followed by an icon field, so duplicates end
up with one icon each.
"""

import logging
import re
from dataclasses import dataclass
from typing import Sequence, Tuple

from ..models.records import ApplicationRecord, Category

logger = logging.getLogger(__name__)

TEXT_KEY = "text"
ICON_KEY = "icon"


@dataclass
class ReconcileResult:
    """Patched source text and the number of fields actually changed."""
    new_text: str
    changed_field_count: int

    @property
    def changed(self) -> bool:
        return self.changed_field_count > 0


def js_string_body(value: str, quote: str) -> str:
    """Escape ``value`` for use between ``quote`` characters in JS source."""
    return value.replace("\\", "\\\\").replace(quote, "\\" + quote).replace("\n", "\\n")


def _field_pattern(key: str, value: str) -> re.Pattern:
    """Match ``key: '<value>'`` or ``key: "<value>"`` (also quoted keys)."""
    alternatives = "|".join(
        re.escape(q + js_string_body(value, q) + q) for q in ("\"", "'")
    )
    return re.compile(
        rf"(?P<key>(?<![\w$]){key}|[\"']{key}[\"'])(?P<sep>\s*:\s*)(?P<value>{alternatives})"
    )


def replace_field_value(text: str, key: str, old: str, new: str) -> Tuple[str, int]:
    """Replace every ``key: "old"`` assignment with ``key: "new"``.

    The quote style of each occurrence is preserved.
    """
    def substitute(match: re.Match) -> str:
        quote = match.group("value")[0]
        return f"{match.group('key')}{match.group('sep')}{quote}{js_string_body(new, quote)}{quote}"

    return _field_pattern(key, old).subn(substitute, text)


def insert_icon_after_text(text: str, display_text: str, icon: str) -> Tuple[str, int]:
    """Insert ``icon: "<icon>"`` right after each ``text: "<display_text>"``.

    On a line of its own the new field goes on the next line with the same
    indentation; inside a one-line object it is inserted inline.
    """
    pattern = re.compile(
        _field_pattern(TEXT_KEY, display_text).pattern
        + rf"(?![ \t]*,\s*[\"']?{ICON_KEY}[\"']?\s*:)"
        + r"(?P<comma>[ \t]*,)?"
    )

    def substitute(match: re.Match) -> str:
        quote = match.group("value")[0]
        field = f"{ICON_KEY}: {quote}{js_string_body(icon, quote)}{quote}"
        assignment = f"{match.group('key')}{match.group('sep')}{match.group('value')}"

        line_start = text.rfind("\n", 0, match.start()) + 1
        indent = text[line_start:match.start()]
        if indent.strip():
            return f"{assignment}, {field}{match.group('comma') or ''}"
        # A missing comma means the text field closed its object
        trailing = "," if match.group("comma") else ""
        return f"{assignment},\n{indent}{field}{trailing}"

    return pattern.subn(substitute, text)


def fill_icon_placeholder(text: str, display_text: str, icon: str) -> Tuple[str, int]:
    """Set an empty ``icon`` field that follows ``text: "<display_text>"``.

    Empty means ``""``, ``''``, ``null`` or ``undefined``; the new value
    takes the quote style of the text field.
    """
    pattern = re.compile(
        _field_pattern(TEXT_KEY, display_text).pattern
        + rf"(?P<between>[ \t]*,\s*)(?P<icon_key>[\"']?{ICON_KEY}[\"']?\s*:\s*)"
        + r"(?:\"\"|''|null(?![\w$])|undefined(?![\w$]))"
    )

    def substitute(match: re.Match) -> str:
        quote = match.group("value")[0]
        return (
            f"{match.group('key')}{match.group('sep')}{match.group('value')}"
            f"{match.group('between')}{match.group('icon_key')}{quote}{js_string_body(icon, quote)}{quote}"
        )

    return pattern.subn(substitute, text)


def reconcile_record(text: str, original: ApplicationRecord, updated: ApplicationRecord) -> Tuple[str, int]:
    """Apply the edits for one record pair; returns (text, changed fields)."""
    changed = 0

    if original.display_text != updated.display_text:
        text, count = replace_field_value(text, TEXT_KEY, original.display_text, updated.display_text)
        if count:
            changed += 1
            logger.info(f"Renamed: {original.display_text!r} -> {updated.display_text!r}")
        else:
            logger.warning(f"Text field for {original.display_text!r} not found in source")

    if updated.icon and original.icon != updated.icon:
        if original.icon:
            text, count = replace_field_value(text, ICON_KEY, original.icon, updated.icon)
        else:
            text, count = fill_icon_placeholder(text, updated.display_text, updated.icon)
            if not count:
                text, count = insert_icon_after_text(text, updated.display_text, updated.icon)
            if not count and _field_pattern(ICON_KEY, updated.icon).search(text):
                logger.debug(f"Icon field for {updated.display_text!r} already present")
                return text, changed
        if count:
            changed += 1
            logger.info(f"Icon for {updated.display_text!r}: {original.icon!r} -> {updated.icon!r}")
        else:
            logger.warning(f"Could not place icon field for {updated.display_text!r}")

    return text, changed


def reconcile(
    source_text: str,
    original: Sequence[Category],
    updated: Sequence[Category],
) -> ReconcileResult:
    """Patch ``source_text`` so it reflects ``updated``.

    Categories or items present in only one list are skipped.
    """
    text = source_text
    total = 0

    for original_category, updated_category in zip(original, updated):
        for original_item, updated_item in zip(original_category.items, updated_category.items):
            text, changed = reconcile_record(text, original_item, updated_item)
            total += changed

    return ReconcileResult(new_text=text, changed_field_count=total)
